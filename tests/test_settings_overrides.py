from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Iterable

from datastore.timed_cache import build_default_cache
from services.orchestrator import build_default_orchestrator
from services.upstream import build_default_upstream
from settings import DEFAULT_SAMPLE_DATA_PATH, get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


_CACHES = (get_settings, build_default_cache, build_default_upstream, build_default_orchestrator)


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    sample_path = tmp_path / "sample.json"

    monkeypatch.setenv("TEMPERATURE_API_URL", "http://example.test/api.php")
    monkeypatch.setenv("TEMPERATURE_STATION_ID", "centrum")
    monkeypatch.setenv("TEMPERATURE_REQUEST_TIMEOUT", "12.5")
    monkeypatch.setenv("TEMPERATURE_CACHE_TTL_MINUTES", "30")
    monkeypatch.setenv("TEMPERATURE_WINDOW_SIZE", "6")
    monkeypatch.setenv("TEMPERATURE_SAMPLE_DATA_PATH", str(sample_path))
    monkeypatch.setenv("TEMPERATURE_CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    _clear_caches(_CACHES)
    orchestrator = build_default_orchestrator()

    try:
        settings = get_settings()
        assert settings.sample_data_path == Path(sample_path)
        assert settings.cors_origins == ("http://a.test", "http://b.test")
        assert settings.log_level == "DEBUG"
        assert orchestrator.upstream.url == "http://example.test/api.php"
        assert orchestrator.upstream.station_id == "centrum"
        assert orchestrator.upstream.timeout == 12.5
        assert orchestrator.cache.ttl == timedelta(minutes=30)
        assert orchestrator.pipeline.smoother.window_size == 6
    finally:
        orchestrator.shutdown()
        _clear_caches(_CACHES)


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("TEMPERATURE_REQUEST_TIMEOUT", "soon")
    monkeypatch.setenv("TEMPERATURE_CACHE_TTL_MINUTES", "-5")
    monkeypatch.setenv("TEMPERATURE_WINDOW_SIZE", "0")
    monkeypatch.setenv("TEMPERATURE_STATION_ID", "   ")
    monkeypatch.setenv("TEMPERATURE_SAMPLE_DATA_PATH", "")

    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.request_timeout == 10.0
        assert settings.cache_ttl_minutes == 55
        assert settings.window_size == 24
        assert settings.station_id == "vasastan"
        assert settings.sample_data_path == DEFAULT_SAMPLE_DATA_PATH
    finally:
        get_settings.cache_clear()
