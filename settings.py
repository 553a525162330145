from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple


_API_URL_ENV = "TEMPERATURE_API_URL"
_STATION_ID_ENV = "TEMPERATURE_STATION_ID"
_API_CLIENT_ENV = "TEMPERATURE_API_CLIENT"
_API_SPAN_ENV = "TEMPERATURE_API_SPAN"
_REQUEST_TIMEOUT_ENV = "TEMPERATURE_REQUEST_TIMEOUT"
_CACHE_TTL_ENV = "TEMPERATURE_CACHE_TTL_MINUTES"
_WINDOW_SIZE_ENV = "TEMPERATURE_WINDOW_SIZE"
_SAMPLE_DATA_ENV = "TEMPERATURE_SAMPLE_DATA_PATH"
_CORS_ORIGINS_ENV = "TEMPERATURE_CORS_ORIGINS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_SAMPLE_DATA_PATH = Path(__file__).resolve().parent / "storage" / "sample_data.json"


@dataclass(frozen=True)
class Settings:
    api_url: str
    station_id: str
    api_client: str
    api_span: str
    request_timeout: float
    cache_ttl_minutes: int
    window_size: int
    sample_data_path: Path
    cors_origins: Tuple[str, ...]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_path(name: str, default: Path) -> Path:
    value: Optional[str] = os.getenv(name)
    if value is None or not value.strip():
        return default
    return Path(value.strip()).expanduser()


def _read_origins(default: str) -> Tuple[str, ...]:
    raw = _read_str_env(_CORS_ORIGINS_ENV, default)
    origins = tuple(origin.strip() for origin in raw.split(",") if origin.strip())
    return origins or (default,)


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        api_url=_read_str_env(_API_URL_ENV, "http://api.temperatur.nu/tnu_1.17.php"),
        station_id=_read_str_env(_STATION_ID_ENV, "vasastan"),
        api_client=_read_str_env(_API_CLIENT_ENV, "apan"),
        api_span=_read_str_env(_API_SPAN_ENV, "1week"),
        request_timeout=_read_positive_float(_REQUEST_TIMEOUT_ENV, 10.0),
        cache_ttl_minutes=_read_positive_int(_CACHE_TTL_ENV, 55),
        window_size=_read_positive_int(_WINDOW_SIZE_ENV, 24),
        sample_data_path=_read_path(_SAMPLE_DATA_ENV, DEFAULT_SAMPLE_DATA_PATH),
        cors_origins=_read_origins("*"),
        log_level=_read_log_level("INFO"),
    )
