from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

from cli.local_cache import LocalResponseCache

_T0 = datetime(2024, 10, 21, 8, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self) -> None:
        self.now = _T0

    def __call__(self) -> datetime:
        return self.now


def test_save_and_load_within_ttl(tmp_path) -> None:
    clock = FakeClock()
    cache = LocalResponseCache(tmp_path / "nested" / "response.json", ttl=timedelta(minutes=55), clock=clock)
    payload = {"stationInfo": {"id": "vasastan"}, "series": []}

    cache.save(payload)
    clock.now = _T0 + timedelta(minutes=54, seconds=59)
    entry = cache.load()

    assert entry is not None
    assert entry.payload == payload
    assert entry.created_at == _T0
    document = json.loads((tmp_path / "nested" / "response.json").read_text())
    assert set(document) == {"data", "stationInfo", "timestamp"}


def test_expired_document_is_removed(tmp_path) -> None:
    clock = FakeClock()
    path = tmp_path / "response.json"
    cache = LocalResponseCache(path, ttl=timedelta(minutes=55), clock=clock)
    cache.save({"stationInfo": None})

    clock.now = _T0 + timedelta(minutes=55)

    assert cache.load() is None
    assert not path.exists()


def test_unreadable_document_is_removed(tmp_path) -> None:
    path = tmp_path / "response.json"
    path.write_text("{not json")
    cache = LocalResponseCache(path, ttl=timedelta(minutes=55), clock=FakeClock())

    assert cache.load() is None
    assert not path.exists()


def test_missing_document_loads_nothing(tmp_path) -> None:
    cache = LocalResponseCache(tmp_path / "response.json", ttl=timedelta(minutes=55), clock=FakeClock())

    assert cache.load() is None
