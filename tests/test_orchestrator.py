from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import pytest

from datastore.timed_cache import TimedCache
from models.records import StationSeries
from services.errors import SampleDataUnavailableError, UpstreamUnavailableError
from services.orchestrator import (
    SAMPLE_DATA_WARNING,
    STALE_REFRESH_WARNING,
    FetchOrchestrator,
    ReportSource,
)
from services.pipeline import TemperaturePipeline

_T0 = datetime(2024, 10, 21, 8, 0, tzinfo=timezone.utc)


def _payload(value: str, title: str = "Vasastan, Örebro", count: int = 30) -> Dict[str, Any]:
    start = datetime(2024, 10, 14)
    return {
        "stations": [
            {
                "title": title,
                "id": "vasastan",
                "temp": value,
                "data": [
                    {
                        "datetime": (start + timedelta(hours=i)).strftime("%Y-%m-%d %H:%M:%S"),
                        "temperatur": value,
                    }
                    for i in range(count)
                ],
            }
        ]
    }


class FakeClock:
    def __init__(self) -> None:
        self.now = _T0

    def __call__(self) -> datetime:
        return self.now


class FakeUpstream:
    def __init__(self, payload: Optional[Dict[str, Any]] = None) -> None:
        self.payload = payload if payload is not None else _payload("12.5")
        self.error: Optional[Exception] = None
        self.calls = 0
        self.closed = False

    def fetch(self) -> Dict[str, Any]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.payload

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def cache(clock: FakeClock) -> TimedCache[StationSeries]:
    return TimedCache(clock=clock)


@pytest.fixture()
def orchestrator(upstream: FakeUpstream, cache: TimedCache[StationSeries]) -> FetchOrchestrator:
    return FetchOrchestrator(
        upstream=upstream,  # type: ignore[arg-type]
        cache=cache,
        pipeline=TemperaturePipeline(),
        sample_loader=lambda: _payload("3.0", title="Sample station"),
    )


def test_cache_miss_fetches_and_stores_normalized_series(
    orchestrator: FetchOrchestrator, upstream: FakeUpstream, cache: TimedCache[StationSeries]
) -> None:
    report = orchestrator.get_report()

    assert report.source is ReportSource.fresh
    assert report.cached is False
    assert report.warning is None
    assert report.fetched_at == _T0
    assert upstream.calls == 1

    entry = cache.peek()
    assert entry is not None
    assert isinstance(entry.payload, StationSeries)
    assert entry.payload.readings == report.result.series


def test_cache_hit_skips_upstream(
    orchestrator: FetchOrchestrator, upstream: FakeUpstream, clock: FakeClock
) -> None:
    first = orchestrator.get_report()
    clock.now = _T0 + timedelta(minutes=54)

    second = orchestrator.get_report()

    assert upstream.calls == 1
    assert second.source is ReportSource.cache
    assert second.cached is True
    assert second.fetched_at == first.fetched_at
    assert second.result.series == first.result.series
    assert second.result.computed_at == _T0 + timedelta(minutes=54)


def test_expired_cache_fetches_again(
    orchestrator: FetchOrchestrator, upstream: FakeUpstream, clock: FakeClock
) -> None:
    orchestrator.get_report()
    clock.now = _T0 + timedelta(minutes=55)
    upstream.payload = _payload("-4.0")

    report = orchestrator.get_report()

    assert upstream.calls == 2
    assert report.source is ReportSource.fresh
    assert report.fetched_at == _T0 + timedelta(minutes=55)
    assert report.result.series[0].temperature_celsius == -4.0


def test_force_refresh_bypasses_valid_cache(orchestrator: FetchOrchestrator, upstream: FakeUpstream) -> None:
    orchestrator.get_report()

    report = orchestrator.get_report(force_refresh=True)

    assert upstream.calls == 2
    assert report.source is ReportSource.fresh


def test_upstream_failure_falls_back_to_sample_data(
    orchestrator: FetchOrchestrator, upstream: FakeUpstream, cache: TimedCache[StationSeries]
) -> None:
    upstream.error = UpstreamUnavailableError("request timeout")

    report = orchestrator.get_report()

    assert report.source is ReportSource.fallback
    assert report.warning == SAMPLE_DATA_WARNING
    assert report.result.station.title == "Sample station"
    assert len(report.result.smoothed) == len(report.result.series)
    assert cache.peek() is None


def test_empty_station_list_falls_back(orchestrator: FetchOrchestrator, upstream: FakeUpstream) -> None:
    upstream.payload = {"stations": []}

    report = orchestrator.get_report()

    assert report.source is ReportSource.fallback


def test_failed_refresh_serves_valid_cache_with_warning(
    orchestrator: FetchOrchestrator, upstream: FakeUpstream
) -> None:
    first = orchestrator.get_report()
    upstream.error = UpstreamUnavailableError("HTTP 502", status_code=502)

    report = orchestrator.get_report(force_refresh=True)

    assert report.source is ReportSource.cache
    assert report.warning == STALE_REFRESH_WARNING
    assert report.result.series == first.result.series


def test_missing_sample_data_propagates(upstream: FakeUpstream, cache: TimedCache[StationSeries]) -> None:
    def broken_loader() -> Dict[str, Any]:
        raise SampleDataUnavailableError("gone")

    orchestrator = FetchOrchestrator(
        upstream=upstream,  # type: ignore[arg-type]
        cache=cache,
        pipeline=TemperaturePipeline(),
        sample_loader=broken_loader,
    )
    upstream.error = UpstreamUnavailableError("request timeout")

    with pytest.raises(SampleDataUnavailableError):
        orchestrator.get_report()


def test_shutdown_closes_upstream(orchestrator: FetchOrchestrator, upstream: FakeUpstream) -> None:
    orchestrator.shutdown()

    assert upstream.closed is True
