"""Coordination of cache, upstream fetch, fallback data and the pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, Optional

from datastore.timed_cache import CacheEntry, TimedCache, build_default_cache
from models.records import StationSeries
from services.errors import UpstreamUnavailableError
from services.pipeline import PipelineResult, TemperaturePipeline
from services.upstream import UpstreamClient, build_default_upstream
from settings import get_settings
from storage.sample_data import load_sample_data

logger = logging.getLogger(__name__)

SAMPLE_DATA_WARNING = "Using sample data (API temporarily unavailable)"
STALE_REFRESH_WARNING = "Refresh failed (API temporarily unavailable); showing cached data"


class ReportSource(str, Enum):
    cache = "cache"
    fresh = "fresh"
    fallback = "fallback"


@dataclass(frozen=True)
class TemperatureReport:
    result: PipelineResult
    source: ReportSource
    fetched_at: datetime
    warning: Optional[str] = None

    @property
    def cached(self) -> bool:
        return self.source is ReportSource.cache


class FetchOrchestrator:
    """Decides between cached, fresh and bundled sample data for each request.

    Only the normalized station series is cached; smoothing and season
    classification are recomputed on every call.
    """

    def __init__(
        self,
        upstream: UpstreamClient,
        cache: TimedCache[StationSeries],
        pipeline: TemperaturePipeline,
        sample_loader: Callable[[], Dict[str, Any]] = load_sample_data,
    ) -> None:
        self.upstream = upstream
        self.cache = cache
        self.pipeline = pipeline
        self.sample_loader = sample_loader

    def get_report(self, force_refresh: bool = False) -> TemperatureReport:
        now = self.cache.now()

        if not force_refresh:
            entry = self.cache.get(now)
            if entry is not None:
                return self._from_cache(entry, now)

        try:
            payload = self.upstream.fetch()
            station_series = self.pipeline.normalize(payload)
        except UpstreamUnavailableError as exc:
            logger.warning(
                "Upstream temperature API unavailable",
                extra={"reason": exc.reason, "status_code": exc.status_code},
            )
            entry = self.cache.get(now)
            if entry is not None:
                return self._from_cache(entry, now, warning=STALE_REFRESH_WARNING)
            return self._from_sample(now)

        entry = self.cache.put(station_series, now)
        result = self.pipeline.run_series(station_series, now)
        self._log_report("Serving fresh temperature data", ReportSource.fresh, result)
        return TemperatureReport(result=result, source=ReportSource.fresh, fetched_at=entry.created_at)

    def shutdown(self) -> None:
        self.upstream.close()

    def _from_cache(
        self, entry: CacheEntry[StationSeries], now: datetime, warning: Optional[str] = None
    ) -> TemperatureReport:
        result = self.pipeline.run_series(entry.payload, now)
        self._log_report("Serving cached temperature data", ReportSource.cache, result)
        return TemperatureReport(
            result=result,
            source=ReportSource.cache,
            fetched_at=entry.created_at,
            warning=warning,
        )

    def _from_sample(self, now: datetime) -> TemperatureReport:
        # SampleDataUnavailableError propagates: there is nothing left to serve.
        result = self.pipeline.run(self.sample_loader(), now)
        self._log_report("Serving bundled sample data", ReportSource.fallback, result)
        return TemperatureReport(
            result=result,
            source=ReportSource.fallback,
            fetched_at=now,
            warning=SAMPLE_DATA_WARNING,
        )

    @staticmethod
    def _log_report(message: str, source: ReportSource, result: PipelineResult) -> None:
        logger.info(
            message,
            extra={
                "source": source.value,
                "cache_status": "HIT" if source is ReportSource.cache else "MISS",
                "point_count": len(result.series),
                "dropped_count": result.dropped,
                "season": result.verdict.season.value,
            },
        )


@lru_cache
def build_default_orchestrator() -> FetchOrchestrator:
    """Factory that wires the orchestrator with the configured collaborators."""
    settings = get_settings()
    return FetchOrchestrator(
        upstream=build_default_upstream(),
        cache=build_default_cache(),
        pipeline=TemperaturePipeline(window_size=settings.window_size),
    )
