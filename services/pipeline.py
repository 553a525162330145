"""Pure trend/season pipeline: raw upstream data in, series and verdict out."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Tuple

from models.records import Reading, SeasonVerdict, StationInfo, StationSeries
from services.classifier import DEFAULT_SAMPLES_PER_DAY, SeasonClassifier
from services.normalizer import SeriesNormalizer
from services.smoother import DEFAULT_WINDOW_SIZE, MovingAverageSmoother, WindowPolicy


@dataclass(frozen=True)
class PipelineResult:
    station: StationInfo
    series: Tuple[Reading, ...]
    smoothed: Tuple[Reading, ...]
    verdict: SeasonVerdict
    computed_at: datetime
    dropped: int = 0


class TemperaturePipeline:
    """Normalizer, trailing smoother and classifier wired in sequence.

    The smoother is always trailing here: the classifier must never see
    values derived from later samples.
    """

    def __init__(
        self,
        normalizer: Optional[SeriesNormalizer] = None,
        window_size: int = DEFAULT_WINDOW_SIZE,
        samples_per_day: int = DEFAULT_SAMPLES_PER_DAY,
    ) -> None:
        self.normalizer = normalizer or SeriesNormalizer()
        self.smoother = MovingAverageSmoother(window_size=window_size, policy=WindowPolicy.trailing)
        self.classifier = SeasonClassifier(samples_per_day=samples_per_day)

    def normalize(self, raw_api_data: Any) -> StationSeries:
        return self.normalizer.normalize_station(raw_api_data)

    def run(self, raw_api_data: Any, now: datetime) -> PipelineResult:
        return self.run_series(self.normalize(raw_api_data), now)

    def run_series(self, station_series: StationSeries, now: datetime) -> PipelineResult:
        series = station_series.readings
        smoothed = self.smoother.smooth(series)
        verdict = self.classifier.classify(smoothed)
        return PipelineResult(
            station=station_series.station,
            series=series,
            smoothed=smoothed,
            verdict=verdict,
            computed_at=now,
            dropped=station_series.dropped,
        )


def run_pipeline(
    raw_api_data: Any,
    now: datetime,
    window_size: int = DEFAULT_WINDOW_SIZE,
    samples_per_day: int = DEFAULT_SAMPLES_PER_DAY,
) -> PipelineResult:
    pipeline = TemperaturePipeline(window_size=window_size, samples_per_day=samples_per_day)
    return pipeline.run(raw_api_data, now)
