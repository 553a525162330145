"""Season detection over the trailing portion of a smoothed series."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from models.records import Reading, Season, SeasonVerdict
from services.errors import InvalidArgumentError

WINTER_THRESHOLD = 0.0
AUTUMN_THRESHOLD = 10.0
LOOKBACK_DAYS = 5
DEFAULT_SAMPLES_PER_DAY = 24

_MESSAGES = {
    Season.summer: "Seems like it's summer!",
    Season.autumn: "Seems like it's autumn!",
    Season.winter: "Seems like it's winter!",
    Season.unknown: "",
}


def consecutive_below(values: Sequence[float], threshold: float) -> int:
    """Count trailing values strictly below ``threshold``, walking back from the end."""
    count = 0
    for value in reversed(values):
        if value >= threshold:
            break
        count += 1
    return count


@dataclass(frozen=True)
class SeasonSignals:
    """Intermediate measurements behind a verdict, useful for logging and tests."""

    consecutive_below_winter: int
    consecutive_below_autumn: int
    recently_warm: bool
    lookback: int


class SeasonClassifier:
    """Classify the current season from a trailing-smoothed series.

    Winter is checked before autumn: a run below 0°C is also a run below 10°C,
    so the stricter rule has to win.
    """

    def __init__(self, samples_per_day: int = DEFAULT_SAMPLES_PER_DAY) -> None:
        if isinstance(samples_per_day, bool) or not isinstance(samples_per_day, int) or samples_per_day <= 0:
            raise InvalidArgumentError(
                f"Samples per day must be a positive integer, got {samples_per_day!r}."
            )
        self.samples_per_day = samples_per_day
        self.lookback = LOOKBACK_DAYS * samples_per_day

    def signals(self, smoothed: Sequence[Reading]) -> SeasonSignals:
        values = [reading.temperature_celsius for reading in smoothed]
        recent = values[-self.lookback:] if values else []
        return SeasonSignals(
            consecutive_below_winter=consecutive_below(values, WINTER_THRESHOLD),
            consecutive_below_autumn=consecutive_below(values, AUTUMN_THRESHOLD),
            recently_warm=any(value > AUTUMN_THRESHOLD for value in recent),
            lookback=self.lookback,
        )

    def classify(self, smoothed: Sequence[Reading]) -> SeasonVerdict:
        signals = self.signals(smoothed)

        if signals.consecutive_below_winter >= self.lookback:
            season = Season.winter
        elif signals.consecutive_below_autumn >= self.lookback:
            season = Season.autumn
        elif signals.recently_warm:
            season = Season.summer
        else:
            season = Season.unknown

        return SeasonVerdict(season=season, message=_MESSAGES[season])


def classify(smoothed: Sequence[Reading], samples_per_day: int = DEFAULT_SAMPLES_PER_DAY) -> SeasonVerdict:
    return SeasonClassifier(samples_per_day=samples_per_day).classify(smoothed)
