"""Moving-average smoothing over an hourly series."""

from __future__ import annotations

import math
from enum import Enum
from typing import Sequence, Tuple

from models.records import Reading
from services.errors import InvalidArgumentError

DEFAULT_WINDOW_SIZE = 24


class WindowPolicy(str, Enum):
    """How the averaging window is placed around each index.

    ``trailing`` only looks backwards and is the policy used for anything that
    feeds season detection. ``centered`` includes future samples and is only
    suitable for display.
    """

    trailing = "trailing"
    centered = "centered"


def round_one_decimal(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def validate_window_size(window_size: int) -> int:
    if isinstance(window_size, bool) or not isinstance(window_size, int):
        raise InvalidArgumentError(f"Window size must be an integer, got {window_size!r}.")
    if window_size <= 0:
        raise InvalidArgumentError(f"Window size must be positive, got {window_size}.")
    return window_size


def window_bounds(
    index: int, length: int, window_size: int, policy: WindowPolicy = WindowPolicy.trailing
) -> Tuple[int, int]:
    """Return the half-open ``[start, stop)`` slice averaged for ``index``."""
    if policy is WindowPolicy.trailing:
        return max(0, index - window_size + 1), index + 1
    half = window_size // 2
    return max(0, index - half), min(length, index + half + 1)


class MovingAverageSmoother:
    """Pure component producing a same-length smoothed copy of a series."""

    def __init__(
        self,
        window_size: int = DEFAULT_WINDOW_SIZE,
        policy: WindowPolicy = WindowPolicy.trailing,
    ) -> None:
        self.window_size = validate_window_size(window_size)
        self.policy = WindowPolicy(policy)

    def smooth(self, series: Sequence[Reading]) -> Tuple[Reading, ...]:
        values = [reading.temperature_celsius for reading in series]
        length = len(values)
        smoothed: list[Reading] = []

        for index, reading in enumerate(series):
            start, stop = window_bounds(index, length, self.window_size, self.policy)
            window = values[start:stop]
            average = math.fsum(window) / len(window)
            smoothed.append(reading.with_temperature(round_one_decimal(average)))

        return tuple(smoothed)


def moving_average(
    series: Sequence[Reading],
    window_size: int = DEFAULT_WINDOW_SIZE,
    policy: WindowPolicy = WindowPolicy.trailing,
) -> Tuple[Reading, ...]:
    return MovingAverageSmoother(window_size=window_size, policy=policy).smooth(series)
