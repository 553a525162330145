"""Conversion of raw upstream text pairs into an ordered numeric series."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Tuple

from pydantic import ValidationError

from app.schemas import UpstreamResponse
from models.records import Reading, StationInfo, StationSeries
from services.errors import ParseError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

# Plain decimal notation with "." as separator; no locale, no underscores.
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

_TEMPERATURE_KEYS = ("temperatur", "temperature")


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 style timestamp.

    A trailing ``Z`` is read as UTC. Naive values are returned naive: they are
    station wall-clock times as delivered upstream.
    """
    if value is None:
        raise ParseError("missing timestamp", value)
    if not isinstance(value, str):
        raise ParseError("timestamp is not text", value)
    candidate = value.strip()
    if not candidate:
        raise ParseError("missing timestamp", value)

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ParseError("invalid timestamp", value) from exc

    if parsed.tzinfo is not None:
        return parsed.astimezone(timezone.utc)
    return parsed


def parse_temperature(value: Any) -> float:
    if value is None:
        raise ParseError("missing temperature", value)
    if not isinstance(value, str):
        raise ParseError("temperature is not text", value)
    candidate = value.strip()
    if not candidate:
        raise ParseError("missing temperature", value)
    if not _DECIMAL_PATTERN.fullmatch(candidate):
        raise ParseError("invalid numeric value", value)

    parsed = float(candidate)
    if not math.isfinite(parsed):
        raise ParseError("temperature out of range", value)
    return parsed


@dataclass(frozen=True)
class PointError:
    index: int
    reason: str


@dataclass(frozen=True)
class NormalizationResult:
    readings: Tuple[Reading, ...]
    errors: Tuple[PointError, ...] = ()

    @property
    def dropped(self) -> int:
        return len(self.errors)


class SeriesNormalizer:
    """Pure component turning upstream points into :class:`Reading` values.

    Malformed points are dropped and recorded; the rest of the batch is kept
    in upstream order.
    """

    def normalize(self, points: Iterable[Any]) -> NormalizationResult:
        readings: list[Reading] = []
        errors: list[PointError] = []

        for index, point in enumerate(points):
            try:
                readings.append(self._normalize_point(point))
            except ParseError as exc:
                errors.append(PointError(index=index, reason=exc.reason))
                logger.warning(
                    "Dropping malformed reading",
                    extra={"index": index, "reason": exc.reason},
                )

        return NormalizationResult(readings=tuple(readings), errors=tuple(errors))

    def normalize_station(self, payload: Any) -> StationSeries:
        """Validate an upstream response and normalize its first station."""
        if not isinstance(payload, Mapping):
            raise UpstreamUnavailableError("response is not a JSON object")
        stations = payload.get("stations")
        if not isinstance(stations, list) or not stations:
            raise UpstreamUnavailableError("no stations data received from API")

        try:
            response = UpstreamResponse.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamUnavailableError(f"unexpected response shape: {exc.error_count()} error(s)") from exc

        station = response.stations[0]
        result = self.normalize(station.data)
        return StationSeries(
            station=StationInfo(title=station.title, id=station.id, temp=station.temp),
            readings=result.readings,
            dropped=result.dropped,
        )

    @staticmethod
    def _normalize_point(point: Any) -> Reading:
        if isinstance(point, Reading):
            if not math.isfinite(point.temperature_celsius):
                raise ParseError("temperature out of range", point.temperature_celsius)
            return point

        if not isinstance(point, Mapping):
            raise ParseError("reading is not an object", point)

        timestamp = parse_timestamp(point.get("datetime"))
        raw_temperature = None
        for key in _TEMPERATURE_KEYS:
            if key in point:
                raw_temperature = point[key]
                break
        temperature = parse_temperature(raw_temperature)
        return Reading(timestamp=timestamp, temperature_celsius=temperature)
