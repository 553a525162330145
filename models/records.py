"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True, slots=True)
class Reading:
    """A single hourly temperature reading from the station."""

    timestamp: datetime
    temperature_celsius: float

    @property
    def date_label(self) -> str:
        """Short chart axis label, e.g. ``Oct 14``."""
        return f"{self.timestamp.strftime('%b')} {self.timestamp.day}"

    @property
    def time_label(self) -> str:
        return self.timestamp.strftime("%I:%M %p")

    def with_temperature(self, value: float) -> "Reading":
        return Reading(timestamp=self.timestamp, temperature_celsius=value)

    def to_raw(self) -> Dict[str, str]:
        """Render the reading back into the upstream ``{datetime, temperatur}`` shape."""
        return {
            "datetime": self.timestamp.isoformat(sep=" "),
            "temperatur": f"{self.temperature_celsius}",
        }


@dataclass(frozen=True, slots=True)
class StationInfo:
    """Station metadata as reported by the upstream API."""

    title: str
    id: str
    temp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "id": self.id, "temp": self.temp}


@dataclass(frozen=True, slots=True)
class StationSeries:
    """Normalized readings for one station plus the number of dropped points."""

    station: StationInfo
    readings: Tuple[Reading, ...]
    dropped: int = 0

    def to_station_payload(self) -> Dict[str, Any]:
        payload = self.station.to_dict()
        payload["data"] = [reading.to_raw() for reading in self.readings]
        return payload


class Season(str, Enum):
    """Season labels inferred from the smoothed trend."""

    summer = "summer"
    autumn = "autumn"
    winter = "winter"
    unknown = "unknown"


_DESCRIPTIONS = {
    Season.summer: "Daily average temperature has been above 10°C recently",
    Season.autumn: "Daily average temperature has been below 10°C for more than 5 days",
    Season.winter: "Daily average temperature has been below 0°C for more than 5 days",
    Season.unknown: "",
}


@dataclass(frozen=True, slots=True)
class SeasonVerdict:
    season: Season
    message: str = ""

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self.season]
