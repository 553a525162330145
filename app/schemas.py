"""Pydantic schemas for the upstream payload and the HTTP API layer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UpstreamStation(BaseModel):
    """One station block from the temperatur.nu response.

    ``data`` stays untyped: individual points are validated by the normalizer
    so that one malformed point never rejects the whole station.
    """

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    id: str = ""
    temp: Optional[str] = None
    data: List[Any] = Field(default_factory=list)

    @field_validator("title", "id", "temp", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class UpstreamResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    stations: List[UpstreamStation] = Field(..., min_length=1)


class ApiReading(BaseModel):
    """A reading as exposed to the chart UI."""

    datetime: str
    temperature: float
    date: str
    time: str


class SeasonPayload(BaseModel):
    season: str
    message: str
    description: str


class TemperatureResponse(BaseModel):
    """Successful ``GET /temperature`` body."""

    success: bool = True
    cached: bool
    timestamp: int = Field(..., description="Epoch milliseconds of the underlying fetch.")
    source: str
    warning: Optional[str] = None
    stations: List[Dict[str, Any]]
    stationInfo: Dict[str, Any]
    series: List[ApiReading]
    smoothed: List[ApiReading]
    season: SeasonPayload
    dropped: int = 0


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    timestamp: int
