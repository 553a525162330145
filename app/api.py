"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from app.schemas import ApiReading, ErrorResponse, SeasonPayload, TemperatureResponse
from models.records import Reading, StationSeries
from services.errors import TemperatureMonitorError
from services.orchestrator import (
    FetchOrchestrator,
    ReportSource,
    TemperatureReport,
    build_default_orchestrator,
)
from services.pipeline import PipelineResult

logger = logging.getLogger(__name__)

router = APIRouter()


def get_orchestrator() -> FetchOrchestrator:
    return build_default_orchestrator()


def epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _api_readings(readings: Iterable[Reading]) -> list[ApiReading]:
    return [
        ApiReading(
            datetime=reading.timestamp.isoformat(),
            temperature=reading.temperature_celsius,
            date=reading.date_label,
            time=reading.time_label,
        )
        for reading in readings
    ]


def result_fields(result: PipelineResult) -> dict[str, Any]:
    """Response fields derived from a pipeline run, independent of where the data came from."""
    return {
        "stations": [StationSeries(result.station, result.series, result.dropped).to_station_payload()],
        "stationInfo": result.station.to_dict(),
        "series": _api_readings(result.series),
        "smoothed": _api_readings(result.smoothed),
        "season": SeasonPayload(
            season=result.verdict.season.value,
            message=result.verdict.message,
            description=result.verdict.description,
        ),
        "dropped": result.dropped,
    }


def serialize_report(report: TemperatureReport) -> TemperatureResponse:
    return TemperatureResponse(
        cached=report.cached,
        timestamp=epoch_ms(report.fetched_at),
        source=report.source.value,
        warning=report.warning,
        **result_fields(report.result),
    )


def _cache_headers(report: TemperatureReport, ttl_seconds: int, refresh: bool = False) -> dict[str, str]:
    # Forced refreshes and sample data must never be replayed from an HTTP cache.
    if refresh or report.source is ReportSource.fallback:
        cache_control = "no-store"
    else:
        cache_control = f"public, max-age={ttl_seconds}"
    return {
        "Cache-Control": cache_control,
        "X-Cache-Status": "HIT" if report.cached else "MISS",
        "X-Cache-Timestamp": report.fetched_at.astimezone(timezone.utc).isoformat(),
    }


@router.get(
    "/temperature",
    response_model=TemperatureResponse,
    summary="Station readings, 24h trailing average and season verdict.",
)
def get_temperature(
    refresh: bool = Query(False, description="Bypass the server cache and call the upstream API."),
    orchestrator: FetchOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    try:
        report = orchestrator.get_report(force_refresh=refresh)
    except TemperatureMonitorError as exc:
        logger.error("Temperature request failed", extra={"reason": str(exc)})
        body = ErrorResponse(error=str(exc), timestamp=epoch_ms(datetime.now(timezone.utc)))
        return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump())

    ttl_seconds = int(orchestrator.cache.ttl.total_seconds())
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=serialize_report(report).model_dump(mode="json"),
        headers=_cache_headers(report, ttl_seconds, refresh=refresh),
    )


@router.options("/temperature", include_in_schema=False)
def temperature_preflight() -> Response:
    return Response(
        status_code=status.HTTP_200_OK,
        content="",
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": "Content-Type",
            "Access-Control-Allow-Methods": "GET, OPTIONS",
        },
    )


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /temperature for data and /ui for charts."}
