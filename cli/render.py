from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

import typer

_SEASON_COLORS = {
    "summer": typer.colors.YELLOW,
    "autumn": typer.colors.RED,
    "winter": typer.colors.BLUE,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_timestamp(epoch_ms: Any) -> str:
    if not isinstance(epoch_ms, (int, float)):
        return "unknown"
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="seconds")


def _temperatures(points: List[Dict[str, Any]]) -> List[float]:
    return [point["temperature"] for point in points if isinstance(point.get("temperature"), (int, float))]


def render_report(payload: Dict[str, Any], tail: int = 6, from_local_cache: bool = False) -> None:
    station = payload.get("stationInfo") or {}
    echo_heading("Station")
    echo_key_values(
        [
            ("title", station.get("title")),
            ("id", station.get("id")),
            ("current_temp", station.get("temp")),
        ]
    )

    typer.echo()
    echo_heading("Source")
    source = "local cache" if from_local_cache else payload.get("source")
    echo_key_values(
        [
            ("source", source),
            ("server_cached", payload.get("cached")),
            ("fetched_at", _format_timestamp(payload.get("timestamp"))),
            ("dropped_points", payload.get("dropped", 0)),
        ]
    )
    warning = payload.get("warning")
    if warning:
        typer.secho(f"warning: {warning}", fg=typer.colors.YELLOW)

    series = payload.get("series") or []
    smoothed = payload.get("smoothed") or []
    typer.echo()
    echo_heading("Readings")
    values = _temperatures(series)
    if values:
        echo_key_values(
            [
                ("points", len(values)),
                ("min", min(values)),
                ("max", max(values)),
            ]
        )
        typer.echo("latest (raw / moving average):")
        for point, average in list(zip(series, smoothed))[-tail:]:
            typer.echo(
                f"  - {point.get('date')} {point.get('time')}: "
                f"{point.get('temperature')}°C / {average.get('temperature')}°C"
            )
    else:
        typer.echo("No readings available.")

    season = payload.get("season") or {}
    typer.echo()
    echo_heading("Season")
    name = season.get("season", "unknown")
    if season.get("message"):
        typer.secho(season["message"], fg=_SEASON_COLORS.get(name), bold=True)
        typer.echo(season.get("description", ""))
    else:
        typer.echo("No season detected.")
