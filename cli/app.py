from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import typer

from app.api import epoch_ms, result_fields
from app.schemas import TemperatureResponse
from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.local_cache import LocalResponseCache
from cli.render import render_report
from services.errors import TemperatureMonitorError
from services.pipeline import TemperaturePipeline
from services.smoother import DEFAULT_WINDOW_SIZE


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient
    cache: LocalResponseCache


app = typer.Typer(
    help="Utilities for the temperature monitor service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Temperature service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the service before giving up.",
    ),
    cache_path: Optional[Path] = typer.Option(
        None,
        "--cache-path",
        help="Location of the local response cache file.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout, cache_path=cache_path)
    client = ApiClient(config)
    cache = LocalResponseCache(config.cache_path, ttl=timedelta(minutes=config.cache_ttl_minutes))
    ctx.obj = CLIState(config=config, client=client, cache=cache)
    ctx.call_on_close(client.close)


@app.command("fetch")
def fetch_command(
    ctx: typer.Context,
    refresh: bool = typer.Option(
        False,
        "--refresh/--no-refresh",
        help="Skip both caches and ask the service for fresh upstream data.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw response document."),
) -> None:
    """Show station readings, moving average and season from the service."""
    state = _get_state(ctx)
    from_local_cache = False
    payload = None

    if not refresh:
        entry = state.cache.load()
        if entry is not None:
            payload = entry.payload
            from_local_cache = True

    if payload is None:
        payload = state.client.get_temperature(refresh=refresh)
        if payload.get("source") != "fallback":
            state.cache.save(payload)

    if as_json:
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return
    render_report(payload, from_local_cache=from_local_cache)


@app.command("analyze")
def analyze_command(
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="JSON file in the upstream response shape."
    ),
    window_size: int = typer.Option(
        DEFAULT_WINDOW_SIZE, "--window-size", "-w", help="Trailing moving-average window in samples."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result document instead of a summary."),
) -> None:
    """Run the trend and season pipeline on a local file without the service."""
    try:
        raw = json.loads(file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"Could not read JSON from {file}: {exc}") from exc

    now = datetime.now(timezone.utc)
    try:
        pipeline = TemperaturePipeline(window_size=window_size)
        result = pipeline.run(raw, now)
    except TemperatureMonitorError as exc:
        typer.secho(f"Analysis failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    payload = TemperatureResponse(
        cached=False,
        timestamp=epoch_ms(now),
        source="file",
        **result_fields(result),
    ).model_dump(mode="json")

    if as_json:
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return
    render_report(payload)
