from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 15.0
DEFAULT_CACHE_TTL_MINUTES = 55
DEFAULT_CACHE_PATH = Path.home() / ".cache" / "temperature-monitor" / "response.json"

_BASE_URL_ENV = "API_BASE_URL"
_TIMEOUT_ENV = "CLI_TIMEOUT"
_CACHE_PATH_ENV = "CLI_CACHE_PATH"
_CACHE_TTL_ENV = "CLI_CACHE_TTL_MINUTES"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    cache_path: Path = field(default=DEFAULT_CACHE_PATH)
    cache_ttl_minutes: int = DEFAULT_CACHE_TTL_MINUTES


def _read_float(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_int(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def load_config(
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    cache_path: Optional[Path] = None,
) -> CLIConfig:
    url = base_url or os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL
    if timeout is None:
        timeout = _read_float(os.getenv(_TIMEOUT_ENV), DEFAULT_TIMEOUT)
    if cache_path is None:
        env_path = (os.getenv(_CACHE_PATH_ENV) or "").strip()
        cache_path = Path(env_path).expanduser() if env_path else DEFAULT_CACHE_PATH
    return CLIConfig(
        base_url=url.rstrip("/"),
        timeout=timeout,
        cache_path=cache_path,
        cache_ttl_minutes=_read_int(os.getenv(_CACHE_TTL_ENV), DEFAULT_CACHE_TTL_MINUTES),
    )
