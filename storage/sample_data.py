"""Bundled sample dataset served when the upstream API is unreachable."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from services.errors import SampleDataUnavailableError
from settings import get_settings


def load_sample_data(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the static sample response, shaped exactly like an upstream reply."""
    sample_path = path if path is not None else get_settings().sample_data_path
    try:
        raw = sample_path.read_text(encoding="utf-8")
        payload = json.loads(raw)
    except (OSError, json.JSONDecodeError) as exc:
        raise SampleDataUnavailableError(f"Sample data at {sample_path} is unavailable: {exc}") from exc

    if not isinstance(payload, dict) or not payload.get("stations"):
        raise SampleDataUnavailableError(f"Sample data at {sample_path} contains no stations.")
    return payload
