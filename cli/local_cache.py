"""File-backed secondary cache for proxy responses.

Mirrors the browser-storage cache of the web UI: one JSON document shaped
``{data, stationInfo, timestamp}`` where ``timestamp`` is epoch milliseconds.
It is an optimization only; the server cache stays authoritative.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from datastore.timed_cache import CacheEntry, Clock, utc_now


class LocalResponseCache:

    def __init__(self, path: Path, ttl: timedelta, clock: Clock = utc_now) -> None:
        self.path = path
        self.ttl = ttl
        self._clock = clock

    def load(self) -> Optional[CacheEntry[Dict[str, Any]]]:
        if not self.path.exists():
            return None
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
            created_at = datetime.fromtimestamp(document["timestamp"] / 1000, tz=timezone.utc)
            entry = CacheEntry(payload=document["data"], created_at=created_at, ttl=self.ttl)
        except (OSError, ValueError, KeyError, TypeError):
            self.clear()
            return None

        if not entry.is_valid(self._clock()):
            self.clear()
            return None
        return entry

    def save(self, payload: Dict[str, Any]) -> CacheEntry[Dict[str, Any]]:
        now = self._clock()
        document = {
            "data": payload,
            "stationInfo": payload.get("stationInfo"),
            "timestamp": int(now.timestamp() * 1000),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(document), encoding="utf-8")
        return CacheEntry(payload=payload, created_at=now, ttl=self.ttl)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
