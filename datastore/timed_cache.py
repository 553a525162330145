"""Single-slot cache with a fixed time-to-live."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from threading import Lock
from typing import Callable, Generic, Optional, TypeVar

from models.records import StationSeries
from settings import get_settings

T = TypeVar("T")

DEFAULT_TTL = timedelta(minutes=55)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Immutable cached payload stamped with its creation time."""

    payload: T
    created_at: datetime
    ttl: timedelta = DEFAULT_TTL

    @property
    def expires_at(self) -> datetime:
        return self.created_at + self.ttl

    def is_valid(self, now: datetime) -> bool:
        # At exactly ``ttl`` the entry is already stale.
        return now - self.created_at < self.ttl

    def age(self, now: datetime) -> timedelta:
        return now - self.created_at


def is_valid(entry: Optional[CacheEntry], now: datetime) -> bool:
    """Return True iff ``entry`` exists and is younger than its TTL at ``now``."""
    return entry is not None and entry.is_valid(now)


class TimedCache(Generic[T]):
    """Holds at most one :class:`CacheEntry`, replaced wholesale on every put.

    Reads and writes swap an immutable entry under a lock, so concurrent
    callers never observe a half-written value. The last writer wins.
    """

    def __init__(self, ttl: timedelta = DEFAULT_TTL, clock: Clock = utc_now) -> None:
        if ttl <= timedelta(0):
            raise ValueError("Cache TTL must be positive.")
        self.ttl = ttl
        self._clock = clock
        self._entry: Optional[CacheEntry[T]] = None
        self._lock = Lock()

    def now(self) -> datetime:
        return self._clock()

    def peek(self) -> Optional[CacheEntry[T]]:
        """Return whatever is in the slot, valid or not."""
        with self._lock:
            return self._entry

    def get(self, now: Optional[datetime] = None) -> Optional[CacheEntry[T]]:
        current = now if now is not None else self._clock()
        entry = self.peek()
        if is_valid(entry, current):
            return entry
        return None

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return self.get(now) is not None

    def put(self, payload: T, now: Optional[datetime] = None) -> CacheEntry[T]:
        created_at = now if now is not None else self._clock()
        entry = CacheEntry(payload=payload, created_at=created_at, ttl=self.ttl)
        with self._lock:
            self._entry = entry
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entry = None


@lru_cache
def build_default_cache(ttl_minutes: Optional[int] = None) -> TimedCache[StationSeries]:
    settings = get_settings()
    minutes = settings.cache_ttl_minutes if ttl_minutes is None else ttl_minutes
    return TimedCache(ttl=timedelta(minutes=minutes))
