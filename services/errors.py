"""Exceptions raised by the temperature pipeline and its collaborators.

All of them inherit from :class:`TemperatureMonitorError` so callers can catch
everything the service raises with a single ``except`` clause.
"""

from __future__ import annotations

from typing import Optional


class TemperatureMonitorError(Exception):
    """Base exception for the temperature monitor."""


class ParseError(TemperatureMonitorError, ValueError):
    """A timestamp or temperature text could not be parsed.

    The normalizer catches this per point and drops the offending reading.
    """

    def __init__(self, reason: str, value: object = None) -> None:
        self.reason = reason
        self.value = value
        super().__init__(f"{reason}: {value!r}")


class InvalidArgumentError(TemperatureMonitorError, ValueError):
    """A caller passed an argument outside the accepted domain."""


class UpstreamUnavailableError(TemperatureMonitorError):
    """The upstream temperature API could not deliver usable data.

    Covers transport failures, timeouts, non-2xx responses, undecodable
    bodies, and responses without any station.
    """

    def __init__(self, reason: str, status_code: Optional[int] = None) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Upstream unavailable: {reason}")


class SampleDataUnavailableError(TemperatureMonitorError):
    """The bundled fallback dataset is missing or unreadable."""
