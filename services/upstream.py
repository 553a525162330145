"""HTTP client for the temperatur.nu station API."""

from __future__ import annotations

import json
import logging
import time
from functools import lru_cache
from typing import Any, Dict, Optional

import httpx

from services.errors import UpstreamUnavailableError
from settings import get_settings

logger = logging.getLogger(__name__)

USER_AGENT = "TemperatureMonitor/1.0"


class UpstreamClient:
    """Fetches one station's week of hourly readings.

    Every failure mode is reported as :class:`UpstreamUnavailableError`; the
    call is never retried here.
    """

    def __init__(
        self,
        url: str,
        station_id: str,
        api_client: str = "apan",
        span: str = "1week",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self.station_id = station_id
        self.api_client = api_client
        self.span = span
        self.timeout = timeout
        self._client = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def params(self) -> Dict[str, str]:
        return {"p": self.station_id, "cli": self.api_client, "span": self.span, "data": ""}

    def fetch(self) -> Dict[str, Any]:
        """Return the decoded JSON document for the configured station."""
        start = time.perf_counter()
        try:
            response = self._client.get(self.url, params=self.params(), timeout=self.timeout)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailableError("request timeout") from exc
        except httpx.HTTPStatusError as exc:
            raise UpstreamUnavailableError(
                f"HTTP {exc.response.status_code}", status_code=exc.response.status_code
            ) from exc
        except httpx.RequestError as exc:
            raise UpstreamUnavailableError(f"request error: {exc}") from exc

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise UpstreamUnavailableError("failed to parse API response") from exc

        if not isinstance(payload, dict):
            raise UpstreamUnavailableError("response is not a JSON object")
        stations = payload.get("stations")
        if not isinstance(stations, list) or not stations:
            raise UpstreamUnavailableError("no stations data received from API")

        logger.info(
            "Fetched upstream temperature data",
            extra={
                "station_id": self.station_id,
                "url": self.url,
                "status_code": response.status_code,
                "elapsed_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return payload


@lru_cache
def build_default_upstream() -> UpstreamClient:
    settings = get_settings()
    return UpstreamClient(
        url=settings.api_url,
        station_id=settings.station_id,
        api_client=settings.api_client,
        span=settings.api_span,
        timeout=settings.request_timeout,
    )
