from __future__ import annotations

from typing import Callable

import httpx
import pytest

from services.errors import UpstreamUnavailableError
from services.upstream import USER_AGENT, UpstreamClient

_URL = "http://api.temperatur.nu/tnu_1.17.php"
_PAYLOAD = {
    "stations": [
        {
            "title": "Vasastan, Örebro",
            "id": "vasastan",
            "temp": "7.4",
            "data": [{"datetime": "2024-10-14 00:00:00", "temperatur": "9.2"}],
        }
    ]
}


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> UpstreamClient:
    return UpstreamClient(
        url=_URL,
        station_id="vasastan",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


def test_fetch_sends_station_query_and_returns_payload() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_PAYLOAD)

    client = _client(handler)
    try:
        payload = client.fetch()
    finally:
        client.close()

    assert payload == _PAYLOAD
    request = seen[0]
    assert request.method == "GET"
    assert request.url.params["p"] == "vasastan"
    assert request.url.params["cli"] == "apan"
    assert request.url.params["span"] == "1week"
    assert "data" in request.url.params
    assert request.headers["User-Agent"] == USER_AGENT
    assert request.headers["Accept"] == "application/json"


def test_non_2xx_is_upstream_unavailable() -> None:
    client = _client(lambda request: httpx.Response(503, text="maintenance"))

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        client.fetch()

    assert exc_info.value.status_code == 503
    assert "HTTP 503" in str(exc_info.value)


def test_timeout_is_upstream_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        _client(handler).fetch()

    assert exc_info.value.reason == "request timeout"


def test_connection_error_is_upstream_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamUnavailableError):
        _client(handler).fetch()


def test_invalid_json_is_upstream_unavailable() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        client.fetch()

    assert exc_info.value.reason == "failed to parse API response"


@pytest.mark.parametrize("body", [{"stations": []}, {"title": "no stations"}, [1, 2, 3]])
def test_missing_stations_is_upstream_unavailable(body: object) -> None:
    client = _client(lambda request: httpx.Response(200, json=body))

    with pytest.raises(UpstreamUnavailableError):
        client.fetch()


def test_successful_fetch_logs_upstream_url(caplog: pytest.LogCaptureFixture) -> None:
    client = _client(lambda request: httpx.Response(200, json=_PAYLOAD))
    try:
        with caplog.at_level("INFO", logger="services.upstream"):
            client.fetch()
    finally:
        client.close()

    record = next(r for r in caplog.records if r.getMessage() == "Fetched upstream temperature data")
    assert record.url == _URL
    assert record.station_id == "vasastan"
