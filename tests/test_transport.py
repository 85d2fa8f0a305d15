from __future__ import annotations

from typing import Any

import aiohttp
import pytest

from pytraintracker import FleetTracker
from pytraintracker._transport import HttpTransport
from pytraintracker.config import TrackerConfig
from pytraintracker.exceptions import TrackerTransportError
from pytraintracker.models.search import SearchFailureKind


class _FakeResponse:
    def __init__(self, status: int, body: bytes) -> None:
        self.status = status
        self._body = body

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeSession:
    def __init__(self, *, status: int = 200, text: str | bytes = "{}", error: Exception | None = None) -> None:
        self.status = status
        self.body = text.encode() if isinstance(text, str) else text
        self.error = error
        self.requests: list[dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.requests.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return _FakeResponse(self.status, self.body)


def _transport(session: _FakeSession, **config: Any) -> HttpTransport:
    return HttpTransport(TrackerConfig(base_url="http://tracker.test/", **config), session)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_get_json_returns_decoded_body() -> None:
    session = _FakeSession(text='{"trains": []}')

    body = await _transport(session).get_json("/api/live-location/trains")

    assert body == {"trains": []}
    assert session.requests[0]["url"] == "http://tracker.test/api/live-location/trains"
    assert session.requests[0]["timeout"].total == 10.0


@pytest.mark.asyncio
async def test_get_json_sends_bearer_token_and_params() -> None:
    session = _FakeSession(text='{"results": []}')

    await _transport(session, api_token="abc").get_json("/search", {"query": "12951"})

    request = session.requests[0]
    assert request["headers"]["authorization"] == "Bearer abc"
    assert request["params"] == {"query": "12951"}


@pytest.mark.asyncio
async def test_non_success_status_raises_with_status_code() -> None:
    session = _FakeSession(status=503, text="unavailable")

    with pytest.raises(TrackerTransportError) as excinfo:
        await _transport(session).get_json("/api/live-location/trains")

    assert excinfo.value.status_code == 503
    assert excinfo.value.is_connection_error is False


@pytest.mark.asyncio
async def test_invalid_json_raises() -> None:
    with pytest.raises(TrackerTransportError, match="Invalid JSON"):
        await _transport(_FakeSession(text="<html>")).get_json("/x")


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [aiohttp.ClientConnectionError("refused"), TimeoutError()])
async def test_network_failures_raise_connection_error(error: Exception) -> None:
    with pytest.raises(TrackerTransportError) as excinfo:
        await _transport(_FakeSession(error=error)).get_json("/x")

    assert excinfo.value.is_connection_error is True


def test_zero_timeout_disables_total_timeout() -> None:
    transport = _transport(_FakeSession(), request_timeout=0)

    assert transport._timeout.total is None  # noqa: SLF001


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"\xff", b'{"trains": [\xff]}'])
async def test_undecodable_body_raises_transport_error(body: bytes) -> None:
    with pytest.raises(TrackerTransportError, match="Invalid JSON") as excinfo:
        await _transport(_FakeSession(text=body)).get_json("/api/live-location/trains")

    assert excinfo.value.status_code == 200


@pytest.mark.asyncio
async def test_undecodable_error_body_keeps_status_code() -> None:
    with pytest.raises(TrackerTransportError) as excinfo:
        await _transport(_FakeSession(status=502, text=b"\xfe\xff bad gateway")).get_json("/x")

    assert excinfo.value.status_code == 502


@pytest.mark.asyncio
async def test_tracker_survives_undecodable_bodies() -> None:
    session = _FakeSession(text=b'{"trains": [\xff]}')
    config = TrackerConfig(base_url="http://tracker.test", poll_interval=60.0)

    async with FleetTracker(config, session=session, autostart_polling=False) as tracker:  # type: ignore[arg-type]
        assert await tracker.refresh() is False
        assert await tracker.search("12951") is None

        assert tracker.trains == []
        assert tracker.search_error is not None
        assert tracker.search_error.kind == SearchFailureKind.FAILED


@pytest.mark.asyncio
async def test_trace_logging_redacts_bearer_token(caplog: pytest.LogCaptureFixture) -> None:
    session = _FakeSession(text='{"trains": []}')
    caplog.set_level("DEBUG", logger="pytraintracker._transport")

    await _transport(session, api_token="s3cret", api_trace_enabled=True).get_json("/api/live-location/trains")

    assert "<redacted>" in caplog.text
    assert "s3cret" not in caplog.text
