"""HTTP transport for the live-location API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pytraintracker._constants import USER_AGENT
from pytraintracker._redact import redact_for_log
from pytraintracker.config import TrackerConfig
from pytraintracker.exceptions import TrackerTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        ...


class HttpTransport:
    """JSON-over-HTTP transport backed by an :class:`aiohttp.ClientSession`."""

    def __init__(
        self,
        config: TrackerConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        total = config.request_timeout if config.request_timeout > 0 else None
        self._timeout = aiohttp.ClientTimeout(total=total)

    def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if self._config.api_token:
            headers["authorization"] = f"Bearer {self._config.api_token}"
        return headers

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        """GET *endpoint* and return the decoded JSON body.

        Raises
        ------
        TrackerTransportError
            On network failure, timeout, non-2xx status or a body that is
            not valid JSON.
        """
        url = f"{self._config.base_url}{endpoint}"
        headers = self._build_headers()

        if self._config.api_trace_enabled:
            _logger.debug("GET %s params=%s headers=%s", url, dict(params or {}), redact_for_log(headers))
        else:
            _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, params=params, headers=headers, timeout=self._timeout) as resp:
                raw = await resp.read()
                status = resp.status
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise TrackerTransportError(
                f"Request to {endpoint} failed: {exc!r}",
                endpoint=endpoint,
            ) from exc

        if not 200 <= status < 300:
            raise TrackerTransportError(
                f"HTTP {status} from {endpoint}: {raw[:200].decode(errors='replace')}",
                status_code=status,
                endpoint=endpoint,
            )

        try:
            body = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TrackerTransportError(
                f"Invalid JSON from {endpoint}: {raw[:200].decode(errors='replace')}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("Response %s status=%d body=%s", endpoint, status, redact_for_log(body))
        return body
