"""HTTP transport for the upstream lookup services."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from perucheck._constants import USER_AGENT
from perucheck._redact import redact_for_log
from perucheck.config import PerucheckConfig
from perucheck.exceptions import PerucheckTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the client and the enricher.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any:
        ...


class HttpTransport:
    """POST JSON bodies to ``config.base_url + endpoint`` and decode JSON replies."""

    def __init__(
        self,
        config: PerucheckConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def url_for(self, endpoint: str) -> str:
        return f"{self._config.base_url}{endpoint}"

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any:
        """Send ``payload`` as a JSON body and return the decoded JSON reply.

        Any non-2xx status is a failure carrying the response body as
        diagnostic text. Network errors and timeouts are reported the same
        way, without a status code.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }
        url = self.url_for(endpoint)
        body = json.dumps(dict(payload), separators=(",", ":"))

        _logger.debug("POST %s", url)
        if self._config.api_trace_enabled:
            _logger.debug("Request body for %s: %s", endpoint, redact_for_log(dict(payload)))

        try:
            async with self._http.post(url, data=body, headers=headers, timeout=self._timeout) as resp:
                try:
                    text = await resp.text()
                except UnicodeDecodeError as exc:
                    raise PerucheckTransportError(
                        f"Invalid encoding from {endpoint}: {exc.reason}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    ) from exc
                if not 200 <= resp.status < 300:
                    raise PerucheckTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200] or 'no detail'}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except PerucheckTransportError:
            raise
        except asyncio.TimeoutError as exc:
            raise PerucheckTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise PerucheckTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise PerucheckTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=resp.status,
                endpoint=endpoint,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("Response from %s: %s", endpoint, redact_for_log(result))
        return result
