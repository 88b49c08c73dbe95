from __future__ import annotations

import asyncio
import json
from typing import Any

import aiohttp
import pytest

from perucheck._transport import HttpTransport
from perucheck.config import PerucheckConfig
from perucheck.exceptions import PerucheckTransportError


class _FakeResponse:
    def __init__(self, status: int, body: str | bytes) -> None:
        self.status = status
        self._body = body

    async def text(self) -> str:
        if isinstance(self._body, bytes):
            return self._body.decode("utf-8")
        return self._body

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: BaseException | None = None) -> None:
        self._response = response
        self._error = error
        self.requests: list[tuple[str, dict[str, Any]]] = []

    def post(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.requests.append((url, kwargs))
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response


def _transport(session: _FakeSession, **config: Any) -> HttpTransport:
    return HttpTransport(PerucheckConfig(base_url="http://backend.test/", **config), session)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_post_json_sends_body_and_decodes_reply() -> None:
    session = _FakeSession(_FakeResponse(200, json.dumps({"resultado_crudo": "ok"})))

    result = await _transport(session, request_timeout=12.0).post_json("/consulta-soat", {"placa": "ABC123"})

    assert result == {"resultado_crudo": "ok"}
    ((url, kwargs),) = session.requests
    assert url == "http://backend.test/consulta-soat"
    assert json.loads(kwargs["data"]) == {"placa": "ABC123"}
    assert kwargs["headers"]["content-type"].startswith("application/json")
    assert kwargs["timeout"].total == 12.0


@pytest.mark.asyncio
async def test_non_2xx_carries_status_and_body() -> None:
    session = _FakeSession(_FakeResponse(500, "scraper crashed"))

    with pytest.raises(PerucheckTransportError) as excinfo:
        await _transport(session).post_json("/consulta-sat", {"placa": "ABC123"})

    assert excinfo.value.status_code == 500
    assert excinfo.value.endpoint == "/consulta-sat"
    assert str(excinfo.value) == "HTTP 500 from /consulta-sat: scraper crashed"


@pytest.mark.asyncio
async def test_non_2xx_without_body() -> None:
    session = _FakeSession(_FakeResponse(404, ""))

    with pytest.raises(PerucheckTransportError, match="no detail"):
        await _transport(session).post_json("/consulta-itv", {"placa": "ABC123"})


@pytest.mark.asyncio
async def test_invalid_json_reply() -> None:
    session = _FakeSession(_FakeResponse(200, "<html>mantenimiento</html>"))

    with pytest.raises(PerucheckTransportError, match="Invalid JSON") as excinfo:
        await _transport(session).post_json("/consulta-itv", {"placa": "ABC123"})
    assert excinfo.value.status_code == 200


@pytest.mark.asyncio
async def test_undecodable_body_is_a_transport_error() -> None:
    session = _FakeSession(_FakeResponse(200, b'{"resultado_crudo": "\xff\xfe"}'))

    with pytest.raises(PerucheckTransportError, match="Invalid encoding") as excinfo:
        await _transport(session).post_json("/consulta-soat", {"placa": "ABC123"})
    assert excinfo.value.status_code == 200
    assert excinfo.value.endpoint == "/consulta-soat"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "message"),
    [
        (aiohttp.ClientConnectionError("connection refused"), "failed"),
        (asyncio.TimeoutError(), "timed out"),
    ],
)
async def test_network_failures_have_no_status(error: BaseException, message: str) -> None:
    session = _FakeSession(error=error)

    with pytest.raises(PerucheckTransportError, match=message) as excinfo:
        await _transport(session).post_json("/consulta-dni-peru", {"dni": "12345678"})
    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_trace_logging_redacts_identifiers(caplog: pytest.LogCaptureFixture) -> None:
    session = _FakeSession(_FakeResponse(200, json.dumps({"nombres": "ANA", "direccion": "AV. LIMA 1"})))

    with caplog.at_level("DEBUG", logger="perucheck._transport"):
        await _transport(session, api_trace_enabled=True).post_json("/consulta-dni-peru", {"dni": "12345678"})

    assert "12345678" not in caplog.text
    assert "AV. LIMA 1" not in caplog.text
    assert "<redacted>" in caplog.text
