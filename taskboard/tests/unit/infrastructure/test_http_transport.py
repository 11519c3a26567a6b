"""
Unit tests for the aiohttp transport.
"""

import asyncio
import json
import time
from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest
from aiohttp import web

from taskboard.domain.shared.errors import (
    ApiConnectionError,
    ExternalServiceError,
    HttpStatusError,
    InvalidResponseError,
    RequestTimeoutError,
)
from taskboard.infrastructure.http.transport import AiohttpTransport

BASE_URL = "http://api.test/api"


def _response(status: int = 200, payload: object = None, reason: str = "OK") -> MagicMock:
    response = MagicMock()
    response.status = status
    response.reason = reason
    response.json = AsyncMock(return_value=payload)
    return response


class TestAiohttpTransport:
    """Test single-attempt transport."""

    async def test_get_success(self) -> None:
        response = _response(200, {"success": True, "data": [{"id": 1}]})

        with patch("aiohttp.ClientSession.request") as mock_request:
            mock_request.return_value.__aenter__.return_value = response

            async with AiohttpTransport(BASE_URL) as transport:
                raw = await transport.send("/projects", "GET", timeout=10.0)

        assert raw.status == 200
        assert raw.data == {"success": True, "data": [{"id": 1}]}

        args, kwargs = mock_request.call_args
        assert args == ("GET", "http://api.test/api/projects")
        assert kwargs["data"] is None
        assert kwargs["timeout"].total == 10.0

    async def test_post_serializes_body(self) -> None:
        response = _response(201, {"success": True, "data": {"id": 5}})

        with patch("aiohttp.ClientSession.request") as mock_request:
            mock_request.return_value.__aenter__.return_value = response

            async with AiohttpTransport(BASE_URL + "/") as transport:
                raw = await transport.send("/projects", "post", {"name": "X"})

        assert raw.status == 201
        args, kwargs = mock_request.call_args
        assert args == ("POST", "http://api.test/api/projects")
        assert json.loads(kwargs["data"]) == {"name": "X"}

    async def test_get_never_sends_body(self) -> None:
        with patch("aiohttp.ClientSession.request") as mock_request:
            mock_request.return_value.__aenter__.return_value = _response(200, [])

            async with AiohttpTransport(BASE_URL) as transport:
                await transport.send("/projects", "GET", {"ignored": True})

        assert mock_request.call_args.kwargs["data"] is None

    async def test_csrf_token_added_to_mutations(self) -> None:
        with patch("aiohttp.ClientSession.request") as mock_request:
            mock_request.return_value.__aenter__.return_value = _response(200, {})

            async with AiohttpTransport(BASE_URL, csrf_token="tok") as transport:
                await transport.send("/projects/1", "PUT", {"name": "Y"})

        body = json.loads(mock_request.call_args.kwargs["data"])
        assert body == {"name": "Y", "_csrf": "tok"}

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 500, 503])
    async def test_non_2xx_raises_with_status(self, status: int) -> None:
        with patch("aiohttp.ClientSession.request") as mock_request:
            mock_request.return_value.__aenter__.return_value = _response(status, reason="Nope")

            async with AiohttpTransport(BASE_URL) as transport:
                with pytest.raises(HttpStatusError) as exc_info:
                    await transport.send("/projects/9")

        assert exc_info.value.status == status
        assert str(exc_info.value) == f"HTTP {status}: Nope"

    async def test_timeout(self) -> None:
        with patch("aiohttp.ClientSession.request") as mock_request:
            mock_request.side_effect = asyncio.TimeoutError()

            async with AiohttpTransport(BASE_URL) as transport:
                with pytest.raises(RequestTimeoutError):
                    await transport.send("/projects", timeout=0.5)

    async def test_connection_error(self) -> None:
        with patch("aiohttp.ClientSession.request") as mock_request:
            mock_request.side_effect = aiohttp.ClientConnectionError("refused")

            async with AiohttpTransport(BASE_URL) as transport:
                with pytest.raises(ApiConnectionError):
                    await transport.send("/projects")

    async def test_timeout_not_conflated_with_connection_error(self) -> None:
        with patch("aiohttp.ClientSession.request") as mock_request:
            mock_request.side_effect = asyncio.TimeoutError()

            async with AiohttpTransport(BASE_URL) as transport:
                with pytest.raises(ExternalServiceError) as exc_info:
                    await transport.send("/projects")

        assert not isinstance(exc_info.value, ApiConnectionError)

    async def test_invalid_json(self) -> None:
        response = _response(200)
        response.json = AsyncMock(side_effect=json.JSONDecodeError("Expecting value", "<html>", 0))

        with patch("aiohttp.ClientSession.request") as mock_request:
            mock_request.return_value.__aenter__.return_value = response

            async with AiohttpTransport(BASE_URL) as transport:
                with pytest.raises(InvalidResponseError):
                    await transport.send("/projects")

    async def test_requires_context_manager(self) -> None:
        transport = AiohttpTransport(BASE_URL)
        with pytest.raises(ExternalServiceError, match="not initialized"):
            await transport.send("/projects")

    async def test_injected_session_not_closed(self) -> None:
        session = MagicMock(spec=aiohttp.ClientSession)
        session.close = AsyncMock()

        async with AiohttpTransport(BASE_URL, session=session):
            pass

        session.close.assert_not_awaited()

    async def test_error_body_message_kept(self) -> None:
        response = _response(400, {"success": False, "error": "Name already taken"}, reason="Bad Request")

        with patch("aiohttp.ClientSession.request") as mock_request:
            mock_request.return_value.__aenter__.return_value = response

            async with AiohttpTransport(BASE_URL) as transport:
                with pytest.raises(HttpStatusError) as exc_info:
                    await transport.send("/projects", "POST", {"name": "X"})

        assert exc_info.value.detail == "Name already taken"
        assert exc_info.value.reason == "Bad Request"
        assert str(exc_info.value) == "HTTP 400: Name already taken"


# ═══════════════════════════════════════════════════════════
# LOCAL SERVER
# ═══════════════════════════════════════════════════════════


@pytest.fixture
async def local_api() -> AsyncIterator[str]:
    """aiohttp.web server with a slow endpoint; yields its base URL."""
    release = asyncio.Event()

    async def slow(request: web.Request) -> web.Response:
        try:
            await asyncio.wait_for(release.wait(), timeout=5.0)
        except asyncio.TimeoutError:
            pass
        return web.json_response({"success": True, "data": []})

    async def create(request: web.Request) -> web.Response:
        return web.json_response({"success": False, "error": "Name already taken"}, status=400)

    app = web.Application()
    app.router.add_get("/api/slow", slow)
    app.router.add_post("/api/projects", create)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]

    yield f"http://{host}:{port}/api"

    release.set()
    await runner.cleanup()


class TestAiohttpTransportLocalServer:
    """Test transport against a real aiohttp server."""

    async def test_deadline_cuts_off_slow_request(self, local_api: str) -> None:
        async with AiohttpTransport(local_api) as transport:
            start = time.monotonic()
            with pytest.raises(RequestTimeoutError):
                await transport.send("/slow", timeout=0.3)
            elapsed = time.monotonic() - start

        assert 0.25 <= elapsed < 2.0

    async def test_error_envelope_detail(self, local_api: str) -> None:
        async with AiohttpTransport(local_api) as transport:
            with pytest.raises(HttpStatusError) as exc_info:
                await transport.send("/projects", "POST", {"name": "X"})

        assert exc_info.value.status == 400
        assert exc_info.value.detail == "Name already taken"
