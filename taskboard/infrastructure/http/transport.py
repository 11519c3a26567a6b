"""
Taskboard API HTTP transport.

Performs exactly one HTTP attempt with a deadline. Retries live in
``taskboard.infrastructure.http.retry``.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp
import structlog

from taskboard.domain.shared.errors import (
    ApiConnectionError,
    ExternalServiceError,
    HttpStatusError,
    InvalidResponseError,
    RequestTimeoutError,
)

logger = structlog.get_logger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


async def _error_detail(response: aiohttp.ClientResponse) -> Optional[str]:
    """Server message from an error envelope, if the body carries one."""
    try:
        payload = await response.json(content_type=None)
    except (json.JSONDecodeError, aiohttp.ContentTypeError, UnicodeDecodeError):
        return None

    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"].strip() or None
    return None


@dataclass(frozen=True)
class RawResponse:
    """Parsed 2xx response."""

    status: int
    data: Any


class AiohttpTransport:
    """Single-attempt HTTP transport over aiohttp."""

    DEFAULT_HEADERS = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }

    def __init__(
        self,
        base_url: str,
        csrf_token: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """Initialize transport.

        Args:
            base_url: API root, e.g. ``http://localhost:3000/api``
            csrf_token: Token added as ``_csrf`` to mutating bodies
            session: Pre-built session (for testing); not closed on exit
        """
        self.base_url = base_url.rstrip("/")
        self.csrf_token = csrf_token
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "AiohttpTransport":
        """Async context manager entry."""
        if self._session is None:
            self._session = aiohttp.ClientSession(headers=self.DEFAULT_HEADERS)
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None

    def _prepare_body(self, method: str, body: Any) -> Optional[str]:
        if body is None or method not in BODY_METHODS:
            return None
        if self.csrf_token and isinstance(body, dict):
            body = {**body, "_csrf": self.csrf_token}
        return json.dumps(body)

    async def send(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        timeout: float = 10.0,
    ) -> RawResponse:
        """Perform one request.

        Args:
            endpoint: Path below base_url, already URL-encoded
            method: HTTP method
            body: JSON-serializable body (POST/PUT/PATCH only)
            timeout: Deadline in seconds for the whole request

        Returns:
            Status and parsed JSON body

        Raises:
            RequestTimeoutError: If deadline expires
            ApiConnectionError: If server unreachable
            HttpStatusError: If response is not 2xx
            InvalidResponseError: If body is not JSON
        """
        if not self._session:
            msg = "Transport not initialized, use async with"
            raise ExternalServiceError(msg)

        method = method.upper()
        url = f"{self.base_url}{endpoint}"
        data = self._prepare_body(method, body)

        try:
            async with self._session.request(
                method,
                url,
                data=data,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                if not 200 <= response.status < 300:
                    reason = response.reason or ""
                    detail = await _error_detail(response)
                    logger.info(
                        "API returned error status",
                        method=method,
                        endpoint=endpoint,
                        status=response.status,
                        detail=detail,
                    )
                    raise HttpStatusError(response.status, reason, detail)

                try:
                    payload = await response.json(content_type=None)
                except (json.JSONDecodeError, aiohttp.ContentTypeError, UnicodeDecodeError) as e:
                    msg = f"Invalid JSON from {method} {endpoint}"
                    raise InvalidResponseError(msg) from e

                return RawResponse(status=response.status, data=payload)

        except asyncio.TimeoutError as e:
            msg = f"{method} {endpoint} timed out after {timeout}s"
            raise RequestTimeoutError(msg) from e

        except aiohttp.ClientError as e:
            msg = f"Cannot connect to server: {e}"
            raise ApiConnectionError(msg) from e
