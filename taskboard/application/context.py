"""
Client context.

Owns the per-application state shared by every facade call: response
cache, connectivity monitor, transport and retry controller.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

import structlog

from taskboard.infrastructure.cache.response_cache import ResponseCache
from taskboard.infrastructure.config import ApiSettings
from taskboard.infrastructure.connectivity.monitor import (
    ConnectivityMonitor,
    ConnectivitySource,
    SignalConnectivitySource,
)
from taskboard.infrastructure.http.retry import RetryController
from taskboard.infrastructure.http.transport import AiohttpTransport, RawResponse

logger = structlog.get_logger(__name__)


class Transport(Protocol):
    """Port for one HTTP attempt."""

    async def send(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        timeout: float = 10.0,
    ) -> RawResponse:
        ...


class ClientContext:
    """Shared state for one client instance.

    Example:
        >>> async def main():
        ...     async with ClientContext.from_settings(ApiSettings()) as ctx:
        ...         client = ProjectApiClient(ctx)
        ...         return await client.get_all_projects()
    """

    def __init__(
        self,
        transport: Transport,
        cache: ResponseCache,
        connectivity: ConnectivityMonitor,
        retry: RetryController,
        settings: Optional[ApiSettings] = None,
    ) -> None:
        self.transport = transport
        self.cache = cache
        self.connectivity = connectivity
        self.retry = retry
        self.settings = settings or ApiSettings()
        self.connectivity.start()

    @classmethod
    def from_settings(
        cls,
        settings: ApiSettings,
        connectivity_source: Optional[ConnectivitySource] = None,
    ) -> ClientContext:
        """Wire the default aiohttp-backed components."""
        return cls(
            transport=AiohttpTransport(settings.base_url, csrf_token=settings.csrf_token),
            cache=ResponseCache(ttl_seconds=settings.cache_ttl),
            connectivity=ConnectivityMonitor(connectivity_source or SignalConnectivitySource()),
            retry=RetryController(
                max_attempts=settings.retry_attempts,
                base_delay=settings.retry_delay,
            ),
            settings=settings,
        )

    async def __aenter__(self) -> ClientContext:
        """Open the transport session."""
        enter = getattr(self.transport, "__aenter__", None)
        if enter is not None:
            await enter()
        logger.debug("Client context opened", base_url=self.settings.base_url)
        return self

    async def __aexit__(self, *args: object) -> None:
        """Close the transport and release the connectivity subscription."""
        await self.aclose()

    async def aclose(self) -> None:
        exit_ = getattr(self.transport, "__aexit__", None)
        if exit_ is not None:
            await exit_(None, None, None)
        self.connectivity.close()
        logger.debug("Client context closed")
