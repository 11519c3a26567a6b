"""
Shared fixtures for client tests.

Every fixture wires real cache, retry and connectivity components
around a mocked transport so tests can count network attempts.
"""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from taskboard.application.context import ClientContext
from taskboard.application.project.client import ProjectApiClient
from taskboard.infrastructure.cache.response_cache import ResponseCache
from taskboard.infrastructure.config import ApiSettings
from taskboard.infrastructure.connectivity.monitor import (
    ConnectivityMonitor,
    SignalConnectivitySource,
)
from taskboard.infrastructure.http.retry import RetryController
from taskboard.infrastructure.http.transport import AiohttpTransport, RawResponse


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ═══════════════════════════════════════════════════════════
# DOMAIN DATA FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def sample_projects() -> list[dict[str, Any]]:
    """Two projects as returned by GET /projects."""
    return [
        {
            "id": 1,
            "name": "Inventory System",
            "description": "Stock tracking with low stock alerts",
            "startDate": "2025-01-15",
            "endDate": "2025-03-15",
            "status": "en_proceso",
            "users": [
                {"id": 1, "name": "Maria Gonzalez", "role": "admin", "profileImage": None},
                {"id": 2, "name": "Carlos Mendoza", "role": "miembro", "profileImage": None},
            ],
        },
        {
            "id": 3,
            "name": "Corporate Website",
            "description": "CMS with blog",
            "startDate": "2024-11-01",
            "endDate": "2025-01-15",
            "status": "terminado",
            "users": [],
        },
    ]


@pytest.fixture
def valid_project_body() -> dict[str, Any]:
    """Body accepted by POST /projects."""
    return {
        "name": "Mobile App",
        "description": "E-commerce app",
        "startDate": "2025-02-01",
        "endDate": "2025-05-30",
        "status": "en_proceso",
    }


# ═══════════════════════════════════════════════════════════
# INFRASTRUCTURE FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> ApiSettings:
    return ApiSettings(base_url="http://api.test/api")


@pytest.fixture
def mock_transport() -> AsyncMock:
    """Mock transport.

    Default behavior: 200 with an empty list.
    Override ``send.return_value`` / ``send.side_effect`` in tests.
    """
    transport = AsyncMock(spec=AiohttpTransport)
    transport.send.return_value = RawResponse(status=200, data={"success": True, "data": []})
    return transport


@pytest.fixture
def mock_sleep() -> AsyncMock:
    """Retry sleep that returns immediately and records delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def connectivity_source() -> SignalConnectivitySource:
    return SignalConnectivitySource(online=True)


@pytest.fixture
def context(
    mock_transport: AsyncMock,
    mock_sleep: AsyncMock,
    connectivity_source: SignalConnectivitySource,
    clock: FakeClock,
    settings: ApiSettings,
) -> ClientContext:
    return ClientContext(
        transport=mock_transport,
        cache=ResponseCache(ttl_seconds=300.0, clock=clock),
        connectivity=ConnectivityMonitor(connectivity_source),
        retry=RetryController(max_attempts=3, base_delay=1.0, sleep=mock_sleep),
        settings=settings,
    )


@pytest.fixture
def client(context: ClientContext) -> ProjectApiClient:
    """Project client with mocked transport and instant retries."""
    return ProjectApiClient(context)
