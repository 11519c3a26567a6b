"""
Response cache with TTL support.

Caches successful read envelopes to avoid repeated API calls.
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from taskboard.domain.shared.envelope import ResultEnvelope

logger = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 300.0


def make_cache_key(method: str, endpoint: str, body: Any = None) -> str:
    """Generate cache key.

    Args:
        method: HTTP method
        endpoint: URL-encoded endpoint path (never contains spaces)
        body: Request body, serialized canonically

    Returns:
        Cache key string

    Example:
        >>> make_cache_key("GET", "/projects")
        'GET /projects {}'
    """
    serialized = json.dumps(body or {}, sort_keys=True, separators=(",", ":"), default=str)
    return f"{method.upper()} {endpoint} {serialized}"


def endpoint_of(key: str) -> str:
    """Endpoint part of a key built by ``make_cache_key``."""
    parts = key.split(" ", 2)
    return parts[1] if len(parts) > 1 else ""


def endpoint_scope(endpoints: tuple[str, ...]) -> Callable[[str], bool]:
    """Key predicate matching any of ``endpoints``, with or without a query string."""

    def matches(key: str) -> bool:
        endpoint = endpoint_of(key)
        path = endpoint.split("?", 1)[0]
        return path in endpoints

    return matches


class CacheEntry(BaseModel):
    """Cached envelope with its insertion time.

    Example:
        >>> entry = CacheEntry(
        ...     key="GET /projects {}",
        ...     payload=ResultEnvelope.ok([]),
        ...     stored_at=0.0,
        ... )
        >>> assert entry.is_expired(now=301.0, ttl=300.0)
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Cache key")
    payload: ResultEnvelope = Field(..., description="Cached envelope")
    stored_at: float = Field(..., description="Clock reading at insertion")

    def is_expired(self, now: float, ttl: float) -> bool:
        """Check if cache entry is older than ttl."""
        return now - self.stored_at > ttl


class CacheStats(BaseModel):
    """Snapshot of cache contents for debugging."""

    model_config = ConfigDict(frozen=True)

    total_entries: int
    keys: list[str]
    ttl_seconds: float


class ResponseCache:
    """In-memory response cache with TTL.

    Scoped to one client instance; not shared across processes.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize cache.

        Args:
            ttl_seconds: Entry time-to-live (default 5 minutes)
            clock: Monotonic time source, injectable for tests
        """
        self.ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[ResultEnvelope]:
        """Get cached envelope.

        Expired entries are removed and reported as a miss.
        """
        entry = self._entries.get(key)

        if entry is None:
            logger.debug("Cache miss", key=key)
            return None

        if entry.is_expired(self._clock(), self.ttl):
            logger.debug("Cache expired", key=key)
            del self._entries[key]
            return None

        logger.debug("Cache hit", key=key)
        return entry.payload

    def set(self, key: str, value: ResultEnvelope) -> None:
        """Store envelope, replacing any previous entry for key."""
        self._entries[key] = CacheEntry(key=key, payload=value, stored_at=self._clock())
        logger.debug("Cached response", key=key, ttl=self.ttl)

    def invalidate(self, predicate: Callable[[str], bool]) -> int:
        """Remove every entry whose key matches predicate.

        Returns:
            Number of entries removed
        """
        doomed = [key for key in self._entries if predicate(key)]
        for key in doomed:
            del self._entries[key]

        if doomed:
            logger.info("Cache invalidated", count=len(doomed), keys=doomed)

        return len(doomed)

    def clear(self) -> None:
        """Clear all cache entries."""
        count = len(self._entries)
        self._entries.clear()
        logger.info("Cache cleared", count=count)

    def remove_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        return self.invalidate(lambda key: self._entries[key].is_expired(now, self.ttl))

    def size(self) -> int:
        """Number of stored entries, expired ones included until evicted."""
        return len(self._entries)

    def stats(self) -> CacheStats:
        """Current keys and count."""
        return CacheStats(
            total_entries=len(self._entries),
            keys=list(self._entries),
            ttl_seconds=self.ttl,
        )
