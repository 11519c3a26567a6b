"""
Online/offline tracking.

The monitor holds one boolean that only changes when its source emits
a transition. There is no polling.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, runtime_checkable

import structlog

logger = structlog.get_logger(__name__)

Listener = Callable[[bool], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class ConnectivitySource(Protocol):
    """
    Port for the platform's connectivity signal.

    Implementations report the current state and notify subscribers on
    every "became online" / "became offline" transition.
    """

    def is_online(self) -> bool:
        """Currently reported connectivity."""
        ...

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register listener; returns a handle that removes it."""
        ...


class SignalConnectivitySource:
    """In-process connectivity signal driven by the hosting application.

    Example:
        >>> source = SignalConnectivitySource()
        >>> seen = []
        >>> unsubscribe = source.subscribe(seen.append)
        >>> source.set_offline()
        >>> unsubscribe()
        >>> source.set_online()
        >>> seen
        [False]
    """

    def __init__(self, online: bool = True) -> None:
        self._online = online
        self._listeners: list[Listener] = []

    def is_online(self) -> bool:
        return self._online

    def subscribe(self, listener: Listener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def listener_count(self) -> int:
        return len(self._listeners)

    def set_online(self) -> None:
        self._emit(True)

    def set_offline(self) -> None:
        self._emit(False)

    def _emit(self, online: bool) -> None:
        self._online = online
        for listener in list(self._listeners):
            listener(online)


class ConnectivityMonitor:
    """Tracks connectivity for one client instance.

    Call ``start()`` once to subscribe and ``close()`` at teardown to
    release the subscription. Also usable as a context manager.
    """

    def __init__(self, source: ConnectivitySource) -> None:
        """Initialize from the source's current state.

        Args:
            source: Platform connectivity signal
        """
        self._source = source
        self._online = source.is_online()
        self._unsubscribe: Optional[Unsubscribe] = None

    @property
    def is_online(self) -> bool:
        return self._online

    def start(self) -> None:
        """Subscribe to transitions. Idempotent."""
        if self._unsubscribe is not None:
            return
        self._online = self._source.is_online()
        self._unsubscribe = self._source.subscribe(self._on_transition)
        logger.debug("Connectivity monitor started", online=self._online)

    def close(self) -> None:
        """Release the subscription. Idempotent."""
        if self._unsubscribe is None:
            return
        self._unsubscribe()
        self._unsubscribe = None
        logger.debug("Connectivity monitor stopped")

    def __enter__(self) -> "ConnectivityMonitor":
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _on_transition(self, online: bool) -> None:
        if online == self._online:
            return
        self._online = online
        if online:
            logger.info("Connection restored")
        else:
            logger.warning("Connection lost")
