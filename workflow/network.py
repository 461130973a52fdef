"""Network reachability signal the offline queue listens to."""

import logging
from typing import Awaitable, Callable, Optional

from models.enums import ConnectionType

logger = logging.getLogger(__name__)

ReachabilityListener = Callable[[bool], Awaitable[None]]


class NetworkReachabilitySignal:
    """Holds the current connectivity state and notifies async subscribers.

    Every ``update`` notifies every subscriber, even when the value did not
    change; subscribers decide what counts as a transition.
    """

    def __init__(
        self,
        is_connected: bool = False,
        connection_type: ConnectionType = ConnectionType.UNKNOWN,
    ):
        self._is_connected = is_connected
        self.connection_type = connection_type
        self._listeners: list[ReachabilityListener] = []

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    def subscribe(self, listener: ReachabilityListener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def update(
        self, is_connected: bool, connection_type: Optional[ConnectionType] = None
    ) -> None:
        """Record a new reachability reading and notify subscribers in order."""
        self._is_connected = is_connected
        if connection_type is not None:
            self.connection_type = connection_type
        logger.info(
            "Network %s (%s)",
            "connected" if is_connected else "disconnected",
            self.connection_type.value,
        )
        for listener in list(self._listeners):
            await listener(is_connected)


class AlwaysOnlineSignal(NetworkReachabilitySignal):
    """A signal that reports connected and never changes on its own."""

    def __init__(self):
        super().__init__(is_connected=True, connection_type=ConnectionType.UNKNOWN)
