from __future__ import annotations

import logging
from typing import Any

from session_relay.core.errors import DeliveryFailure
from session_relay.services.connection_registry import ObserverRegistry
from session_relay.services.relay_connection import RelayConnection

logger = logging.getLogger(__name__)


class FanoutBroadcaster:
    """Best-effort delivery of relay events to live connections.

    A failing connection is logged and skipped; nothing is retried and no
    error reaches the caller.
    """

    def __init__(self, observers: ObserverRegistry) -> None:
        self._observers = observers

    async def broadcast(self, event: str, payload: Any) -> int:
        members = await self._observers.members()
        delivered = 0
        for connection in members:
            if self._send(connection, event, payload):
                delivered += 1
        logger.debug("Broadcast %s to %d/%d observers", event, delivered, len(members))
        return delivered

    async def unicast(self, connection: RelayConnection, event: str, payload: Any) -> bool:
        return self._send(connection, event, payload)

    @staticmethod
    def _send(connection: RelayConnection, event: str, payload: Any) -> bool:
        try:
            connection.deliver(event, payload)
        except DeliveryFailure as exc:
            logger.warning("Delivery failed: %s", exc)
            return False
        return True
