from __future__ import annotations

import asyncio
from collections import defaultdict

from session_relay.services.relay_connection import RelayConnection


class ObserverRegistry:
    """Tracks connections that joined as observers."""

    def __init__(self) -> None:
        # dict keeps join order for fanout iteration
        self._members: dict[str, RelayConnection] = {}
        self._lock = asyncio.Lock()

    async def join(self, connection: RelayConnection) -> bool:
        async with self._lock:
            if connection.id in self._members:
                return False
            self._members[connection.id] = connection
            return True

    async def leave(self, connection: RelayConnection) -> bool:
        async with self._lock:
            return self._members.pop(connection.id, None) is not None

    async def members(self) -> list[RelayConnection]:
        async with self._lock:
            return list(self._members.values())

    async def count(self) -> int:
        async with self._lock:
            return len(self._members)


class ProducerBindings:
    """Routes completion notices to the connections awaiting a session."""

    def __init__(self) -> None:
        self._by_session: dict[str, dict[str, RelayConnection]] = defaultdict(dict)
        self._session_by_connection: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def bind(self, connection: RelayConnection, session_id: str) -> None:
        async with self._lock:
            self._discard(connection)
            self._by_session[session_id][connection.id] = connection
            self._session_by_connection[connection.id] = session_id

    async def release(self, connection: RelayConnection) -> str | None:
        async with self._lock:
            return self._discard(connection)

    async def connections_for(self, session_id: str) -> list[RelayConnection]:
        async with self._lock:
            return list(self._by_session.get(session_id, {}).values())

    def _discard(self, connection: RelayConnection) -> str | None:
        session_id = self._session_by_connection.pop(connection.id, None)
        if session_id is None:
            return None
        bound = self._by_session.get(session_id)
        if bound is not None:
            bound.pop(connection.id, None)
            if not bound:
                self._by_session.pop(session_id, None)
        return session_id
