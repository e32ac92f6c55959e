from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from session_relay.core.errors import SessionNotFoundError
from session_relay.schemas.session import SessionRead
from session_relay.services.connection_registry import ObserverRegistry, ProducerBindings
from session_relay.services.fanout_broadcaster import FanoutBroadcaster
from session_relay.services.relay_connection import RelayConnection
from session_relay.services.session_store import SessionRecord, SessionStatus, SessionStore
from session_relay.services.waiting_queue import waiting_sessions

logger = logging.getLogger(__name__)

# Placeholders for producer fields that arrive missing or empty.
REGISTRATION_DEFAULTS: dict[str, str] = {
    "country_code": "+1",
    "phone_number": "unspecified",
    "country_name": "unknown",
    "ip": "unknown",
    "token": "unspecified",
}


def _now() -> datetime:
    return datetime.now(UTC)


def map_session(record: SessionRecord) -> dict[str, Any]:
    return SessionRead.model_validate(record).model_dump(mode="json")


def _map_sessions(records: list[SessionRecord]) -> list[dict[str, Any]]:
    return [map_session(record) for record in records]


def apply_registration_defaults(fields: Mapping[str, Any]) -> dict[str, Any]:
    attributes = dict(fields)
    for name, placeholder in REGISTRATION_DEFAULTS.items():
        if attributes.get(name) in (None, ""):
            attributes[name] = placeholder
    return attributes


@dataclass(frozen=True)
class RegistrationResult:
    id: str
    observer_count: int


@dataclass(frozen=True)
class RelaySnapshot:
    store_size: int
    waiting_count: int
    observer_count: int
    waiting: list[SessionRecord]


class SessionLifecycle:
    """Drives sessions from registration to completion and notifies clients.

    Every mutation and the notifications it triggers run under one lock, so
    observers see the changes of a session in the order they were made.
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        observers: ObserverRegistry | None = None,
        producers: ProducerBindings | None = None,
        broadcaster: FanoutBroadcaster | None = None,
        *,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self.store = store or SessionStore()
        self.observers = observers or ObserverRegistry()
        self.producers = producers or ProducerBindings()
        self.broadcaster = broadcaster or FanoutBroadcaster(self.observers)
        self._clock = clock
        self._lock = asyncio.Lock()

    async def register(
        self, session_id: str, fields: Mapping[str, Any] | None = None
    ) -> RegistrationResult:
        record = SessionRecord(
            id=session_id,
            created_at=self._clock(),
            status=SessionStatus.waiting,
            attributes=apply_registration_defaults(fields or {}),
        )
        async with self._lock:
            stored = await self.store.put(record)
            await self.broadcaster.broadcast("new_session", map_session(stored))
            await self._broadcast_waiting()
            observer_count = await self.observers.count()

        logger.info("Registered session %s (%d observers notified)", session_id, observer_count)
        return RegistrationResult(id=session_id, observer_count=observer_count)

    async def lookup(self, session_id: str) -> SessionRecord:
        record = await self.store.get(session_id)
        if record is None:
            raise SessionNotFoundError(session_id)
        return record

    async def complete(
        self,
        session_id: str,
        redirect_target: Any,
        overrides: Mapping[str, Any] | None = None,
    ) -> SessionRecord:
        overrides = dict(overrides or {})
        async with self._lock:
            record = await self.store.get(session_id)
            if record is None:
                raise SessionNotFoundError(session_id)
            if record.status == SessionStatus.completed:
                logger.warning("Session %s completed again; producers are notified twice", session_id)

            record.status = SessionStatus.completed
            record.completed_at = self._clock()
            record.redirect_target = redirect_target
            record.attributes.update(overrides)
            stored = await self.store.put(record)

            await self.broadcaster.broadcast("session_updated", map_session(stored))
            await self._broadcast_waiting()

            notice = {"redirect_target": redirect_target, **overrides}
            for connection in await self.producers.connections_for(session_id):
                await self.broadcaster.unicast(connection, "redirect", notice)

        logger.info("Completed session %s -> %s", session_id, redirect_target)
        return stored

    async def snapshot(self) -> RelaySnapshot:
        async with self._lock:
            store_size = await self.store.size()
            waiting = waiting_sessions(await self.store.all())
            observer_count = await self.observers.count()
        return RelaySnapshot(
            store_size=store_size,
            waiting_count=len(waiting),
            observer_count=observer_count,
            waiting=waiting,
        )

    async def join_observer(self, connection: RelayConnection) -> None:
        async with self._lock:
            joined = await self.observers.join(connection)
            waiting = waiting_sessions(await self.store.all())
            await self.broadcaster.unicast(connection, "sessions_list", _map_sessions(waiting))
            await self.broadcaster.unicast(
                connection,
                "connection_established",
                {"message": "Observer connected", "session_count": len(waiting)},
            )
        if joined:
            logger.info("Observer %s joined with %d waiting sessions", connection.id, len(waiting))

    async def subscribe_producer(self, connection: RelayConnection, session_id: str) -> None:
        async with self._lock:
            await self.producers.bind(connection, session_id)
        logger.info("Producer %s awaiting session %s", connection.id, session_id)

    async def disconnect(self, connection: RelayConnection) -> None:
        async with self._lock:
            was_observer = await self.observers.leave(connection)
            session_id = await self.producers.release(connection)
            discarded = connection.close()
        if was_observer:
            logger.info("Observer %s left", connection.id)
        if session_id is not None:
            logger.info("Producer %s stopped awaiting session %s", connection.id, session_id)
        if discarded:
            logger.debug("Dropped %d undelivered frames for %s", discarded, connection.id)

    async def _broadcast_waiting(self) -> None:
        waiting = waiting_sessions(await self.store.all())
        await self.broadcaster.broadcast("sessions_list", _map_sessions(waiting))
