import asyncio
import logging

import pytest

from session_relay.core.errors import DeliveryFailure
from session_relay.services.connection_registry import ObserverRegistry, ProducerBindings
from session_relay.services.fanout_broadcaster import FanoutBroadcaster
from session_relay.services.relay_connection import RelayConnection


async def _drain(connection: RelayConnection) -> list[dict]:
    frames = []
    while connection.pending():
        frames.append(await asyncio.wait_for(connection.next_frame(), timeout=0.2))
    return frames


def test_connection_delivers_frames_in_order():
    async def run() -> None:
        connection = RelayConnection()
        connection.deliver("new_session", {"id": "S1"})
        connection.deliver("sessions_list", [])

        first = await asyncio.wait_for(connection.next_frame(), timeout=0.2)
        second = await asyncio.wait_for(connection.next_frame(), timeout=0.2)
        assert first == {"type": "new_session", "data": {"id": "S1"}}
        assert second == {"type": "sessions_list", "data": []}

    asyncio.run(run())


def test_closed_connection_rejects_delivery():
    connection = RelayConnection()
    connection.close()

    with pytest.raises(DeliveryFailure) as exc_info:
        connection.deliver("redirect", {"redirect_target": "/home"})

    assert exc_info.value.connection_id == connection.id
    assert exc_info.value.event == "redirect"


def test_saturated_connection_drops_oldest_frame():
    async def run() -> None:
        connection = RelayConnection(queue_size=2)
        for index in range(3):
            connection.deliver("tick", index)

        assert [frame["data"] for frame in await _drain(connection)] == [1, 2]

    asyncio.run(run())


def test_close_discards_queued_frames():
    connection = RelayConnection()
    connection.deliver("new_session", {"id": "S1"})
    connection.deliver("sessions_list", [])

    assert connection.close() == 2
    assert connection.pending() == 0
    assert connection.close() == 0


def test_registry_join_and_leave_are_idempotent():
    async def run() -> None:
        registry = ObserverRegistry()
        connection = RelayConnection()

        assert await registry.join(connection)
        assert not await registry.join(connection)
        assert await registry.count() == 1

        assert await registry.leave(connection)
        assert not await registry.leave(connection)
        assert await registry.members() == []

    asyncio.run(run())


def test_broadcast_reaches_every_observer():
    async def run() -> None:
        registry = ObserverRegistry()
        broadcaster = FanoutBroadcaster(registry)
        observers = [RelayConnection() for _ in range(3)]
        for connection in observers:
            await registry.join(connection)

        delivered = await broadcaster.broadcast("new_session", {"id": "S1"})

        assert delivered == 3
        for connection in observers:
            assert await _drain(connection) == [{"type": "new_session", "data": {"id": "S1"}}]

    asyncio.run(run())


def test_broadcast_skips_dead_observer_without_raising(caplog):
    async def run() -> None:
        registry = ObserverRegistry()
        broadcaster = FanoutBroadcaster(registry)
        alive_a, dead, alive_b = RelayConnection(), RelayConnection(), RelayConnection()
        for connection in (alive_a, dead, alive_b):
            await registry.join(connection)
        dead.close()

        delivered = await broadcaster.broadcast("sessions_list", [])

        assert delivered == 2
        assert len(await _drain(alive_a)) == 1
        assert len(await _drain(alive_b)) == 1

    relay_logger = logging.getLogger("session_relay")
    relay_logger.addHandler(caplog.handler)
    try:
        with caplog.at_level(logging.WARNING, logger="session_relay"):
            asyncio.run(run())
    finally:
        relay_logger.removeHandler(caplog.handler)

    assert any("Delivery failed" in record.getMessage() for record in caplog.records)


def test_unicast_targets_only_one_connection():
    async def run() -> None:
        registry = ObserverRegistry()
        broadcaster = FanoutBroadcaster(registry)
        observer = RelayConnection()
        producer = RelayConnection()
        await registry.join(observer)

        assert await broadcaster.unicast(producer, "redirect", {"redirect_target": "/home"})
        assert await _drain(producer) == [{"type": "redirect", "data": {"redirect_target": "/home"}}]
        assert observer.pending() == 0

        producer.close()
        assert not await broadcaster.unicast(producer, "redirect", {})

    asyncio.run(run())


def test_producer_binding_moves_on_resubscribe():
    async def run() -> None:
        bindings = ProducerBindings()
        connection = RelayConnection()

        await bindings.bind(connection, "A")
        await bindings.bind(connection, "B")

        assert await bindings.connections_for("A") == []
        assert await bindings.connections_for("B") == [connection]

        assert await bindings.release(connection) == "B"
        assert await bindings.release(connection) is None
        assert await bindings.connections_for("B") == []

    asyncio.run(run())
