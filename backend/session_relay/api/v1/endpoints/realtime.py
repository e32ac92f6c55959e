import asyncio
import json
import logging
from contextlib import suppress

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from session_relay.api.deps import AppSettings, Lifecycle
from session_relay.services.relay_connection import RelayConnection

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


async def _forward_frames(websocket: WebSocket, connection: RelayConnection) -> None:
    while True:
        frame = await connection.next_frame()
        try:
            await websocket.send_json(frame)
        except (RuntimeError, WebSocketDisconnect):
            return


@router.websocket("/realtime")
async def realtime(
    websocket: WebSocket,
    lifecycle: Lifecycle,
    settings: AppSettings,
) -> None:
    await websocket.accept()
    connection = RelayConnection(queue_size=settings.connection_queue_size)
    logger.info("Realtime connection %s opened", connection.id)

    forward_task = asyncio.create_task(_forward_frames(websocket, connection))
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                message = None
            if not isinstance(message, dict):
                connection.deliver("error", {"detail": "Invalid message format"})
                continue

            message_type = str(message.get("type") or "").strip()
            if message_type == "ping":
                connection.deliver("pong", None)
                continue

            if message_type == "observer_join":
                await lifecycle.join_observer(connection)
                continue

            if message_type == "producer_subscribe":
                session_id = message.get("session_id")
                if not isinstance(session_id, str) or not session_id:
                    connection.deliver("error", {"detail": "session_id is required"})
                    continue
                await lifecycle.subscribe_producer(connection, session_id)
                continue

            connection.deliver("error", {"detail": "Unsupported message type"})
    except WebSocketDisconnect as exc:
        logger.info("Realtime connection %s closed (code %s)", connection.id, exc.code)
    finally:
        await lifecycle.disconnect(connection)
        forward_task.cancel()
        with suppress(asyncio.CancelledError):
            await forward_task
