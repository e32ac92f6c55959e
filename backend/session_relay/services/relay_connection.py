from __future__ import annotations

import asyncio
import uuid
from typing import Any

from session_relay.core.errors import DeliveryFailure


class RelayConnection:
    """Outbound side of one realtime connection.

    Delivery only enqueues; the transport drains frames with ``next_frame``.
    """

    def __init__(self, queue_size: int = 64) -> None:
        self.id = uuid.uuid4().hex
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=queue_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, event: str, payload: Any) -> None:
        if self._closed:
            raise DeliveryFailure(self.id, event)

        if self._queue.full():
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                pass

        try:
            self._queue.put_nowait({"type": event, "data": payload})
        except asyncio.QueueFull as exc:
            raise DeliveryFailure(self.id, event, reason="queue saturated") from exc

    async def next_frame(self) -> dict[str, Any]:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> int:
        """Reject further deliveries and discard queued frames; returns how many."""
        self._closed = True
        discarded = self.pending()
        while not self._queue.empty():
            self._queue.get_nowait()
        return discarded

    def __repr__(self) -> str:
        return f"RelayConnection(id={self.id!r}, closed={self._closed})"
