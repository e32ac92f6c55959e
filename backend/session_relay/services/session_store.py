from __future__ import annotations

import asyncio
import copy
import enum
import itertools
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


class SessionStatus(enum.StrEnum):
    waiting = "waiting"
    completed = "completed"


@dataclass
class SessionRecord:
    id: str
    created_at: datetime
    status: SessionStatus = SessionStatus.waiting
    completed_at: datetime | None = None
    redirect_target: Any = None
    attributes: dict[str, Any] = field(default_factory=dict)
    sequence: int = 0


class SessionStore:
    """In-memory session records keyed by session id.

    Records are never evicted. ``put`` replaces wholesale, and reads hand out
    copies so callers never see a later mutation half-applied.
    """

    def __init__(self) -> None:
        self._records: dict[str, SessionRecord] = {}
        self._sequence = itertools.count(1)
        self._lock = asyncio.Lock()

    async def put(self, record: SessionRecord) -> SessionRecord:
        async with self._lock:
            stored = copy.deepcopy(record)
            # A fresh creation carries no arrival number yet.
            if not stored.sequence:
                stored.sequence = next(self._sequence)
            self._records[record.id] = stored
            return copy.deepcopy(stored)

    async def get(self, session_id: str) -> SessionRecord | None:
        async with self._lock:
            record = self._records.get(session_id)
            return copy.deepcopy(record) if record is not None else None

    async def all(self) -> list[SessionRecord]:
        async with self._lock:
            return [copy.deepcopy(record) for record in self._records.values()]

    async def size(self) -> int:
        async with self._lock:
            return len(self._records)
