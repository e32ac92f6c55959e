from collections.abc import Iterable

from session_relay.services.session_store import SessionRecord, SessionStatus


def waiting_sessions(records: Iterable[SessionRecord]) -> list[SessionRecord]:
    """Records still waiting, oldest first; ties keep arrival order."""
    return sorted(
        (record for record in records if record.status == SessionStatus.waiting),
        key=lambda record: (record.created_at, record.sequence),
    )
