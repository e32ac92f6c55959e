class RelayError(Exception):
    """Base class for errors raised by the relay core."""


class SessionNotFoundError(RelayError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class DeliveryFailure(RelayError):
    """A single push to one connection could not be enqueued."""

    def __init__(self, connection_id: str, event: str, reason: str = "connection closed") -> None:
        super().__init__(f"Cannot deliver {event!r} to {connection_id}: {reason}")
        self.connection_id = connection_id
        self.event = event
        self.reason = reason
