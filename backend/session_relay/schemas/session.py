from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from session_relay.services.session_store import SessionStatus


class SessionRegisterRequest(BaseModel):
    """Producer registration; any extra field is kept as a session attribute."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1, max_length=256)

    @property
    def attributes(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class SessionCompleteRequest(BaseModel):
    """Observer completion command; extra fields override session attributes."""

    model_config = ConfigDict(extra="allow")

    redirect_target: Any = None

    @property
    def overrides(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class SessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    status: SessionStatus
    created_at: datetime
    completed_at: datetime | None
    redirect_target: Any
    attributes: dict[str, Any]


class SessionRegisterResponse(BaseModel):
    success: bool = True
    id: str
    observer_count: int
    message: str


class SessionLookupResponse(BaseModel):
    success: bool = True
    session: SessionRead
    redirect_target: Any


class SessionCompleteResponse(BaseModel):
    success: bool = True


class RelayStatusResponse(BaseModel):
    success: bool = True
    store_size: int
    waiting_count: int
    observer_count: int
    sessions: list[SessionRead]


class HealthResponse(BaseModel):
    status: str = "OK"
    timestamp: datetime
    store_size: int
    waiting_count: int
    observer_count: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
