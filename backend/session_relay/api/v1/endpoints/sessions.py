from fastapi import APIRouter, status

from session_relay.api.deps import Lifecycle
from session_relay.schemas.session import (
    ErrorResponse,
    SessionCompleteRequest,
    SessionCompleteResponse,
    SessionLookupResponse,
    SessionRead,
    SessionRegisterRequest,
    SessionRegisterResponse,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])

_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=SessionRegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_session(
    payload: SessionRegisterRequest,
    lifecycle: Lifecycle,
) -> SessionRegisterResponse:
    result = await lifecycle.register(payload.id, payload.attributes)
    return SessionRegisterResponse(
        id=result.id,
        observer_count=result.observer_count,
        message=f"Session registered and sent to {result.observer_count} observers",
    )


@router.get("/{session_id}", response_model=SessionLookupResponse, responses=_NOT_FOUND)
async def get_session(
    session_id: str,
    lifecycle: Lifecycle,
) -> SessionLookupResponse:
    record = await lifecycle.lookup(session_id)
    return SessionLookupResponse(
        session=SessionRead.model_validate(record),
        redirect_target=record.redirect_target,
    )


@router.post(
    "/{session_id}/complete",
    response_model=SessionCompleteResponse,
    responses=_NOT_FOUND,
)
async def complete_session(
    session_id: str,
    payload: SessionCompleteRequest,
    lifecycle: Lifecycle,
) -> SessionCompleteResponse:
    await lifecycle.complete(session_id, payload.redirect_target, payload.overrides)
    return SessionCompleteResponse()
