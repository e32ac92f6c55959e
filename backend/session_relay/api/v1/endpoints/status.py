from fastapi import APIRouter

from session_relay.api.deps import Lifecycle
from session_relay.schemas.session import RelayStatusResponse, SessionRead

router = APIRouter(tags=["status"])


@router.get("/status", response_model=RelayStatusResponse)
async def relay_status(lifecycle: Lifecycle) -> RelayStatusResponse:
    snapshot = await lifecycle.snapshot()
    return RelayStatusResponse(
        store_size=snapshot.store_size,
        waiting_count=snapshot.waiting_count,
        observer_count=snapshot.observer_count,
        sessions=[SessionRead.model_validate(record) for record in snapshot.waiting],
    )
