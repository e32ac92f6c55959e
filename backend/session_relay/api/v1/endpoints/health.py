from datetime import UTC, datetime

from fastapi import APIRouter

from session_relay.api.deps import Lifecycle
from session_relay.schemas.session import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(lifecycle: Lifecycle) -> HealthResponse:
    snapshot = await lifecycle.snapshot()
    return HealthResponse(
        timestamp=datetime.now(UTC),
        store_size=snapshot.store_size,
        waiting_count=snapshot.waiting_count,
        observer_count=snapshot.observer_count,
    )
