from fastapi import APIRouter

from session_relay.api.v1.endpoints import realtime, sessions, status

api_router = APIRouter()
api_router.include_router(sessions.router)
api_router.include_router(status.router)
api_router.include_router(realtime.router)
