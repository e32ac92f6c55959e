from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from session_relay.api.v1.endpoints import health
from session_relay.api.v1.router import api_router
from session_relay.core.config import Settings, get_settings
from session_relay.core.errors import SessionNotFoundError
from session_relay.core.logging import configure_logging
from session_relay.schemas.session import ErrorResponse
from session_relay.services.session_lifecycle import SessionLifecycle


async def _session_not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ErrorResponse(error="Session not found").model_dump(),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    app_settings = settings or get_settings()
    configure_logging(app_settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = app_settings
        app.state.session_lifecycle = SessionLifecycle()
        yield

    app = FastAPI(title=app_settings.app_name, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SessionNotFoundError, _session_not_found_handler)

    app.include_router(health.router)
    app.include_router(api_router, prefix=app_settings.api_v1_prefix)

    return app


app = create_app()
