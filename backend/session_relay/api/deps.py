from typing import Annotated

from fastapi import Depends
from fastapi.requests import HTTPConnection

from session_relay.core.config import Settings
from session_relay.services.session_lifecycle import SessionLifecycle


def get_session_lifecycle(connection: HTTPConnection) -> SessionLifecycle:
    return connection.app.state.session_lifecycle


def get_app_settings(connection: HTTPConnection) -> Settings:
    return connection.app.state.settings


Lifecycle = Annotated[SessionLifecycle, Depends(get_session_lifecycle)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
