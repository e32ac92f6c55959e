from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from session_relay.core.config import Settings
from session_relay.main import create_app


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        environment="test",
        cors_origins=["*"],
        connection_queue_size=16,
    )


@pytest.fixture()
def client(settings: Settings) -> Generator[TestClient, None, None]:
    app = create_app(settings)

    with TestClient(app) as test_client:
        yield test_client
