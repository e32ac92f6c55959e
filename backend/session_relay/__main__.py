import uvicorn

from session_relay.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "session_relay.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
