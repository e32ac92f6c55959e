"""Log output for the relay process."""

import logging


def configure_logging(level: str = "INFO") -> None:
    """Send ``session_relay.*`` records to stderr at ``level``; safe to call repeatedly."""
    logger = logging.getLogger("session_relay")
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
