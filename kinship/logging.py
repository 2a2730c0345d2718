"""Logging setup for the kinship engine and its API server."""

import logging
import os

# Third-party loggers that are too noisy at INFO level
NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "uvicorn.access",
]

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging.

    Call this once at startup (API server or scripts).

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses KINSHIP_LOG_LEVEL env var or INFO.
    """
    if level is None:
        level = os.environ.get("KINSHIP_LOG_LEVEL", "INFO")
    level = level.upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        level = "INFO"

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))

    logging.basicConfig(
        level=getattr(logging, level),
        handlers=[handler],
        force=True,
    )

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
