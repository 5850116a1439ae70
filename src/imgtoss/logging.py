"""Logging configuration for the storage client."""

from __future__ import annotations

import logging

import structlog

from .core.config import ClientSettings


def configure_logging(
    level: str | int | None = None, *, settings: ClientSettings | None = None
) -> int:
    """Configure stdlib logging and structlog JSON output.

    Without an explicit ``level`` the ``log_level`` setting is used
    (``IMGTOSS_LOG_LEVEL``). Returns the numeric level applied.
    """

    if level is None:
        level = (settings or ClientSettings()).log_level
    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")

    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger().setLevel(resolved)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return resolved
