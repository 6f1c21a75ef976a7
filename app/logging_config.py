"""
logging_config.py — Loguru setup for the procurement service

Loguru is the only log backend. Records emitted through stdlib logging
(uvicorn, SQLAlchemy, httpx, alembic) are forwarded into it so every line
carries the same format and the current request ID.

Business Rules:
- production: one JSON object per line on stdout
- anything else: colorized single-line format with the request ID column
- request_id is "-" outside an HTTP request (set by the middleware in main.py)
- Library chatter below WARNING is dropped

Called by: app/main.py (lifespan)
Depends on: app/config.py (log_level, environment)
"""

import logging
import sys

from loguru import logger

from .config import Settings, get_settings

DEV_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "{extra[request_id]} | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - {message}"
)

QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine")


class _InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = sys._getframe(6), 6
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _sink_options(settings: Settings) -> dict:
    level = settings.log_level.upper()
    if settings.is_production:
        return {"level": level, "format": "{message}", "serialize": True}
    return {"level": level, "format": DEV_FORMAT, "colorize": True}


def setup_logging(settings: Settings | None = None) -> None:
    """(Re)configure loguru. Safe to call more than once."""
    settings = settings or get_settings()

    logger.remove()
    options = _sink_options(settings)
    logger.add(sys.stdout, **options)
    logger.configure(extra={"request_id": "-"})

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging ready (level={}, json={})", options["level"], settings.is_production)
