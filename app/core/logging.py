"""Application-wide logging setup.

All module loggers (``logging.getLogger(__name__)``) propagate to a single stdout
handler on the root logger. uvicorn loggers share the same handler so request logs
and service logs are interleaved in one stream.
"""
import logging
from logging.config import dictConfig
from app.core.config import settings


def _build_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "uvicorn": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": level, "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging(level: str = None) -> None:
    """Configure logging once; a no-op when the root logger already has handlers."""
    if logging.getLogger().handlers:
        return
    dictConfig(_build_config((level or settings.LOG_LEVEL).upper()))
