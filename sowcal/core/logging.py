"""Centralized logging configuration."""
from __future__ import annotations

import logging
from logging.config import dictConfig

from sowcal.core.config import settings


def configure_logging(*, log_level: str | None = None) -> None:
    """Configure package logging once per process."""
    if getattr(configure_logging, "_configured", False):
        return

    level = (log_level or settings.LOG_LEVEL).upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s  %(levelname)-8s  %(name)s: %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": level,
                }
            },
            "loggers": {
                "sowcal": {
                    "handlers": ["console"],
                    "level": level,
                    "propagate": False,
                }
            },
        }
    )

    logging.getLogger(__name__).debug("Logging configured at %s", level)
    setattr(configure_logging, "_configured", True)
