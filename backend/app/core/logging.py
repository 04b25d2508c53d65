"""Centralized logging configuration."""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict, Iterable

from app.core.request_context import current_request_id

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s"

# SDK loggers echo full request bodies at DEBUG.
NOISY_LOGGERS = ("httpx", "openai", "apscheduler.executors.default")


class RequestIdFilter(logging.Filter):
    """Stamp log records with the active request id, or ``-`` outside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id() or "-"
        return True


def build_logging_config(log_level: str, quiet_loggers: Iterable[str] = NOISY_LOGGERS) -> Dict[str, Any]:
    level = log_level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "filters": {"request_id": {"()": "app.core.logging.RequestIdFilter"}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": level,
                "filters": ["request_id"],
            }
        },
        "loggers": {name: {"level": "WARNING"} for name in quiet_loggers},
        "root": {"handlers": ["console"], "level": level},
    }


def configure_logging(*, log_level: str = "INFO") -> None:
    """Apply the logging config once per process; later calls are ignored."""
    if getattr(configure_logging, "_configured", False):
        return
    dictConfig(build_logging_config(log_level))
    logging.getLogger(__name__).debug("Logging configured at %s", log_level)
    setattr(configure_logging, "_configured", True)
