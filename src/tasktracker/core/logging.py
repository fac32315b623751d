"""Logging setup: one stdout handler, JSON or text, enriched with request context."""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from .config import Settings
from .context import get_request_id, get_user_id

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(request_id)s | user=%(user_id)s | %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_BUILTIN_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class JsonLogFormatter(logging.Formatter):
    """Render each record as a single JSON object per line."""

    def __init__(self, *, static_fields: dict[str, Any] | None = None) -> None:
        super().__init__()
        self._static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            **self._static_fields,
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
            "user_id": getattr(record, "user_id", "-"),
        }
        entry.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _BUILTIN_RECORD_ATTRS and key not in entry
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack"] = self.formatStack(record.stack_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class RequestContextFilter(logging.Filter):
    """Copy the current request id and caller id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        record.user_id = get_user_id()
        return True


def _formatter_config(settings: Settings) -> dict[str, Any]:
    if settings.log_format == "text":
        return {"format": TEXT_FORMAT, "datefmt": TEXT_DATE_FORMAT}
    return {
        "()": JsonLogFormatter,
        "static_fields": {"service": settings.project_name, "environment": settings.environment},
    }


def _dedicated_logger(level: int | str) -> dict[str, Any]:
    return {"handlers": ["stdout"], "level": level, "propagate": False}


def configure_logging(settings: Settings) -> None:
    """Route the root, uvicorn and application loggers through one stdout handler."""
    level = settings.log_level if isinstance(logging.getLevelName(settings.log_level), int) else "INFO"
    logging.captureWarnings(True)
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"service": _formatter_config(settings)},
            "filters": {"request_context": {"()": RequestContextFilter}},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "service",
                    "filters": ["request_context"],
                    "level": level,
                }
            },
            "root": {"handlers": ["stdout"], "level": level},
            "loggers": {
                "uvicorn": _dedicated_logger(level),
                "uvicorn.error": _dedicated_logger(level),
                # CorrelationIdMiddleware already logs one line per request.
                "uvicorn.access": _dedicated_logger("WARNING"),
            },
        }
    )


__all__ = ["JsonLogFormatter", "RequestContextFilter", "configure_logging"]
