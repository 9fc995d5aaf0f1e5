"""Centralised logging configuration for the taskboard service."""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from .config import Settings
from .context import get_request_id

_RESERVED_LOG_RECORD_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
}


class JsonLogFormatter(logging.Formatter):
    """Render log records as structured JSON objects."""

    def __init__(
        self,
        *,
        defaults: dict[str, Any] | None = None,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)  # type: ignore[arg-type]
        self._defaults = defaults or {}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = dict(self._defaults)
        payload.update(
            {
                "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
                "request_id": getattr(record, "request_id", "-"),
            }
        )

        for key, value in record.__dict__.items():
            if key in _RESERVED_LOG_RECORD_ATTRS or key == "request_id":
                continue
            payload.setdefault(key, self._coerce_extra(value))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)

        return json.dumps(payload, ensure_ascii=False, default=str)

    @staticmethod
    def _coerce_extra(value: Any) -> Any:
        try:
            json.dumps(value)
        except TypeError:
            return str(value)
        return value


class RequestContextFilter(logging.Filter):
    """Attach request correlation identifiers to emitted log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.request_id = get_request_id()
        return True


def _route(handler: str, level: int) -> dict[str, Any]:
    return {"handlers": [handler], "level": level, "propagate": False}


def build_logging_config(settings: Settings) -> dict[str, Any]:
    """Return the ``dictConfig`` mapping for the given settings.

    Application and server records share one JSON handler on stdout. The
    uvicorn access logger is held at WARNING because
    :class:`~taskboard.core.middleware.CorrelationIdMiddleware` writes a
    structured access line that carries the request id. The motor driver is
    held at WARNING as well.
    """

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    quiet = max(level, logging.WARNING)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": JsonLogFormatter,
                "defaults": {
                    "service": settings.project_name,
                    "environment": settings.environment,
                    "version": settings.version,
                },
            }
        },
        "filters": {
            "request_context": {"()": RequestContextFilter},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "json",
                "level": level,
                "filters": ["request_context"],
            }
        },
        "root": {"handlers": ["default"], "level": level},
        "loggers": {
            "uvicorn": _route("default", level),
            "uvicorn.error": _route("default", level),
            "uvicorn.access": _route("default", quiet),
            "taskboard.access": _route("default", level),
            "pymongo": _route("default", quiet),
        },
    }


def configure_logging(settings: Settings) -> None:
    """Apply the structured logging configuration for ``settings``."""

    logging.captureWarnings(True)
    logging.config.dictConfig(build_logging_config(settings))
