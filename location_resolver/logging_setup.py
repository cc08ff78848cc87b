"""Logging configuration for the location resolution engine.

Components log through `logging.getLogger(__name__)` with short
messages and `extra={...}` fields. This module installs a root handler
that renders those fields, either as plain text or as one JSON object
per line when structured logging is enabled:

    {"timestamp": "2026-01-01T00:00:00+00:00", "level": "INFO",
     "logger": "location_resolver.services.location_resolver",
     "message": "Search resolved", "query": "mum", "results": 3}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import ObservabilityConfig, get_config

# Attributes every LogRecord carries; anything else came from extra={}
_RESERVED_FIELDS = {
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "lineno", "funcName", "created",
    "thread", "threadName", "processName", "process", "exc_info",
    "exc_text", "stack_info", "message", "msecs", "relativeCreated",
    "taskName", "asctime",
}

_NOISY_LOGGERS = ("urllib3", "requests", "sqlalchemy.engine")


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_FIELDS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if record.levelno >= logging.ERROR:
            entry["file"] = record.pathname
            entry["line"] = record.lineno

        for key, value in _extra_fields(record).items():
            try:
                json.dumps(value)
                entry[key] = value
            except (TypeError, ValueError):
                entry[key] = str(value)

        return json.dumps(entry, ensure_ascii=False, default=str)


class KeyValueFormatter(logging.Formatter):
    """Plain-text formatter that appends extra fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extra = _extra_fields(record)
        if extra:
            pairs = ", ".join(f"{key}={value}" for key, value in extra.items())
            message = f"{message} {{{pairs}}}"
        return message


def configure_logging(config: Optional[ObservabilityConfig] = None) -> None:
    """Install the root handler according to the observability settings.

    Safe to call more than once; previous root handlers are replaced.

    Args:
        config: Observability settings (defaults to the loaded config).
    """
    config = config or get_config().observability
    level = getattr(logging, config.level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if config.structured:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(KeyValueFormatter(config.format))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger(__name__).debug(
        "Logging configured",
        extra={"level": config.level, "structured": config.structured},
    )
