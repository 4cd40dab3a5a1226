"""Structured logging helpers: JSON lines with build context."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

# Attributes passed through `extra=` that are copied into the payload.
_CONTEXT_FIELDS = ("handler", "stage", "phase", "path")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = str(value)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def get_logger(name: str = "fn_builder", level: int | None = None) -> logging.Logger:
    """Return the package logger, attaching the JSON stderr handler once.

    Child loggers (``fn_builder.<module>``) propagate to it instead of getting
    their own handler.
    """
    root = logging.getLogger("fn_builder")
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    if level is not None:
        root.setLevel(level)
    return logging.getLogger(name)
