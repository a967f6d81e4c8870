"""Root logging setup for Steward.

Everything goes to stderr; stdout belongs to command output. Each line carries
the bound operation context plus any per-call ``extra`` fields listed in
``fields.RECORD_FIELDS``. Bearer credentials are masked before emission.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

from .context import get_context
from . import fields

_BEARER = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)

# Chatty third-party loggers held at WARNING unless running at DEBUG.
_QUIET_LOGGERS = ("httpx", "httpcore")


def redact(text: str) -> str:
    """Mask bearer tokens in free text."""
    return _BEARER.sub(r"\1***", text)


def _structured(record: logging.LogRecord) -> dict[str, Any]:
    values: dict[str, Any] = dict(getattr(record, "context", None) or {})
    for name in fields.RECORD_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            values[name] = value
    return values


class ContextFilter(logging.Filter):
    """Copy the bound operation context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_context()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.fromtimestamp(record.created, UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: redact(record.getMessage()),
        }
        payload.update(_structured(record))
        if record.exc_info:
            payload[fields.EXCEPTION] = redact(self.formatException(record.exc_info))
        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """Readable single-line output with trailing ``key=value`` pairs."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = redact(super().format(record))
        values = _structured(record)
        if not values:
            return line
        leading = [key for key in fields.LEADING_FIELDS if key in values]
        rest = sorted(key for key in values if key not in fields.LEADING_FIELDS)
        pairs = " ".join(f"{key}={values[key]}" for key in [*leading, *rest])
        return f"{line} {pairs}"


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    service: str | None = None,
    environment: str | None = None,
) -> None:
    """Install a single stderr handler on the root logger.

    Safe to call repeatedly; prior root handlers are dropped.
    """
    level_name = level.upper()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level_name)

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())
    root.addHandler(handler)

    quiet_level = logging.DEBUG if level_name == "DEBUG" else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    seed: dict[str, str] = {}
    if service:
        seed[fields.SERVICE] = service
    if environment:
        seed[fields.ENVIRONMENT] = environment
    if seed:
        from .context import bind_context

        bind_context(**seed)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a standard library logger."""
    return logging.getLogger(name)
