"""
Structured logging for the forecast kernel and engines.

Every record is written as one JSON object per line:

    {"ts": ..., "level": ..., "logger": ..., "message": ...,
     <context fields>, <extra fields>, <exception fields>}

Context fields (``correlation_id``, ``offer_id``, ``actor_id``,
``trace_id``) come from ``LogContext`` and follow the caller through
threads and asyncio tasks via ``contextvars``.  Extra fields are the
``extra={...}`` mapping of the logging call; Decimal, UUID, date and
Enum values are rendered as strings.

Usage:
    from forecast_kernel.logging_config import LogContext, get_logger

    logger = get_logger("engines.aggregator")
    with LogContext.bind(offer_id=offer.id):
        logger.info("offer_profit_calculated", extra={"net_profit": "120.00"})
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

_LOGGER_PREFIX = "forecast_kernel"

_CONTEXT_FIELDS = ("correlation_id", "offer_id", "actor_id", "trace_id")

_context: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"forecast_log_{name}", default=None) for name in _CONTEXT_FIELDS
}


def _context_var(name: str) -> ContextVar[str | None]:
    try:
        return _context[name]
    except KeyError:
        raise TypeError(f"Unknown log context field: {name!r}") from None


class LogContext:
    """Request-scoped log fields, safe across threads and asyncio tasks."""

    FIELDS = _CONTEXT_FIELDS

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set context fields. ``None`` values leave the field unchanged."""
        for name, value in fields.items():
            var = _context_var(name)
            if value is not None:
                var.set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        """All fields that currently have a value."""
        values = ((name, _context[name].get()) for name in _CONTEXT_FIELDS)
        return {name: value for name, value in values if value is not None}

    @staticmethod
    def clear() -> None:
        for var in _context.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """Set fields for the duration of a ``with`` block, then restore them."""
        tokens = []
        for name, value in fields.items():
            var = _context_var(name)
            if value is not None:
                tokens.append((var, var.set(value)))
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    # Decimal, UUID and anything else without a JSON form
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """Type, message and the structured attributes of kernel exceptions."""
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``forecast_kernel`` namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``forecast_kernel`` logger.

    Only the first call has an effect until ``reset_logging()``.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False
    root.addHandler(handler)


def reset_logging() -> None:
    """Undo ``configure_logging``. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    root.propagate = True
