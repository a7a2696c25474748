"""
forecast_engines.tracer -- FORECAST_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine(name, version, fingerprint_fields=...)`` wraps an
    engine entry point and, after each call, logs one
    FORECAST_ENGINE_TRACE record naming the engine and version, a short
    fingerprint of the inputs that determine the result, and how long
    the call took.

Architecture position:
    Engines -- observability for the pure calculation layer.  Reads the
    call arguments, writes a log record, and changes nothing else.

Invariants enforced:
    - ``canonical_form`` is deterministic for every input record type:
      Decimals are normalized (``1.50`` == ``1.5``), mapping keys are
      sorted, sequences keep their order and dataclasses are expanded
      field by field in declaration order.
    - Fingerprints cover positional and keyword arguments alike; the
      call is bound against the wrapped function's signature first.
    - Fingerprints are the first 16 hex chars of a SHA-256 digest.

Failure modes:
    - A fingerprint field that is not a parameter of the call is
      fingerprinted as "null".
    - Types without a canonical form fall back to ``str(value)``.

Usage:
    @traced_engine("offer_totals", "1.0", fingerprint_fields=("offer",))
    def calculate_offer_totals(offer, products, category_settings): ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

# Plain logging so the tracer stays importable without kernel logging setup.
_logger = logging.getLogger("forecast_kernel.engines.tracer")

FINGERPRINT_LENGTH = 16


def canonical_form(value: Any) -> str:
    """Stable text form of an engine input, for fingerprints and cache keys."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return canonical_form(value.value)
    if isinstance(value, Decimal):
        return str(value.normalize()) if value.is_finite() else str(value)
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = ",".join(
            f"{f.name}:{canonical_form(getattr(value, f.name))}"
            for f in dataclasses.fields(value)
        )
        return f"{type(value).__name__}({fields})"
    if isinstance(value, Mapping):
        entries = sorted((str(k), canonical_form(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in entries) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(map(canonical_form, value)) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
    length: int = FINGERPRINT_LENGTH,
) -> str:
    """Hex digest prefix over ``field=canonical_form(value)`` for each field."""
    canonical = "|".join(
        f"{name}={canonical_form(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:length]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorate an engine entry point with FORECAST_ENGINE_TRACE logging.

    Args:
        engine_name: Engine identifier, e.g. "offer_profit".
        engine_version: Bumped whenever results for the same inputs change.
        fingerprint_fields: Parameter names whose values determine the
            result.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields and _logger.isEnabledFor(logging.INFO):
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.monotonic()
            result = func(*args, **kwargs)
            elapsed_ms = (time.monotonic() - started) * 1000

            _logger.info(
                "FORECAST_ENGINE_TRACE",
                extra={
                    "trace_type": "FORECAST_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round(elapsed_ms, 2),
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
