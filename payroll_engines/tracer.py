"""
payroll_engines.tracer -- PAYROLL_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine`` wraps a pure engine entry point and, after a
    successful call, logs which engine ran, at which version, over which
    inputs (a short SHA-256 fingerprint) and how long it took.

Architecture position:
    Engines.  Adds a log record and nothing else; wrapped functions stay
    free of I/O and side effects on their arguments.

Invariants enforced:
    - The fingerprint depends only on the named arguments' values, however
      they were passed (positionally or by keyword).
    - Enums contribute their value, dates their ISO form, mappings are
      keyed in sorted order.

Failure modes:
    - An exception from the engine propagates and no trace is written.
    - A fingerprint field the call did not bind hashes as null.
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import json
import time
from collections.abc import Callable, Mapping
from datetime import date
from enum import Enum
from typing import Any

from payroll_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

FINGERPRINT_LENGTH = 16


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    canonical = json.dumps(
        [[name, _plain(arguments.get(name))] for name in fingerprint_fields],
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorate an engine entry point.

    Args:
        engine_name: e.g. "pay_dates", "reconciliation".
        engine_version: bumped when the engine's output for the same inputs
            changes.
        fingerprint_fields: parameter names hashed into input_fingerprint.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs).arguments
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound)

            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - started) * 1000

            _logger.info(
                "PAYROLL_ENGINE_TRACE",
                extra={
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
