"""
Tests for structured JSON logging, log context and the engine tracer.
"""

import json
import logging
import sys
from datetime import date
from decimal import Decimal
from uuid import uuid4

from payroll_engines.tracer import compute_input_fingerprint, traced_engine
from payroll_kernel.exceptions import InvalidStateError
from payroll_kernel.logging_config import LogContext, StructuredFormatter, get_logger


def _record(message, **extra):
    record = logging.LogRecord(
        "payroll_kernel.test", logging.INFO, __file__, 1, message, (), None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_one_json_line_with_extras(self):
        batch_id = uuid4()
        line = StructuredFormatter().format(
            _record("approval_transition_applied", batch=batch_id, total=Decimal("1.50")),
        )
        payload = json.loads(line)

        assert payload["message"] == "approval_transition_applied"
        assert payload["level"] == "INFO"
        assert payload["batch"] == str(batch_id)
        assert payload["total"] == "1.50"

    def test_context_fields_included(self):
        with LogContext.bind(correlation_id="req-9", company_id="c-1"):
            payload = json.loads(StructuredFormatter().format(_record("x")))
        assert payload["correlation_id"] == "req-9"
        assert payload["company_id"] == "c-1"

    def test_exception_fields(self):
        try:
            raise InvalidStateError("approve", "approval status PENDING_APPROVAL", "none")
        except InvalidStateError:
            record = logging.LogRecord(
                "payroll_kernel.test", logging.ERROR, __file__, 1, "failed", (),
                sys.exc_info(),
            )
        payload = json.loads(StructuredFormatter().format(record))

        assert payload["exc_code"] == "INVALID_STATE"
        assert payload["exc_found"] == "none"
        assert "traceback" in payload


class TestLogContext:
    def test_bind_restores_previous_values(self):
        LogContext.set(actor_id="outer")
        with LogContext.bind(actor_id="inner", batch_id="b-1"):
            assert LogContext.get_all()["actor_id"] == "inner"
        assert LogContext.get_all() == {"actor_id": "outer"}

    def test_clear(self):
        LogContext.set(correlation_id="c")
        LogContext.clear()
        assert LogContext.get_all() == {}


class TestTracer:
    def test_fingerprint_deterministic(self):
        args = {"year": 2025, "month": 2, "frequency": "MONTHLY"}
        first = compute_input_fingerprint(("year", "month", "frequency"), args)
        assert first == compute_input_fingerprint(("year", "month", "frequency"), dict(args))
        assert len(first) == 16

    def test_fingerprint_covers_positional_arguments(self, captured_logs):
        @traced_engine("sample", "1.0", fingerprint_fields=("day",))
        def shift(day, days=1):
            return day

        shift(date(2025, 1, 1))
        shift(date(2025, 1, 2))
        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_ENGINE_TRACE"]

        assert traces[-1]["engine_name"] == "sample"
        assert traces[-1]["input_fingerprint"] != traces[-2]["input_fingerprint"]

    def test_logger_namespace(self):
        assert get_logger("engines.x").name == "payroll_kernel.engines.x"
