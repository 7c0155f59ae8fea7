"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll engines.  This is the canonical import surface for
    payroll_services and payroll_api.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel domain types, exceptions and logging.
    MUST NOT import payroll_config, payroll_services or payroll_api.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Timestamps and dates are passed in by the services.
    - Decimal-only arithmetic for money.
    - Determinism: identical inputs always produce identical outputs, so
      the calendar engines memoize per (rule, year, month).

Audit relevance:
    Every engine invocation is traced via ``@traced_engine`` (see
    ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE records.

Usage:
    from payroll_engines import PayDateScheduler, ComplianceDeadlineCalendar
    from payroll_engines import reconcile, transition
"""

from payroll_engines.approval import is_legal, legal_actions, transition
from payroll_engines.compliance import (
    ComplianceDeadlineCalendar,
    overdue_deadlines,
    resolve_deadlines,
)
from payroll_engines.pay_dates import (
    PayDateScheduler,
    previous_weekday,
    resolve_pay_dates,
)
from payroll_engines.reconciliation import (
    AnomalySortOrder,
    AnomalyType,
    ReconciliationAnomaly,
    ReconciliationReport,
    ReconciliationSettings,
    reconcile,
)
from payroll_engines.tracer import traced_engine

__all__ = [
    "AnomalySortOrder",
    "AnomalyType",
    "ComplianceDeadlineCalendar",
    "PayDateScheduler",
    "ReconciliationAnomaly",
    "ReconciliationReport",
    "ReconciliationSettings",
    "is_legal",
    "legal_actions",
    "overdue_deadlines",
    "previous_weekday",
    "reconcile",
    "resolve_deadlines",
    "resolve_pay_dates",
    "traced_engine",
    "transition",
]
