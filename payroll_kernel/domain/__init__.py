"""Pure domain layer: value objects, approval state table, rule types, clock.  Zero I/O."""

from payroll_kernel.domain.approval import (
    APPROVAL_TRANSITIONS,
    ApprovalAction,
    ApprovalActionKind,
    ApprovalStatus,
    Approve,
    BatchApprovalState,
    ProcessingStatus,
    Reject,
    SubmitForApproval,
    TransitionOutcome,
)
from payroll_kernel.domain.batch import (
    ApprovalAuditEntry,
    BatchSnapshot,
    EmployeeLine,
    PayrollBatch,
)
from payroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payroll_kernel.domain.rules import (
    AnomalySortOrder,
    DeadlineRule,
    FrequencyRule,
    JurisdictionRules,
    ReconciliationSettings,
    ScheduleStep,
)
from payroll_kernel.domain.schedule import ComplianceDeadline, DeadlineCategory, PayDate
from payroll_kernel.domain.values import PayPeriod, percent_change, to_amount

__all__ = [
    "APPROVAL_TRANSITIONS",
    "AnomalySortOrder",
    "ApprovalAction",
    "ApprovalActionKind",
    "ApprovalAuditEntry",
    "ApprovalStatus",
    "Approve",
    "BatchApprovalState",
    "BatchSnapshot",
    "Clock",
    "ComplianceDeadline",
    "DeadlineCategory",
    "DeadlineRule",
    "DeterministicClock",
    "EmployeeLine",
    "FrequencyRule",
    "JurisdictionRules",
    "PayDate",
    "PayPeriod",
    "PayrollBatch",
    "ProcessingStatus",
    "ReconciliationSettings",
    "Reject",
    "ScheduleStep",
    "SubmitForApproval",
    "SystemClock",
    "TransitionOutcome",
    "percent_change",
    "to_amount",
]
