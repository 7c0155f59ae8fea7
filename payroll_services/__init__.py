"""
payroll_services -- Stateful orchestration over the pure payroll engines.

Each service receives a SQLAlchemy Session and owns its transaction
boundary: commit on success, rollback and re-raise on failure.
"""

from payroll_services.approval_service import ApprovalService
from payroll_services.batch_registry import BatchLineInput, BatchRegistry
from payroll_services.calendar_service import CalendarMonthView, PayrollCalendarService
from payroll_services.events import (
    ApprovalEventSink,
    InMemoryEventSink,
    LoggingEventSink,
)
from payroll_services.reconciliation_service import ReconciliationService
from payroll_services.snapshots import BatchSnapshotSource, SqlBatchSnapshotSource

__all__ = [
    "ApprovalEventSink",
    "ApprovalService",
    "BatchLineInput",
    "BatchRegistry",
    "BatchSnapshotSource",
    "CalendarMonthView",
    "InMemoryEventSink",
    "LoggingEventSink",
    "PayrollCalendarService",
    "ReconciliationService",
    "SqlBatchSnapshotSource",
]
