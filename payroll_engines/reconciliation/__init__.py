"""
Reconciliation -- month-over-month comparison of payroll batch snapshots.

Pure types and the pure ``reconcile`` engine.  Loading snapshots and
choosing settings belong to payroll_services.reconciliation_service.
"""

from payroll_engines.reconciliation.engine import (
    detect_anomalies,
    previous_period,
    reconcile,
    sort_anomalies,
)
from payroll_engines.reconciliation.types import (
    AnomalySortOrder,
    AnomalyType,
    ReconciliationAnomaly,
    ReconciliationReport,
    ReconciliationSettings,
)

__all__ = [
    "AnomalySortOrder",
    "AnomalyType",
    "ReconciliationAnomaly",
    "ReconciliationReport",
    "ReconciliationSettings",
    "detect_anomalies",
    "previous_period",
    "reconcile",
    "sort_anomalies",
]
