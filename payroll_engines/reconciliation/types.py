"""
Reconciliation report types.

Pure frozen dataclasses produced by ``payroll_engines.reconciliation.engine``
and serialized by the API.  Reports are recomputed on every request from
two immutable batch snapshots and are never persisted.

Architecture: payroll_engines/reconciliation -- pure domain, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from payroll_kernel.domain.rules import AnomalySortOrder, ReconciliationSettings
from payroll_kernel.domain.values import ZERO


class AnomalyType(str, Enum):
    """Kinds of month-over-month discrepancy, in detection order."""

    MISSING = "MISSING"
    NEW = "NEW"
    SALARY_CHANGE = "SALARY_CHANGE"
    DEDUCTION_CHANGE = "DEDUCTION_CHANGE"


def _money(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


@dataclass(frozen=True)
class ReconciliationAnomaly:
    """
    One discrepancy for one employee.

    ``change_percent`` is None for MISSING and NEW, and for a change from a
    zero baseline.  Deduction fields are set only on DEDUCTION_CHANGE.
    """

    employee_id: str
    employee_name: str
    type: AnomalyType
    previous_gross: Decimal | None = None
    current_gross: Decimal | None = None
    change_percent: float | None = None
    details: str = ""
    previous_deductions: Decimal | None = None
    current_deductions: Decimal | None = None

    @property
    def magnitude(self) -> Decimal:
        """Absolute monetary size of the discrepancy."""
        if self.type == AnomalyType.MISSING:
            return abs(self.previous_gross or ZERO)
        if self.type == AnomalyType.NEW:
            return abs(self.current_gross or ZERO)
        if self.type == AnomalyType.DEDUCTION_CHANGE:
            return abs((self.current_deductions or ZERO) - (self.previous_deductions or ZERO))
        return abs((self.current_gross or ZERO) - (self.previous_gross or ZERO))

    def to_dict(self) -> dict[str, object]:
        result: dict[str, object] = {
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "type": self.type.value,
            "previous_gross": _money(self.previous_gross),
            "current_gross": _money(self.current_gross),
            "change_percent": self.change_percent,
            "details": self.details,
        }
        if self.type == AnomalyType.DEDUCTION_CHANGE:
            result["previous_deductions"] = _money(self.previous_deductions)
            result["current_deductions"] = _money(self.current_deductions)
        return result


@dataclass(frozen=True)
class ReconciliationReport:
    """Month-over-month comparison of two payroll batches."""

    month: int
    year: int
    current_batch_total: Decimal
    previous_batch_total: Decimal
    variance: Decimal
    variance_percent: float
    headcount_change: int
    anomalies: tuple[ReconciliationAnomaly, ...] = ()
    has_baseline: bool = True
    previous_month: int = 0
    previous_year: int = 0
    average_salary_change: Decimal = ZERO

    @property
    def anomaly_count(self) -> int:
        return len(self.anomalies)

    def anomalies_of(self, anomaly_type: AnomalyType) -> tuple[ReconciliationAnomaly, ...]:
        return tuple(a for a in self.anomalies if a.type == anomaly_type)

    def to_dict(self) -> dict[str, object]:
        return {
            "month": self.month,
            "year": self.year,
            "previous_month": self.previous_month,
            "previous_year": self.previous_year,
            "has_baseline": self.has_baseline,
            "current_batch_total": str(self.current_batch_total),
            "previous_batch_total": str(self.previous_batch_total),
            "variance": str(self.variance),
            "variance_percent": self.variance_percent,
            "headcount_change": self.headcount_change,
            "average_salary_change": str(self.average_salary_change),
            "anomalies": [a.to_dict() for a in self.anomalies],
        }


__all__ = [
    "AnomalySortOrder",
    "AnomalyType",
    "ReconciliationAnomaly",
    "ReconciliationReport",
    "ReconciliationSettings",
]
