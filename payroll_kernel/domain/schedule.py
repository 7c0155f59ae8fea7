"""
Schedule domain types (``payroll_kernel.domain.schedule``).

Responsibility
--------------
Derived value objects returned by the pay date scheduler and the
compliance deadline calendar.  Neither is ever persisted; both are
recomputed from (year, month, frequency/jurisdiction) on every request.

Invariants enforced
-------------------
* Every ``PayDate`` falls on a weekday (Mon-Fri).
* ``ComplianceDeadline.category`` is one of tax / compliance / filing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class DeadlineCategory(str, Enum):
    """Kinds of statutory deadline."""

    TAX = "tax"
    COMPLIANCE = "compliance"
    FILING = "filing"


def is_weekday(day: date) -> bool:
    """Mon-Fri.  No holiday calendar is modelled."""
    return day.weekday() < 5


@dataclass(frozen=True, slots=True, order=True)
class PayDate:
    """A pay date.  Always a working day."""

    date: date
    is_working_day: bool = True

    def __post_init__(self) -> None:
        if not is_weekday(self.date):
            raise ValueError(f"Pay date {self.date.isoformat()} falls on a weekend")

    def to_dict(self) -> dict[str, object]:
        return {"date": self.date.isoformat(), "is_working_day": self.is_working_day}


@dataclass(frozen=True, slots=True)
class ComplianceDeadline:
    """A statutory deadline resolved to a calendar date."""

    date: date
    label: str
    category: DeadlineCategory

    def is_overdue(self, today: date) -> bool:
        """True once ``today`` is past the deadline date."""
        return self.date < today

    def to_dict(self) -> dict[str, object]:
        return {
            "date": self.date.isoformat(),
            "label": self.label,
            "category": self.category.value,
        }
