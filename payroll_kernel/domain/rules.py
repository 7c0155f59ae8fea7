"""
Rule-table domain types (``payroll_kernel.domain.rules``).

Responsibility
--------------
Frozen, hashable definitions of the data that drives the two calendar
engines and the reconciliation engine: pay-frequency step lists,
jurisdiction deadline rows, and reconciliation settings.  The YAML
loader in ``payroll_config`` produces these; the engines in
``payroll_engines`` interpret them.

Architecture position
---------------------
**Kernel domain layer** -- pure data, ZERO I/O.  Lives in the kernel so
that both the configuration layer (above) and the engines (beside it)
can share the types without importing each other.

Invariants enforced
-------------------
* Every step and rule carries exactly the parameters its kind requires
  (``STEP_PARAMETERS`` / ``DEADLINE_RULE_PARAMETERS``).
* All types are hashable so engines can memoize on them.
* Reconciliation thresholds are non-negative; ``percent_places`` is 0..6.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from payroll_kernel.domain.schedule import DeadlineCategory
from payroll_kernel.exceptions import ValidationError

WEEKDAYS: dict[str, int] = {
    "MONDAY": 0,
    "TUESDAY": 1,
    "WEDNESDAY": 2,
    "THURSDAY": 3,
    "FRIDAY": 4,
    "SATURDAY": 5,
    "SUNDAY": 6,
}

# kind -> required parameters
STEP_PARAMETERS: dict[str, tuple[str, ...]] = {
    "last_weekday": (),
    "weekday_on_or_before": ("day",),
    "every_weekday": ("weekday",),
    "fortnightly": ("weekday", "anchor"),
}

DEADLINE_RULE_PARAMETERS: dict[str, tuple[str, ...]] = {
    "weekday_on_or_before": ("day",),
    "fixed_date": ("month", "day"),
}


@dataclass(frozen=True)
class ScheduleStep:
    """One step of a pay-frequency rule; yields zero or more dates per month."""

    kind: str
    day: int | None = None
    weekday: int | None = None
    anchor: date | None = None


@dataclass(frozen=True)
class FrequencyRule:
    """A named pay frequency: the union of its steps' dates."""

    code: str
    steps: tuple[ScheduleStep, ...]
    description: str = ""


@dataclass(frozen=True)
class DeadlineRule:
    """One labelled deadline row of a jurisdiction table."""

    label: str
    category: DeadlineCategory
    kind: str
    day: int
    month: int | None = None


@dataclass(frozen=True)
class JurisdictionRules:
    """All deadline rows of one jurisdiction, in table order."""

    code: str
    deadlines: tuple[DeadlineRule, ...]
    name: str = ""
    currency_symbol: str = ""


class AnomalySortOrder(str, Enum):
    """Ordering applied to the anomaly list of a reconciliation report."""

    DETECTION = "detection"
    EMPLOYEE = "employee"
    TYPE = "type"
    MAGNITUDE = "magnitude"


@dataclass(frozen=True)
class ReconciliationSettings:
    """
    Tunables of the reconciliation engine.

    A salary or deduction change is flagged when it is non-zero and its
    absolute percentage exceeds the threshold.  The defaults flag every
    non-zero change and keep detection order.
    """

    salary_change_threshold_percent: float = 0.0
    deduction_change_threshold_percent: float = 0.0
    sort_order: AnomalySortOrder = AnomalySortOrder.DETECTION
    percent_places: int = 2

    def __post_init__(self) -> None:
        for name in (
            "salary_change_threshold_percent",
            "deduction_change_threshold_percent",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError(name, value, "must be a number")
            if value < 0:
                raise ValidationError(name, value, "must not be negative")
            object.__setattr__(self, name, float(value))
        if not isinstance(self.sort_order, AnomalySortOrder):
            try:
                object.__setattr__(self, "sort_order", AnomalySortOrder(self.sort_order))
            except ValueError:
                raise ValidationError(
                    "sort_order",
                    self.sort_order,
                    "must be one of "
                    + ", ".join(o.value for o in AnomalySortOrder),
                ) from None
        if (
            isinstance(self.percent_places, bool)
            or not isinstance(self.percent_places, int)
            or not 0 <= self.percent_places <= 6
        ):
            raise ValidationError(
                "percent_places", self.percent_places, "must be an integer 0..6",
            )
