"""
Module: payroll_engines.pay_dates
Responsibility:
    Map (year, month, pay frequency) to the ordered, distinct pay dates of
    that month.  Frequencies are data (``FrequencyRule`` rows loaded from
    the rule table); this module is the small interpreter for their steps.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel domain types, exceptions and logging.

Invariants enforced:
    - Every returned date is a weekday inside [year-month-01, last day].
    - Weekend targets move BACKWARD one day at a time, never forward:
      Saturday the 15th resolves to Friday the 14th.
    - Dates are strictly increasing (ordered, distinct).
    - Deterministic and memoized per (rule, year, month).

Failure modes:
    - ConfigurationError for a frequency code absent from the table.
    - ValidationError for a month outside 1..12 or a year outside 1..9999.

Audit relevance:
    Every call is traced via ``@traced_engine``; the trace fingerprint
    covers (year, month, frequency).

Usage:
    from payroll_config import get_active_rules
    from payroll_engines.pay_dates import PayDateScheduler

    scheduler = PayDateScheduler(get_active_rules().pay_frequencies)
    scheduler.compute_pay_dates(2025, 2, "MONTHLY")
    # (PayDate(date=date(2025, 2, 28)),)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import date, timedelta
from functools import lru_cache

from payroll_kernel.domain.rules import FrequencyRule, ScheduleStep
from payroll_kernel.domain.schedule import PayDate, is_weekday
from payroll_kernel.domain.values import PayPeriod, validate_period
from payroll_kernel.exceptions import ConfigurationError
from payroll_kernel.logging_config import get_logger
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.pay_dates")

_ONE_DAY = timedelta(days=1)
_FORTNIGHT = 14


def previous_weekday(day: date) -> date:
    """Walk backward one day at a time until ``day`` is Mon-Fri."""
    while not is_weekday(day):
        day -= _ONE_DAY
    return day


def clamp_day(year: int, month: int, day: int) -> date:
    """The ``day``-th of the month, clamped to the month's last day."""
    last = PayPeriod(year, month).last_day
    return last if day >= last.day else date(year, month, day)


def weekdays_in_month(year: int, month: int, weekday: int) -> list[date]:
    """Every date of the month falling on ``weekday`` (0=Monday)."""
    first = date(year, month, 1)
    current = first + timedelta(days=(weekday - first.weekday()) % 7)
    result: list[date] = []
    while current.month == month:
        result.append(current)
        current += timedelta(days=7)
    return result


# =============================================================================
# Step interpreters
# =============================================================================


def _last_weekday(step: ScheduleStep, year: int, month: int) -> list[date]:
    return [PayPeriod(year, month).last_day]


def _weekday_on_or_before(step: ScheduleStep, year: int, month: int) -> list[date]:
    return [clamp_day(year, month, step.day)]


def _every_weekday(step: ScheduleStep, year: int, month: int) -> list[date]:
    return weekdays_in_month(year, month, step.weekday)


def _fortnightly(step: ScheduleStep, year: int, month: int) -> list[date]:
    candidates = weekdays_in_month(year, month, step.weekday)
    aligned = [d for d in candidates if (d - step.anchor).days % _FORTNIGHT == 0]
    if aligned:
        return aligned
    # Anchor not on the step's weekday: every second one from the first.
    logger.warning(
        "fortnightly_cadence_fallback",
        extra={
            "year": year,
            "month": month,
            "anchor": step.anchor,
            "weekday": step.weekday,
        },
    )
    return candidates[::2]


_STEP_INTERPRETERS: dict[str, Callable[[ScheduleStep, int, int], list[date]]] = {
    "last_weekday": _last_weekday,
    "weekday_on_or_before": _weekday_on_or_before,
    "every_weekday": _every_weekday,
    "fortnightly": _fortnightly,
}


def _resolve_in_month(targets: Iterable[date], period: PayPeriod) -> set[date]:
    resolved = (previous_weekday(d) for d in targets)
    return {d for d in resolved if period.contains(d)}


@lru_cache(maxsize=2048)
def resolve_pay_dates(rule: FrequencyRule, year: int, month: int) -> tuple[PayDate, ...]:
    """
    Interpret ``rule`` for one month.

    Each step yields nominal target dates; each target is moved back to a
    weekday and kept only if it is still inside the month.  The result is
    the sorted union over all steps.
    """
    period = PayPeriod(year, month)
    dates: set[date] = set()
    for step in rule.steps:
        try:
            interpreter = _STEP_INTERPRETERS[step.kind]
        except KeyError:
            raise ConfigurationError(
                "schedule step kind", step.kind, tuple(_STEP_INTERPRETERS),
            ) from None
        dates |= _resolve_in_month(interpreter(step, year, month), period)
    return tuple(PayDate(d) for d in sorted(dates))


class PayDateScheduler:
    """
    Pay dates per (year, month, frequency code).

    Holds the frequency table; the per-month interpretation is the
    memoized module function ``resolve_pay_dates``.
    """

    def __init__(self, frequencies: Mapping[str, FrequencyRule]):
        self._frequencies = dict(frequencies)

    @property
    def frequency_codes(self) -> tuple[str, ...]:
        return tuple(self._frequencies)

    def rule_for(self, frequency: str) -> FrequencyRule:
        try:
            return self._frequencies[frequency]
        except (KeyError, TypeError):
            raise ConfigurationError(
                "pay frequency", str(frequency), self.frequency_codes,
            ) from None

    @traced_engine("pay_dates", "1.0", fingerprint_fields=("year", "month", "frequency"))
    def compute_pay_dates(
        self,
        year: int,
        month: int,
        frequency: str,
    ) -> tuple[PayDate, ...]:
        """
        Ordered, distinct pay dates of (year, month) for ``frequency``.

        Raises:
            ValidationError: month outside 1..12 or year outside 1..9999.
            ConfigurationError: unknown frequency code.
        """
        validate_period(year, month)
        rule = self.rule_for(frequency)
        return resolve_pay_dates(rule, year, month)
