"""
Module: payroll_engines.compliance
Responsibility:
    Map (year, month, jurisdiction) to the statutory deadlines that fall in
    that month.  Jurisdictions are data (``JurisdictionRules`` rows loaded
    from the rule table); this module interprets their rule kinds.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel domain types, exceptions and logging.

Invariants enforced:
    - Every rule is resolved independently, then filtered to the requested
      (year, month).  A rule that resolves outside the month is dropped,
      never reported as upcoming.
    - ``weekday_on_or_before`` walks backward only; ``fixed_date`` rows are
      the statutory calendar date as written, with no weekend adjustment.
    - Output is ordered by date, then by table order.
    - Deterministic and memoized per (rules, year, month).

Failure modes:
    - ConfigurationError for a jurisdiction code absent from the table.
    - ValidationError for a month outside 1..12 or a year outside 1..9999.

Audit relevance:
    Every call is traced via ``@traced_engine``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date
from functools import lru_cache

from payroll_kernel.domain.rules import DeadlineRule, JurisdictionRules
from payroll_kernel.domain.schedule import ComplianceDeadline
from payroll_kernel.domain.values import PayPeriod, validate_period
from payroll_kernel.exceptions import ConfigurationError
from payroll_engines.pay_dates import clamp_day, previous_weekday
from payroll_engines.tracer import traced_engine


def _weekday_on_or_before(rule: DeadlineRule, year: int, month: int) -> date:
    return previous_weekday(clamp_day(year, month, rule.day))


def _fixed_date(rule: DeadlineRule, year: int, month: int) -> date:
    return clamp_day(year, rule.month, rule.day)


_RULE_INTERPRETERS: dict[str, Callable[[DeadlineRule, int, int], date]] = {
    "weekday_on_or_before": _weekday_on_or_before,
    "fixed_date": _fixed_date,
}


@lru_cache(maxsize=2048)
def resolve_deadlines(
    rules: JurisdictionRules,
    year: int,
    month: int,
) -> tuple[ComplianceDeadline, ...]:
    """Resolve every row of ``rules`` for (year, month) and keep those in it."""
    period = PayPeriod(year, month)
    resolved: list[tuple[date, int, DeadlineRule]] = []
    for position, rule in enumerate(rules.deadlines):
        try:
            interpreter = _RULE_INTERPRETERS[rule.kind]
        except KeyError:
            raise ConfigurationError(
                "deadline rule kind", rule.kind, tuple(_RULE_INTERPRETERS),
            ) from None
        day = interpreter(rule, year, month)
        if period.contains(day):
            resolved.append((day, position, rule))
    resolved.sort(key=lambda item: (item[0], item[1]))
    return tuple(
        ComplianceDeadline(date=day, label=rule.label, category=rule.category)
        for day, _, rule in resolved
    )


class ComplianceDeadlineCalendar:
    """Statutory deadlines per (year, month, jurisdiction code)."""

    def __init__(self, jurisdictions: Mapping[str, JurisdictionRules]):
        self._jurisdictions = dict(jurisdictions)

    @property
    def jurisdiction_codes(self) -> tuple[str, ...]:
        return tuple(self._jurisdictions)

    def rules_for(self, jurisdiction: str) -> JurisdictionRules:
        try:
            return self._jurisdictions[jurisdiction]
        except (KeyError, TypeError):
            raise ConfigurationError(
                "jurisdiction", str(jurisdiction), self.jurisdiction_codes,
            ) from None

    @traced_engine(
        "compliance_deadlines", "1.0",
        fingerprint_fields=("year", "month", "jurisdiction"),
    )
    def compute_deadlines(
        self,
        year: int,
        month: int,
        jurisdiction: str,
    ) -> tuple[ComplianceDeadline, ...]:
        """
        Deadlines of ``jurisdiction`` whose resolved date lies in (year, month).

        Raises:
            ValidationError: month outside 1..12 or year outside 1..9999.
            ConfigurationError: unknown jurisdiction code.
        """
        validate_period(year, month)
        rules = self.rules_for(jurisdiction)
        return resolve_deadlines(rules, year, month)


def overdue_deadlines(
    deadlines: tuple[ComplianceDeadline, ...],
    today: date,
) -> tuple[ComplianceDeadline, ...]:
    """The subset of ``deadlines`` already past on ``today``."""
    return tuple(d for d in deadlines if d.is_overdue(today))
