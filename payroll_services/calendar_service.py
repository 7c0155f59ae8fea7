"""
payroll_services.calendar_service -- Monthly payroll calendar view.

Responsibility:
    Composes the pay date scheduler and the compliance deadline calendar
    with the company's batch status for one month, and derives the next
    pay date and overdue deadlines relative to today.

Architecture position:
    Services -- read-only composition over the two calendar engines.
    ``today`` comes from the injected Clock unless the caller passes it.

Invariants enforced:
    - Pay dates and deadlines are recomputed per call; nothing persisted.
    - A deadline is overdue when its date is strictly before today.
    - The next pay date is the first pay date on or after today in the
      viewed month or the month after it; None otherwise.

Failure modes:
    - ConfigurationError: unknown frequency or jurisdiction code.
    - ValidationError: month outside 1..12 or year outside 1..9999.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from payroll_config.schema import RuleSet
from payroll_kernel.domain.batch import PayrollBatch
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.schedule import ComplianceDeadline, PayDate
from payroll_kernel.domain.values import PayPeriod
from payroll_kernel.models.batch import PayrollBatchModel
from payroll_engines.compliance import ComplianceDeadlineCalendar
from payroll_engines.pay_dates import PayDateScheduler


@dataclass(frozen=True)
class CalendarMonthView:
    """Everything a payroll calendar screen shows for one month."""

    year: int
    month: int
    frequency: str
    jurisdiction: str
    today: date
    pay_dates: tuple[PayDate, ...]
    deadlines: tuple[ComplianceDeadline, ...]
    batch: PayrollBatch | None = None
    next_pay_date: date | None = None
    currency_symbol: str = ""

    @property
    def overdue(self) -> tuple[ComplianceDeadline, ...]:
        return tuple(d for d in self.deadlines if d.is_overdue(self.today))

    @property
    def days_until_pay(self) -> int | None:
        if self.next_pay_date is None:
            return None
        return (self.next_pay_date - self.today).days

    def to_dict(self) -> dict[str, object]:
        return {
            "year": self.year,
            "month": self.month,
            "frequency": self.frequency,
            "jurisdiction": self.jurisdiction,
            "today": self.today.isoformat(),
            "pay_dates": [p.date.isoformat() for p in self.pay_dates],
            "deadlines": [
                {**d.to_dict(), "is_overdue": d.is_overdue(self.today)}
                for d in self.deadlines
            ],
            "overdue_count": len(self.overdue),
            "batch": self.batch.to_dict() if self.batch else None,
            "next_pay_date": (
                self.next_pay_date.isoformat() if self.next_pay_date else None
            ),
            "days_until_pay": self.days_until_pay,
            "currency_symbol": self.currency_symbol,
        }


class PayrollCalendarService:
    """Builds CalendarMonthViews from the active rule set."""

    def __init__(
        self,
        session: Session,
        rules: RuleSet,
        clock: Clock | None = None,
    ) -> None:
        self._session = session
        self._rules = rules
        self._clock = clock or SystemClock()
        self._scheduler = PayDateScheduler(rules.pay_frequencies)
        self._calendar = ComplianceDeadlineCalendar(rules.jurisdictions)

    @property
    def scheduler(self) -> PayDateScheduler:
        return self._scheduler

    @property
    def deadline_calendar(self) -> ComplianceDeadlineCalendar:
        return self._calendar

    def month_view(
        self,
        company_id: UUID,
        year: int,
        month: int,
        frequency: str,
        jurisdiction: str,
        today: date | None = None,
    ) -> CalendarMonthView:
        today = today or self._clock.today()
        pay_dates = self._scheduler.compute_pay_dates(year, month, frequency)
        deadlines = self._calendar.compute_deadlines(year, month, jurisdiction)

        return CalendarMonthView(
            year=year,
            month=month,
            frequency=frequency,
            jurisdiction=jurisdiction,
            today=today,
            pay_dates=pay_dates,
            deadlines=deadlines,
            batch=self._find_batch(company_id, year, month),
            next_pay_date=self._next_pay_date(pay_dates, year, month, frequency, today),
            currency_symbol=self._calendar.rules_for(jurisdiction).currency_symbol,
        )

    def _next_pay_date(
        self,
        pay_dates: tuple[PayDate, ...],
        year: int,
        month: int,
        frequency: str,
        today: date,
    ) -> date | None:
        for pay_date in pay_dates:
            if pay_date.date >= today:
                return pay_date.date
        if (year, month) == (9999, 12):
            return None
        following = PayPeriod(year, month).next()
        for pay_date in self._scheduler.compute_pay_dates(
            following.year, following.month, frequency,
        ):
            if pay_date.date >= today:
                return pay_date.date
        return None

    def _find_batch(self, company_id: UUID, year: int, month: int) -> PayrollBatch | None:
        model = self._session.scalars(
            select(PayrollBatchModel).where(
                PayrollBatchModel.company_id == company_id,
                PayrollBatchModel.year == year,
                PayrollBatchModel.month == month,
            )
        ).one_or_none()
        return model.to_dto() if model is not None else None
