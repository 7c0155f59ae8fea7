"""Request and response models for the payroll HTTP API.

Money travels as strings with two fraction digits, percentages as floats,
dates as ISO ``YYYY-MM-DD``.
"""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, Field


class NotesRequest(BaseModel):
    notes: str | None = Field(default=None, max_length=4000)


class RejectRequest(BaseModel):
    notes: str = Field(max_length=4000)


class PayDatesResponse(BaseModel):
    year: int
    month: int
    frequency: str
    dates: list[dt.date]


class DeadlineOut(BaseModel):
    date: dt.date
    label: str
    category: str


class DeadlinesResponse(BaseModel):
    year: int
    month: int
    jurisdiction: str
    deadlines: list[DeadlineOut]


class AnomalyOut(BaseModel):
    employee_id: str
    employee_name: str
    type: str
    previous_gross: str | None = None
    current_gross: str | None = None
    change_percent: float | None = None
    details: str = ""
    previous_deductions: str | None = None
    current_deductions: str | None = None


class ReconciliationResponse(BaseModel):
    month: int
    year: int
    previous_month: int
    previous_year: int
    has_baseline: bool
    current_batch_total: str
    previous_batch_total: str
    variance: str
    variance_percent: float
    headcount_change: int
    average_salary_change: str
    anomalies: list[AnomalyOut]


class BatchOut(BaseModel):
    id: UUID
    company_id: UUID
    month: int
    year: int
    processing_status: str
    approval_status: str | None = None
    employee_count: int
    gross_total: str
    net_total: str
    deductions_total: str
    currency_symbol: str
    submitted_at: dt.datetime | None = None
    approved_at: dt.datetime | None = None
    rejected_at: dt.datetime | None = None
    rejection_notes: str | None = None


class AuditRecordOut(BaseModel):
    id: UUID
    batch_id: UUID
    sequence: int
    actor_id: UUID
    action: str
    from_state: str
    to_state: str
    occurred_at: dt.datetime
    notes: str | None = None
    prior_rejection_notes: str | None = None


class CalendarDeadlineOut(DeadlineOut):
    is_overdue: bool


class CalendarResponse(BaseModel):
    year: int
    month: int
    frequency: str
    jurisdiction: str
    today: dt.date
    pay_dates: list[dt.date]
    deadlines: list[CalendarDeadlineOut]
    overdue_count: int
    batch: BatchOut | None = None
    next_pay_date: dt.date | None = None
    days_until_pay: int | None = None
    currency_symbol: str = ""
