"""Pay dates, compliance deadlines and the monthly calendar view."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from payroll_api.dependencies import (
    get_calendar_service,
    get_company_id,
    get_deadline_calendar,
    get_scheduler,
)
from payroll_api.schemas import CalendarResponse, DeadlinesResponse, PayDatesResponse
from payroll_engines.compliance import ComplianceDeadlineCalendar
from payroll_engines.pay_dates import PayDateScheduler
from payroll_services.calendar_service import PayrollCalendarService

router = APIRouter(tags=["schedule"])


@router.get("/pay-dates", response_model=PayDatesResponse)
def get_pay_dates(
    year: int = Query(...),
    month: int = Query(...),
    frequency: str = Query(...),
    scheduler: PayDateScheduler = Depends(get_scheduler),
) -> dict:
    pay_dates = scheduler.compute_pay_dates(year, month, frequency)
    return {
        "year": year,
        "month": month,
        "frequency": frequency,
        "dates": [p.date for p in pay_dates],
    }


@router.get("/compliance-deadlines", response_model=DeadlinesResponse)
def get_compliance_deadlines(
    year: int = Query(...),
    month: int = Query(...),
    jurisdiction: str = Query(...),
    calendar: ComplianceDeadlineCalendar = Depends(get_deadline_calendar),
) -> dict:
    deadlines = calendar.compute_deadlines(year, month, jurisdiction)
    return {
        "year": year,
        "month": month,
        "jurisdiction": jurisdiction,
        "deadlines": [d.to_dict() for d in deadlines],
    }


@router.get("/calendar", response_model=CalendarResponse)
def get_calendar(
    year: int = Query(...),
    month: int = Query(...),
    frequency: str = Query(...),
    jurisdiction: str = Query(...),
    company_id: UUID = Depends(get_company_id),
    service: PayrollCalendarService = Depends(get_calendar_service),
) -> dict:
    view = service.month_view(company_id, year, month, frequency, jurisdiction)
    return view.to_dict()
