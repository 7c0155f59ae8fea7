"""FastAPI dependencies: session, rules, clock, tenant and actor headers.

Tenant and actor identity are asserted by the external auth layer via the
``X-Company-Id`` and ``X-Actor-Id`` headers; this API trusts them.
"""

from __future__ import annotations

from collections.abc import Iterator
from uuid import UUID

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from payroll_config.schema import RuleSet
from payroll_kernel.db.engine import get_session_factory
from payroll_kernel.domain.clock import Clock
from payroll_engines.compliance import ComplianceDeadlineCalendar
from payroll_engines.pay_dates import PayDateScheduler
from payroll_services.approval_service import ApprovalService
from payroll_services.calendar_service import PayrollCalendarService
from payroll_services.events import ApprovalEventSink
from payroll_services.reconciliation_service import ReconciliationService


def get_session(request: Request) -> Iterator[Session]:
    factory = request.app.state.session_factory or get_session_factory()
    session = factory()
    try:
        yield session
    finally:
        session.close()


def get_rules(request: Request) -> RuleSet:
    return request.app.state.rules


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_event_sink(request: Request) -> ApprovalEventSink:
    return request.app.state.event_sink


def get_scheduler(request: Request) -> PayDateScheduler:
    return request.app.state.scheduler


def get_deadline_calendar(request: Request) -> ComplianceDeadlineCalendar:
    return request.app.state.deadline_calendar


def get_company_id(x_company_id: UUID = Header(...)) -> UUID:
    return x_company_id


def get_actor_id(x_actor_id: UUID = Header(...)) -> UUID:
    return x_actor_id


def get_approval_service(
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
    event_sink: ApprovalEventSink = Depends(get_event_sink),
) -> ApprovalService:
    return ApprovalService(session, clock=clock, event_sink=event_sink)


def get_reconciliation_service(
    session: Session = Depends(get_session),
    rules: RuleSet = Depends(get_rules),
) -> ReconciliationService:
    return ReconciliationService(session, settings=rules.reconciliation)


def get_calendar_service(
    session: Session = Depends(get_session),
    rules: RuleSet = Depends(get_rules),
    clock: Clock = Depends(get_clock),
) -> PayrollCalendarService:
    return PayrollCalendarService(session, rules, clock=clock)
