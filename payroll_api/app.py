"""
payroll_api.app -- FastAPI application factory.

Run locally with::

    PAYROLL_DATABASE_URL=sqlite:///payroll.db \
        uvicorn --factory payroll_api.app:create_app

Collaborators (session factory, rule set, clock, event sink) are held on
``app.state`` and injected into handlers via ``payroll_api.dependencies``.
"""

from __future__ import annotations

import os
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from payroll_api.errors import register_error_handlers
from payroll_api.routers import batches, reconciliation, schedule
from payroll_config import get_active_rules
from payroll_config.schema import RuleSet
from payroll_kernel import __version__
from payroll_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.logging_config import LogContext
from payroll_engines.compliance import ComplianceDeadlineCalendar
from payroll_engines.pay_dates import PayDateScheduler
from payroll_services.events import ApprovalEventSink, LoggingEventSink

DATABASE_URL_ENV = "PAYROLL_DATABASE_URL"
CORRELATION_HEADER = "X-Correlation-Id"


async def bind_correlation_id(request: Request, call_next):
    correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid4())
    with LogContext.bind(correlation_id=correlation_id):
        response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


def create_app(
    session_factory: sessionmaker[Session] | None = None,
    rules: RuleSet | None = None,
    clock: Clock | None = None,
    event_sink: ApprovalEventSink | None = None,
    database_url: str | None = None,
) -> FastAPI:
    """
    Build the payroll API.

    Without a ``session_factory`` the module engine is used, initialized
    from ``database_url`` or ``PAYROLL_DATABASE_URL`` when either is given.
    """
    database_url = database_url or os.environ.get(DATABASE_URL_ENV)
    if session_factory is None and database_url:
        engine = init_engine_from_url(database_url)
        create_tables(engine)
        session_factory = get_session_factory()

    app = FastAPI(title="Payroll Compliance Core", version=__version__)

    app.state.session_factory = session_factory
    app.state.rules = rules or get_active_rules()
    app.state.clock = clock or SystemClock()
    app.state.event_sink = event_sink or LoggingEventSink()
    app.state.scheduler = PayDateScheduler(app.state.rules.pay_frequencies)
    app.state.deadline_calendar = ComplianceDeadlineCalendar(app.state.rules.jurisdictions)

    register_error_handlers(app)
    app.middleware("http")(bind_correlation_id)

    app.include_router(schedule.router)
    app.include_router(reconciliation.router)
    app.include_router(batches.router)

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        return JSONResponse(
            {
                "message": "Payroll Compliance Core",
                "rules_version": app.state.rules.version,
                "docs": "/docs",
            }
        )

    return app
