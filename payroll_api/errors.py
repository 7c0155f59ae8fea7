"""Mapping of payroll core exceptions to HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from payroll_kernel.exceptions import (
    ConfigurationError,
    ImmutabilityViolationError,
    InvalidStateError,
    NotFoundError,
    PayrollCoreError,
    ValidationError,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("api.errors")

# Most specific first; the first isinstance match wins.
STATUS_FOR_ERROR: tuple[tuple[type[PayrollCoreError], int], ...] = (
    (ConfigurationError, 400),
    (ValidationError, 422),
    (NotFoundError, 404),
    (InvalidStateError, 409),
    (ImmutabilityViolationError, 409),
)

_JSON_SCALARS = (str, int, float, bool, type(None))


def status_for(exc: PayrollCoreError) -> int:
    for error_type, status in STATUS_FOR_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


def error_body(exc: PayrollCoreError) -> dict[str, object]:
    body: dict[str, object] = {}
    for key, value in exc.to_dict().items():
        if isinstance(value, (list, tuple)):
            body[key] = [v if isinstance(v, _JSON_SCALARS) else str(v) for v in value]
        elif isinstance(value, _JSON_SCALARS):
            body[key] = value
        else:
            body[key] = str(value)
    return body


async def payroll_error_handler(request: Request, exc: PayrollCoreError) -> JSONResponse:
    status = status_for(exc)
    logger.info(
        "request_failed",
        extra={
            "path": request.url.path,
            "status_code": status,
            "error_code": exc.code,
        },
    )
    return JSONResponse(status_code=status, content=error_body(exc))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PayrollCoreError, payroll_error_handler)
