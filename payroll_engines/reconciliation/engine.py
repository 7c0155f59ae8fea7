"""
Module: payroll_engines.reconciliation.engine
Responsibility:
    Compare the current month's batch snapshot against the previous
    month's and classify per-employee discrepancies.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel domain types, exceptions and logging.

Invariants enforced:
    - Decimal-only arithmetic for money; every amount has two fraction
      digits.  Percentages are signed floats rounded to
      ``settings.percent_places``.
    - ``variance_percent`` is 0 when the previous total is 0.
    - No baseline is a distinct state: the report carries no anomalies and
      ``headcount_change`` equals the current headcount.
    - A change is flagged when it is non-zero and its exact absolute
      percentage exceeds the threshold; a change from a zero baseline is
      always flagged with ``change_percent`` None.
    - Inputs are never mutated.

Failure modes:
    - ValidationError for a month outside 1..12 or a year outside 1..9999.

Audit relevance:
    Every report generation is traced via ``@traced_engine``.
"""

from __future__ import annotations

from decimal import Decimal

from payroll_kernel.domain.batch import BatchSnapshot
from payroll_kernel.domain.rules import AnomalySortOrder, ReconciliationSettings
from payroll_kernel.domain.values import (
    CENT,
    HUNDRED,
    ZERO,
    percent_change,
    to_amount,
    validate_period,
)
from payroll_kernel.logging_config import get_logger
from payroll_engines.reconciliation.types import (
    AnomalyType,
    ReconciliationAnomaly,
    ReconciliationReport,
)
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.reconciliation")

_TYPE_RANK = {t: rank for rank, t in enumerate(AnomalyType)}


def previous_period(year: int, month: int) -> tuple[int, int]:
    """(year, month) of the calendar month before; January -> prior December."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def _signed(pct: float | None) -> str:
    if pct is None:
        return "from zero"
    return f"{pct:+.2f}%"


def _exceeds(
    current: Decimal,
    previous: Decimal,
    threshold_percent: float,
) -> bool:
    """Non-zero change whose exact relative size exceeds the threshold."""
    if current == previous:
        return False
    if previous == 0:
        return True
    exact = abs((current - previous) / previous * HUNDRED)
    return exact > Decimal(str(threshold_percent))


def _average(total: Decimal, headcount: int) -> Decimal:
    return (total / headcount).quantize(CENT)


def _average_salary_change(current: BatchSnapshot, previous: BatchSnapshot) -> Decimal:
    if current.headcount <= 0 or previous.headcount <= 0:
        return ZERO
    return to_amount(
        _average(current.gross_total, current.headcount)
        - _average(previous.gross_total, previous.headcount)
    )


def detect_anomalies(
    current: BatchSnapshot,
    previous: BatchSnapshot,
    settings: ReconciliationSettings,
) -> list[ReconciliationAnomaly]:
    """
    Anomalies in detection order: MISSING in previous-snapshot order, then
    NEW / SALARY_CHANGE / DEDUCTION_CHANGE in current-snapshot order.
    """
    places = settings.percent_places
    anomalies: list[ReconciliationAnomaly] = []

    for employee_id, before in previous.per_employee.items():
        if employee_id not in current.per_employee:
            anomalies.append(ReconciliationAnomaly(
                employee_id=employee_id,
                employee_name=before.name,
                type=AnomalyType.MISSING,
                previous_gross=before.gross,
                details=f"Missing from current payroll; previous gross {before.gross}",
            ))

    for employee_id, now in current.per_employee.items():
        before = previous.per_employee.get(employee_id)
        if before is None:
            anomalies.append(ReconciliationAnomaly(
                employee_id=employee_id,
                employee_name=now.name,
                type=AnomalyType.NEW,
                current_gross=now.gross,
                details=f"New in current payroll; gross {now.gross}",
            ))
            continue

        if _exceeds(now.gross, before.gross, settings.salary_change_threshold_percent):
            pct = percent_change(now.gross, before.gross, places)
            anomalies.append(ReconciliationAnomaly(
                employee_id=employee_id,
                employee_name=now.name,
                type=AnomalyType.SALARY_CHANGE,
                previous_gross=before.gross,
                current_gross=now.gross,
                change_percent=pct,
                details=(
                    f"Gross changed from {before.gross} to {now.gross} "
                    f"({_signed(pct)})"
                ),
            ))

        if _exceeds(
            now.deductions, before.deductions,
            settings.deduction_change_threshold_percent,
        ):
            pct = percent_change(now.deductions, before.deductions, places)
            anomalies.append(ReconciliationAnomaly(
                employee_id=employee_id,
                employee_name=now.name,
                type=AnomalyType.DEDUCTION_CHANGE,
                previous_gross=before.gross,
                current_gross=now.gross,
                change_percent=pct,
                previous_deductions=before.deductions,
                current_deductions=now.deductions,
                details=(
                    f"Deductions changed from {before.deductions} to "
                    f"{now.deductions} ({_signed(pct)})"
                ),
            ))

    return anomalies


def sort_anomalies(
    anomalies: list[ReconciliationAnomaly],
    order: AnomalySortOrder,
) -> tuple[ReconciliationAnomaly, ...]:
    """Apply ``order``; every ordering is stable over detection order."""
    if order == AnomalySortOrder.EMPLOYEE:
        return tuple(sorted(anomalies, key=lambda a: (a.employee_name, a.employee_id)))
    if order == AnomalySortOrder.TYPE:
        return tuple(sorted(anomalies, key=lambda a: _TYPE_RANK[a.type]))
    if order == AnomalySortOrder.MAGNITUDE:
        return tuple(sorted(anomalies, key=lambda a: a.magnitude, reverse=True))
    return tuple(anomalies)


@traced_engine("reconciliation", "1.0", fingerprint_fields=("year", "month"))
def reconcile(
    current: BatchSnapshot,
    previous: BatchSnapshot | None,
    month: int,
    year: int,
    settings: ReconciliationSettings | None = None,
) -> ReconciliationReport:
    """
    Build the reconciliation report for (month, year).

    Args:
        current: Snapshot of the requested month's batch.
        previous: Snapshot of the prior month's batch, or None when the
            company has no batch for that month.
        month: Requested month (1..12).
        year: Requested year.
        settings: Thresholds and sort order; engine defaults when None.
    """
    validate_period(year, month)
    settings = settings or ReconciliationSettings()
    prev_year, prev_month = previous_period(year, month)

    if previous is None:
        logger.info(
            "reconciliation_no_baseline",
            extra={"year": year, "month": month},
        )
        return ReconciliationReport(
            month=month,
            year=year,
            current_batch_total=current.gross_total,
            previous_batch_total=ZERO,
            variance=current.gross_total,
            variance_percent=0.0,
            headcount_change=current.headcount,
            anomalies=(),
            has_baseline=False,
            previous_month=prev_month,
            previous_year=prev_year,
        )

    variance = to_amount(current.gross_total - previous.gross_total)
    variance_percent = percent_change(
        current.gross_total, previous.gross_total, settings.percent_places,
    )
    anomalies = detect_anomalies(current, previous, settings)

    report = ReconciliationReport(
        month=month,
        year=year,
        current_batch_total=current.gross_total,
        previous_batch_total=previous.gross_total,
        variance=variance,
        variance_percent=variance_percent if variance_percent is not None else 0.0,
        headcount_change=current.headcount - previous.headcount,
        anomalies=sort_anomalies(anomalies, settings.sort_order),
        has_baseline=True,
        previous_month=prev_month,
        previous_year=prev_year,
        average_salary_change=_average_salary_change(current, previous),
    )

    logger.info(
        "reconciliation_completed",
        extra={
            "year": year,
            "month": month,
            "variance": report.variance,
            "anomaly_count": report.anomaly_count,
        },
    )
    return report
