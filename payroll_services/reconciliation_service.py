"""
payroll_services.reconciliation_service -- Month-over-month reconciliation view.

Responsibility:
    Loads the requested month's and the previous month's batch snapshots
    for one company and runs the pure reconciliation engine over them.

Architecture position:
    Services -- I/O shell around ``payroll_engines.reconciliation``.
    Read-only: never writes and never commits.

Invariants enforced:
    - The previous month of January is December of the prior year.
    - Both snapshots are immutable before the engine sees them.
    - Reports are recomputed on every call; nothing is cached.
    - A month without a batch reconciles as an empty snapshot against an
      existing previous month, so payroll that was never run shows every
      prior employee as MISSING.

Failure modes:
    - NotFoundError: the company has a batch for neither the requested
      month nor the month before it.
    - ValidationError: month outside 1..12 or year outside 1..9999.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from payroll_kernel.domain.rules import ReconciliationSettings
from payroll_kernel.domain.batch import BatchSnapshot
from payroll_kernel.domain.values import ZERO, PayPeriod
from payroll_kernel.exceptions import NotFoundError
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_engines.reconciliation import ReconciliationReport, reconcile
from payroll_services.snapshots import BatchSnapshotSource, SqlBatchSnapshotSource

logger = get_logger("services.reconciliation")


class ReconciliationService:
    """Builds ReconciliationReports for one company and month."""

    def __init__(
        self,
        session: Session,
        settings: ReconciliationSettings | None = None,
        snapshot_source: BatchSnapshotSource | None = None,
    ) -> None:
        self._session = session
        self._settings = settings or ReconciliationSettings()
        self._snapshots = snapshot_source or SqlBatchSnapshotSource(session)

    @property
    def settings(self) -> ReconciliationSettings:
        return self._settings

    def reconcile(
        self,
        company_id: UUID,
        month: int,
        year: int,
        settings: ReconciliationSettings | None = None,
    ) -> ReconciliationReport:
        """
        Compare (year, month) against the calendar month before it.

        Args:
            settings: Per-call override of the configured settings.

        Raises:
            NotFoundError: no batch exists for (company_id, year, month)
                nor for the previous month.
        """
        period = PayPeriod(year, month)
        with LogContext.bind(company_id=str(company_id)):
            current = self._snapshots.get_snapshot(company_id, year, month)

            previous = None
            if (year, month) != (1, 1):
                prior = period.previous()
                previous = self._snapshots.get_snapshot(company_id, prior.year, prior.month)

            has_current_batch = current is not None
            if current is None:
                if previous is None:
                    raise NotFoundError("PayrollBatch", f"{year:04d}-{month:02d}")
                current = BatchSnapshot(headcount=0, gross_total=ZERO)

            logger.info(
                "reconciliation_requested",
                extra={
                    "year": year,
                    "month": month,
                    "has_baseline": previous is not None,
                    "has_current_batch": has_current_batch,
                },
            )
            return reconcile(
                current,
                previous,
                month,
                year,
                settings or self._settings,
            )
