"""
payroll_services.snapshots -- Read-only batch snapshots for reconciliation.

Responsibility:
    Project a persisted payroll batch and its employee lines into an
    immutable ``BatchSnapshot``.

Architecture position:
    Services -- I/O shell around the pure reconciliation engine.
    ``BatchSnapshotSource`` is the seam to the external payroll
    computation engine; ``SqlBatchSnapshotSource`` reads the lines that
    engine writes into ``payroll_batch_lines``.

Invariants enforced:
    - Each snapshot is built from ONE statement, so it never mixes rows
      from before and after a concurrent pipeline write.
    - Bonus lines are excluded; reconciliation compares regular pay only.
    - Employee order in the snapshot is line position order.
    - A batch with no regular lines falls back to its recorded totals with
      an empty per-employee map.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from payroll_kernel.domain.batch import BatchSnapshot, EmployeeLine
from payroll_kernel.models.batch import PayrollBatchLineModel, PayrollBatchModel


class BatchSnapshotSource(Protocol):
    """Supplies immutable snapshots of one company's batch for one month."""

    def get_snapshot(
        self,
        company_id: UUID,
        year: int,
        month: int,
    ) -> BatchSnapshot | None:
        ...


class SqlBatchSnapshotSource:
    """``BatchSnapshotSource`` over the payroll_batches tables."""

    def __init__(self, session: Session):
        self._session = session

    def get_snapshot(
        self,
        company_id: UUID,
        year: int,
        month: int,
    ) -> BatchSnapshot | None:
        line = PayrollBatchLineModel
        batch = PayrollBatchModel
        stmt = (
            select(
                batch.employee_count,
                batch.gross_total,
                batch.deductions_total,
                batch.net_total,
                line.employee_id,
                line.employee_name,
                line.gross,
                line.deductions,
            )
            .outerjoin(
                line,
                and_(line.batch_id == batch.id, line.is_bonus.is_(False)),
            )
            .where(
                batch.company_id == company_id,
                batch.year == year,
                batch.month == month,
            )
            .order_by(line.position, line.employee_id)
        )
        rows = self._session.execute(stmt).all()
        if not rows:
            return None

        lines: dict[str, EmployeeLine] = {}
        for row in rows:
            if row.employee_id is None:
                continue
            lines[row.employee_id] = EmployeeLine(
                name=row.employee_name,
                gross=row.gross,
                deductions=row.deductions,
            )

        if lines:
            return BatchSnapshot.from_lines(lines)

        head = rows[0]
        return BatchSnapshot(
            headcount=head.employee_count,
            gross_total=head.gross_total,
            deductions_total=head.deductions_total,
            net_total=head.net_total,
        )
