"""
payroll_services.batch_registry -- Entry point for the processing pipeline.

Responsibility:
    Lets the external payroll processing pipeline register a month's
    batch, write its per-employee lines and move its processing status.
    The approval lifecycle is NOT driven from here.

Architecture position:
    Services -- owns the Session transaction boundary.

Invariants enforced:
    - One batch per (company, year, month).
    - Batch totals always equal the sum of its lines (bonus lines
      included); ``employee_count`` counts distinct employees with a
      regular line, matching the reconciliation snapshot headcount.
    - Lines and processing status are writable only while the approval
      status is none or REJECTED.  A batch awaiting approval or approved
      is frozen, so an approver always decides on the totals that were
      submitted.
    - Every line write and processing status change bumps ``version``;
      an approval compare-and-set racing with it fails.

Failure modes:
    - ValidationError: malformed period, amounts or duplicate period.
    - BatchNotFoundError: unknown batch or another company's batch.
    - InvalidStateError: mutation of a PENDING_APPROVAL or APPROVED batch.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from payroll_kernel.domain.approval import ApprovalStatus, ProcessingStatus
from payroll_kernel.domain.batch import PayrollBatch
from payroll_kernel.domain.values import ZERO, PayPeriod, to_amount
from payroll_kernel.exceptions import (
    BatchNotFoundError,
    InvalidStateError,
    ValidationError,
)
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.batch import PayrollBatchLineModel, PayrollBatchModel

logger = get_logger("services.batch_registry")

_WRITABLE_APPROVAL_STATUSES = (None, ApprovalStatus.REJECTED.value)


@dataclass(frozen=True)
class BatchLineInput:
    """One employee's computed figures, as delivered by the pipeline."""

    employee_id: str
    employee_name: str
    gross: Decimal | int | str
    deductions: Decimal | int | str = ZERO
    is_bonus: bool = False


class BatchRegistry:
    """Creates batches and records pipeline output."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create_batch(
        self,
        company_id: UUID,
        year: int,
        month: int,
        currency_symbol: str = "",
        processing_status: ProcessingStatus = ProcessingStatus.PENDING,
    ) -> PayrollBatch:
        PayPeriod(year, month)
        existing = self._session.scalars(
            select(PayrollBatchModel.id).where(
                PayrollBatchModel.company_id == company_id,
                PayrollBatchModel.year == year,
                PayrollBatchModel.month == month,
            )
        ).first()
        if existing is not None:
            raise ValidationError(
                "period", f"{year:04d}-{month:02d}",
                f"batch {existing} already exists for this company",
            )

        model = PayrollBatchModel(
            company_id=company_id,
            year=year,
            month=month,
            currency_symbol=currency_symbol,
            processing_status=ProcessingStatus(processing_status).value,
            employee_count=0,
            gross_total=ZERO,
            deductions_total=ZERO,
            net_total=ZERO,
            version=1,
        )
        try:
            self._session.add(model)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "payroll_batch_created",
            extra={
                "batch_id": str(model.id),
                "company_id": str(company_id),
                "year": year,
                "month": month,
            },
        )
        return model.to_dto()

    def add_lines(
        self,
        batch_id: UUID,
        company_id: UUID,
        lines: Iterable[BatchLineInput],
    ) -> PayrollBatch:
        """Append employee lines and recompute the batch totals."""
        try:
            model = self._load(batch_id, company_id)
            self._require_unlocked(model, "add_lines")
            position = len(model.lines)
            for line in lines:
                gross = to_amount(line.gross)
                deductions = to_amount(line.deductions)
                model.lines.append(PayrollBatchLineModel(
                    position=position,
                    employee_id=line.employee_id,
                    employee_name=line.employee_name,
                    gross=gross,
                    deductions=deductions,
                    net=gross - deductions,
                    is_bonus=line.is_bonus,
                ))
                position += 1
            self._recompute_totals(model)
            model.version = model.version + 1
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "payroll_batch_lines_added",
            extra={"batch_id": str(batch_id), "line_count": len(model.lines)},
        )
        return model.to_dto()

    def set_processing_status(
        self,
        batch_id: UUID,
        company_id: UUID,
        status: ProcessingStatus,
    ) -> PayrollBatch:
        try:
            model = self._load(batch_id, company_id)
            self._require_unlocked(model, "set_processing_status")
            previous = model.processing_status
            model.processing_status = ProcessingStatus(status).value
            model.version = model.version + 1
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "payroll_batch_processing_status_changed",
            extra={
                "batch_id": str(batch_id),
                "from_status": previous,
                "to_status": model.processing_status,
            },
        )
        return model.to_dto()

    def _load(self, batch_id: UUID, company_id: UUID) -> PayrollBatchModel:
        model = self._session.scalars(
            select(PayrollBatchModel)
            .where(PayrollBatchModel.id == batch_id)
            .execution_options(populate_existing=True)
        ).one_or_none()
        if model is None or model.company_id != company_id:
            raise BatchNotFoundError(str(batch_id))
        return model

    @staticmethod
    def _require_unlocked(model: PayrollBatchModel, action: str) -> None:
        if model.approval_status not in _WRITABLE_APPROVAL_STATUSES:
            raise InvalidStateError(
                action=action,
                required="approval status in {REJECTED, none}",
                found=model.approval_status,
            )

    @staticmethod
    def _recompute_totals(model: PayrollBatchModel) -> None:
        gross = sum((line.gross for line in model.lines), ZERO)
        deductions = sum((line.deductions for line in model.lines), ZERO)
        model.gross_total = to_amount(gross)
        model.deductions_total = to_amount(deductions)
        model.net_total = to_amount(gross - deductions)
        model.employee_count = len(
            {line.employee_id for line in model.lines if not line.is_bonus}
        )
