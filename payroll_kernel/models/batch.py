"""
Module: payroll_kernel.models.batch
Responsibility: ORM persistence for payroll batches and their per-employee
    lines.

Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - One batch per (company_id, year, month): uq_payroll_batch_period.
    - Processing and approval status columns are limited by check
      constraints to their enum values (approval status may be NULL).
    - ``version`` increments on every approval transition; the approval
      service's compare-and-set UPDATE filters on it.
    - Monetary columns are Numeric(18, 2).

Failure modes:
    - IntegrityError on a duplicate batch for the same company period.
    - IntegrityError on a duplicate employee line within a batch.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_kernel.db.base import Base, as_utc
from payroll_kernel.domain.approval import ApprovalStatus, ProcessingStatus
from payroll_kernel.domain.batch import PayrollBatch


class PayrollBatchModel(Base):
    """Persistent payroll batch: one company's run for one month."""

    __tablename__ = "payroll_batches"

    __table_args__ = (
        UniqueConstraint("company_id", "year", "month", name="uq_payroll_batch_period"),
        CheckConstraint(
            "processing_status IN ('PENDING', 'PROCESSING', 'COMPLETED', "
            "'FAILED', 'PARTIAL')",
            name="ck_payroll_batches_processing_status",
        ),
        CheckConstraint(
            "approval_status IS NULL OR approval_status IN "
            "('PENDING_APPROVAL', 'APPROVED', 'REJECTED')",
            name="ck_payroll_batches_approval_status",
        ),
        CheckConstraint(
            "month BETWEEN 1 AND 12",
            name="ck_payroll_batches_month",
        ),
        Index("ix_payroll_batches_company_period", "company_id", "year", "month"),
    )

    company_id: Mapped[UUID] = mapped_column(nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    processing_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProcessingStatus.PENDING.value,
    )
    approval_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    employee_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gross_total: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    net_total: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    deductions_total: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    currency_symbol: Mapped[str] = mapped_column(String(8), nullable=False, default="")
    submitted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejection_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    lines: Mapped[list["PayrollBatchLineModel"]] = relationship(
        "PayrollBatchLineModel",
        back_populates="batch",
        order_by="PayrollBatchLineModel.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return (
            f"<PayrollBatch {self.id} {self.year}-{self.month:02d} "
            f"processing={self.processing_status} approval={self.approval_status}>"
        )

    def to_dto(self) -> PayrollBatch:
        """Convert ORM model to frozen domain DTO."""
        return PayrollBatch(
            id=self.id,
            company_id=self.company_id,
            month=self.month,
            year=self.year,
            processing_status=ProcessingStatus(self.processing_status),
            approval_status=(
                ApprovalStatus(self.approval_status) if self.approval_status else None
            ),
            employee_count=self.employee_count,
            gross_total=self.gross_total,
            net_total=self.net_total,
            deductions_total=self.deductions_total,
            currency_symbol=self.currency_symbol,
            submitted_at=as_utc(self.submitted_at),
            approved_at=as_utc(self.approved_at),
            rejected_at=as_utc(self.rejected_at),
            rejection_notes=self.rejection_notes,
            version=self.version,
        )


class PayrollBatchLineModel(Base):
    """
    One employee's figures in a batch, written by the processing pipeline.

    Bonus lines are stored but excluded from reconciliation snapshots.
    """

    __tablename__ = "payroll_batch_lines"

    __table_args__ = (
        UniqueConstraint(
            "batch_id", "employee_id", "is_bonus",
            name="uq_payroll_batch_line_employee",
        ),
        Index("ix_payroll_batch_lines_batch", "batch_id"),
    )

    batch_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_batches.id"), nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False)
    employee_name: Mapped[str] = mapped_column(String(200), nullable=False)
    gross: Mapped[Decimal] = mapped_column(nullable=False)
    deductions: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    net: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    is_bonus: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    batch: Mapped[PayrollBatchModel] = relationship(
        "PayrollBatchModel", back_populates="lines",
    )

    def __repr__(self) -> str:
        return f"<PayrollBatchLine {self.employee_id} gross={self.gross}>"
