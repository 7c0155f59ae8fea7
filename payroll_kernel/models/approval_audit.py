"""
Module: payroll_kernel.models.approval_audit
Responsibility: ORM persistence for the append-only approval audit trail.

Architecture position: Kernel > Models.  May import from db/base.py,
    domain/ and exceptions only.

Invariants enforced:
    - Append-only: before_update and before_delete listeners raise
      ImmutabilityViolationError.  The approval service inserts exactly
      one record per successful transition, in the same transaction.
    - ``sequence`` numbers a batch's records 1, 2, 3 ...; unique per batch.
    - A resubmission record carries the rejection notes it supersedes in
      ``prior_rejection_notes``; the original reject record is untouched.

Failure modes:
    - ImmutabilityViolationError on any UPDATE or DELETE of a record.

Audit relevance:
    Who moved which batch from which state to which state, and when.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint, event
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import Base, as_utc
from payroll_kernel.domain.batch import ApprovalAuditEntry
from payroll_kernel.exceptions import ImmutabilityViolationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("models.approval_audit")


class ApprovalAuditRecordModel(Base):
    """One approval transition, recorded at commit time."""

    __tablename__ = "payroll_approval_audit"

    __table_args__ = (
        UniqueConstraint("batch_id", "sequence", name="uq_payroll_approval_audit_sequence"),
        Index("ix_payroll_approval_audit_batch", "batch_id", "occurred_at"),
    )

    batch_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_batches.id"), nullable=False,
    )
    company_id: Mapped[UUID] = mapped_column(nullable=False)
    actor_id: Mapped[UUID] = mapped_column(nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    action: Mapped[str] = mapped_column(String(40), nullable=False)
    from_state: Mapped[str] = mapped_column(String(20), nullable=False)
    to_state: Mapped[str] = mapped_column(String(20), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    prior_rejection_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<ApprovalAuditRecord {self.batch_id} {self.action} "
            f"{self.from_state}->{self.to_state}>"
        )

    def to_dto(self) -> ApprovalAuditEntry:
        """Convert ORM model to frozen domain DTO."""
        return ApprovalAuditEntry(
            id=self.id,
            batch_id=self.batch_id,
            company_id=self.company_id,
            actor_id=self.actor_id,
            action=self.action,
            from_state=self.from_state,
            to_state=self.to_state,
            occurred_at=as_utc(self.occurred_at),
            notes=self.notes,
            prior_rejection_notes=self.prior_rejection_notes,
            sequence=self.sequence,
        )


@event.listens_for(ApprovalAuditRecordModel, "before_update")
def prevent_audit_update(mapper, connection, target):
    """Prevent updates to approval audit records."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "ApprovalAuditRecord",
            "entity_id": str(target.id),
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="ApprovalAuditRecord",
        entity_id=str(target.id),
        reason="Approval audit records are append-only -- cannot modify",
    )


@event.listens_for(ApprovalAuditRecordModel, "before_delete")
def prevent_audit_delete(mapper, connection, target):
    """Prevent deletion of approval audit records."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "ApprovalAuditRecord",
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="ApprovalAuditRecord",
        entity_id=str(target.id),
        reason="Approval audit records are append-only -- cannot delete",
    )
