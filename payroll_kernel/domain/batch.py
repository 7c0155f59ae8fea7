"""
Batch domain types (``payroll_kernel.domain.batch``).

Responsibility
--------------
Frozen value objects for one company's payroll run: the batch record as
returned to callers, the read-only snapshot consumed by reconciliation,
and the append-only approval audit entry.

Architecture position
---------------------
**Kernel domain layer** -- pure data definitions with ZERO I/O.  ORM
models in ``payroll_kernel.models`` convert to and from these types.

Invariants enforced
-------------------
* All monetary fields are ``Decimal`` with two fraction digits.
* ``BatchSnapshot.per_employee`` is a read-only mapping; callers pass
  immutable snapshots, never live references.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from uuid import UUID

from payroll_kernel.domain.approval import (
    ApprovalStatus,
    BatchApprovalState,
    ProcessingStatus,
)
from payroll_kernel.domain.values import ZERO, to_amount


@dataclass(frozen=True)
class PayrollBatch:
    """Immutable view of a persisted payroll batch."""

    id: UUID
    company_id: UUID
    month: int
    year: int
    processing_status: ProcessingStatus
    approval_status: ApprovalStatus | None = None
    employee_count: int = 0
    gross_total: Decimal = ZERO
    net_total: Decimal = ZERO
    deductions_total: Decimal = ZERO
    currency_symbol: str = ""
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    rejection_notes: str | None = None
    version: int = 1

    @property
    def approval_state(self) -> BatchApprovalState:
        return BatchApprovalState(
            processing_status=self.processing_status,
            approval_status=self.approval_status,
            submitted_at=self.submitted_at,
            approved_at=self.approved_at,
            rejected_at=self.rejected_at,
            rejection_notes=self.rejection_notes,
        )

    def to_dict(self) -> dict[str, object]:
        def _ts(value: datetime | None) -> str | None:
            return value.isoformat() if value is not None else None

        return {
            "id": str(self.id),
            "company_id": str(self.company_id),
            "month": self.month,
            "year": self.year,
            "processing_status": self.processing_status.value,
            "approval_status": (
                self.approval_status.value if self.approval_status else None
            ),
            "employee_count": self.employee_count,
            "gross_total": str(self.gross_total),
            "net_total": str(self.net_total),
            "deductions_total": str(self.deductions_total),
            "currency_symbol": self.currency_symbol,
            "submitted_at": _ts(self.submitted_at),
            "approved_at": _ts(self.approved_at),
            "rejected_at": _ts(self.rejected_at),
            "rejection_notes": self.rejection_notes,
        }


@dataclass(frozen=True)
class EmployeeLine:
    """One employee's figures inside a batch snapshot."""

    name: str
    gross: Decimal
    deductions: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "gross", to_amount(self.gross))
        object.__setattr__(self, "deductions", to_amount(self.deductions))


@dataclass(frozen=True)
class BatchSnapshot:
    """
    Read-only projection of a completed batch, supplied by the payroll engine.

    ``per_employee`` is frozen into a ``MappingProxyType`` on construction;
    its iteration order is the order anomalies are detected in.
    """

    headcount: int
    gross_total: Decimal
    per_employee: Mapping[str, EmployeeLine] = field(default_factory=dict)
    deductions_total: Decimal = ZERO
    net_total: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "gross_total", to_amount(self.gross_total))
        object.__setattr__(self, "deductions_total", to_amount(self.deductions_total))
        object.__setattr__(self, "net_total", to_amount(self.net_total))
        object.__setattr__(
            self, "per_employee", MappingProxyType(dict(self.per_employee))
        )

    @classmethod
    def from_lines(cls, lines: Mapping[str, EmployeeLine]) -> BatchSnapshot:
        """Build a snapshot whose totals are derived from its lines."""
        gross = sum((line.gross for line in lines.values()), ZERO)
        deductions = sum((line.deductions for line in lines.values()), ZERO)
        return cls(
            headcount=len(lines),
            gross_total=gross,
            per_employee=lines,
            deductions_total=deductions,
            net_total=gross - deductions,
        )


@dataclass(frozen=True)
class ApprovalAuditEntry:
    """One append-only record of an approval transition."""

    id: UUID
    batch_id: UUID
    company_id: UUID
    actor_id: UUID
    action: str
    from_state: str
    to_state: str
    occurred_at: datetime
    notes: str | None = None
    prior_rejection_notes: str | None = None
    sequence: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "id": str(self.id),
            "batch_id": str(self.batch_id),
            "sequence": self.sequence,
            "actor_id": str(self.actor_id),
            "action": self.action,
            "from_state": self.from_state,
            "to_state": self.to_state,
            "occurred_at": self.occurred_at.isoformat(),
            "notes": self.notes,
            "prior_rejection_notes": self.prior_rejection_notes,
        }
