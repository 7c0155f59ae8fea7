"""
Approval domain types (``payroll_kernel.domain.approval``).

Responsibility
--------------
Pure value objects for the payroll batch approval lifecycle: processing
and approval status enums, the tagged-variant action types, the batch
approval state, and the declarative transition table.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``models/`` or outer layers.

Invariants enforced
-------------------
* The approval axis is orthogonal to the processing axis.  This core never
  changes ``processing_status``; it only reads it in guards.
* ``APPROVAL_TRANSITIONS`` is the only source of legal transitions:
  ``None -> PENDING_APPROVAL``, ``REJECTED -> PENDING_APPROVAL``,
  ``PENDING_APPROVAL -> APPROVED | REJECTED``.
* ``APPROVED`` is terminal.  ``REJECTED`` is resubmittable.
* ``rejection_notes`` is set only while the status is ``REJECTED``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union


class ProcessingStatus(str, Enum):
    """Batch processing states, driven by the external payroll pipeline."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    PARTIAL = "PARTIAL"


class ApprovalStatus(str, Enum):
    """Batch approval states.  ``None`` means never submitted."""

    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


TERMINAL_APPROVAL_STATUSES: frozenset[ApprovalStatus] = frozenset({
    ApprovalStatus.APPROVED,
})


class ApprovalActionKind(str, Enum):
    """Discriminator for the action variants."""

    SUBMIT_FOR_APPROVAL = "submit_for_approval"
    APPROVE = "approve"
    REJECT = "reject"


# =========================================================================
# Actions (tagged variants)
# =========================================================================


@dataclass(frozen=True)
class SubmitForApproval:
    """Submit or resubmit a completed batch."""

    notes: str | None = None
    kind: ApprovalActionKind = ApprovalActionKind.SUBMIT_FOR_APPROVAL


@dataclass(frozen=True)
class Approve:
    """Approve a pending batch.  Makes it eligible for disbursement."""

    notes: str | None = None
    kind: ApprovalActionKind = ApprovalActionKind.APPROVE


@dataclass(frozen=True)
class Reject:
    """Reject a pending batch.  ``notes`` are required."""

    notes: str
    kind: ApprovalActionKind = ApprovalActionKind.REJECT


ApprovalAction = Union[SubmitForApproval, Approve, Reject]


# =========================================================================
# Transition table
# =========================================================================


@dataclass(frozen=True)
class TransitionRule:
    """One row of the transition table."""

    kind: ApprovalActionKind
    from_statuses: frozenset[ApprovalStatus | None]
    to_status: ApprovalStatus
    requires_processing: ProcessingStatus | None = None
    requires_notes: bool = False


APPROVAL_TRANSITIONS: dict[ApprovalActionKind, TransitionRule] = {
    ApprovalActionKind.SUBMIT_FOR_APPROVAL: TransitionRule(
        kind=ApprovalActionKind.SUBMIT_FOR_APPROVAL,
        from_statuses=frozenset({None, ApprovalStatus.REJECTED}),
        to_status=ApprovalStatus.PENDING_APPROVAL,
        requires_processing=ProcessingStatus.COMPLETED,
    ),
    ApprovalActionKind.APPROVE: TransitionRule(
        kind=ApprovalActionKind.APPROVE,
        from_statuses=frozenset({ApprovalStatus.PENDING_APPROVAL}),
        to_status=ApprovalStatus.APPROVED,
    ),
    ApprovalActionKind.REJECT: TransitionRule(
        kind=ApprovalActionKind.REJECT,
        from_statuses=frozenset({ApprovalStatus.PENDING_APPROVAL}),
        to_status=ApprovalStatus.REJECTED,
        requires_notes=True,
    ),
}


def status_label(status: ApprovalStatus | None) -> str:
    """Render an approval status for messages; ``None`` reads as ``none``."""
    return "none" if status is None else status.value


# =========================================================================
# State
# =========================================================================


@dataclass(frozen=True)
class BatchApprovalState:
    """The approval-relevant projection of a payroll batch."""

    processing_status: ProcessingStatus
    approval_status: ApprovalStatus | None = None
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    rejection_notes: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.approval_status in TERMINAL_APPROVAL_STATUSES

    @property
    def is_disbursable(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED


@dataclass(frozen=True)
class TransitionOutcome:
    """Result of applying one action to one state."""

    kind: ApprovalActionKind
    previous: BatchApprovalState
    new_state: BatchApprovalState
    occurred_at: datetime
    notes: str | None = None

    @property
    def from_status(self) -> ApprovalStatus | None:
        return self.previous.approval_status

    @property
    def to_status(self) -> ApprovalStatus:
        # Every legal transition lands on a concrete status.
        assert self.new_state.approval_status is not None
        return self.new_state.approval_status

    @property
    def prior_rejection_notes(self) -> str | None:
        """Notes of the rejection this transition leaves behind, if any."""
        if self.previous.approval_status == ApprovalStatus.REJECTED:
            return self.previous.rejection_notes
        return None
