"""
payroll_engines.approval -- Pure approval state transition function.

Responsibility:
    Apply one approval action to one batch approval state, returning the
    new state or raising the error that names the failed guard.  Every
    legal and illegal transition is enumerable from
    ``APPROVAL_TRANSITIONS``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel/domain/ types and exceptions.
    Persistence and the compare-and-set live in
    payroll_services.approval_service.

Invariants enforced:
    - Only the transitions in ``APPROVAL_TRANSITIONS`` are legal.
    - ``processing_status`` is read in guards and never changed.
    - Entering PENDING_APPROVAL clears ``rejected_at``/``rejection_notes``;
      the prior notes stay reachable via ``TransitionOutcome.prior_rejection_notes``.
    - Entering APPROVED or REJECTED keeps ``submitted_at``.
    - Purity: the timestamp is an argument; no clock access.

Failure modes:
    - InvalidStateError naming the required precondition and the state
      found, e.g. "reject requires approval status PENDING_APPROVAL, found
      APPROVED".
    - ValidationError for missing or blank rejection notes.  Checked after
      the state guard, so an illegal state is reported first.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from payroll_kernel.domain.approval import (
    APPROVAL_TRANSITIONS,
    ApprovalAction,
    ApprovalActionKind,
    ApprovalStatus,
    BatchApprovalState,
    TransitionOutcome,
    TransitionRule,
    status_label,
)
from payroll_kernel.exceptions import InvalidStateError, ValidationError


def _describe_from_statuses(rule: TransitionRule) -> str:
    labels = sorted(status_label(s) for s in rule.from_statuses)
    if len(labels) == 1:
        return f"approval status {labels[0]}"
    return "approval status in {" + ", ".join(labels) + "}"


def check_guard(state: BatchApprovalState, rule: TransitionRule) -> None:
    """Raise InvalidStateError if ``state`` does not satisfy ``rule``."""
    if (
        rule.requires_processing is not None
        and state.processing_status != rule.requires_processing
    ):
        raise InvalidStateError(
            action=rule.kind.value,
            required=f"processing status {rule.requires_processing.value}",
            found=state.processing_status.value,
        )
    if state.approval_status not in rule.from_statuses:
        raise InvalidStateError(
            action=rule.kind.value,
            required=_describe_from_statuses(rule),
            found=status_label(state.approval_status),
        )


def _normalized_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    stripped = notes.strip()
    return stripped or None


def is_legal(state: BatchApprovalState, kind: ApprovalActionKind) -> bool:
    """True when ``kind`` passes its state guard from ``state``."""
    try:
        check_guard(state, APPROVAL_TRANSITIONS[kind])
    except InvalidStateError:
        return False
    return True


def legal_actions(state: BatchApprovalState) -> tuple[ApprovalActionKind, ...]:
    """Action kinds whose guards ``state`` satisfies, in table order."""
    return tuple(kind for kind in APPROVAL_TRANSITIONS if is_legal(state, kind))


def transition(
    state: BatchApprovalState,
    action: ApprovalAction,
    at: datetime,
) -> TransitionOutcome:
    """
    Apply ``action`` to ``state`` at time ``at``.

    Returns:
        TransitionOutcome with the previous and new state.

    Raises:
        InvalidStateError: the state guard failed.
        ValidationError: a reject carried no notes.
    """
    rule = APPROVAL_TRANSITIONS[action.kind]
    check_guard(state, rule)

    notes = _normalized_notes(action.notes)
    if rule.requires_notes and notes is None:
        raise ValidationError("notes", action.notes, "rejection notes are required")

    if rule.to_status == ApprovalStatus.PENDING_APPROVAL:
        new_state = replace(
            state,
            approval_status=ApprovalStatus.PENDING_APPROVAL,
            submitted_at=at,
            approved_at=None,
            rejected_at=None,
            rejection_notes=None,
        )
    elif rule.to_status == ApprovalStatus.APPROVED:
        new_state = replace(
            state,
            approval_status=ApprovalStatus.APPROVED,
            approved_at=at,
        )
    else:
        new_state = replace(
            state,
            approval_status=ApprovalStatus.REJECTED,
            rejected_at=at,
            rejection_notes=notes,
        )

    return TransitionOutcome(
        kind=rule.kind,
        previous=state,
        new_state=new_state,
        occurred_at=at,
        notes=notes,
    )
