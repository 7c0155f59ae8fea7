"""
payroll_services.approval_service -- Payroll batch approval lifecycle.

Responsibility:
    Applies approval actions (submit, approve, reject) to persisted
    batches for authorized actors, appends the audit record and publishes
    the downstream event.  Delegates guard evaluation to the pure
    ``payroll_engines.approval.transition``.

Architecture position:
    Services -- owns the Session transaction boundary.  May import from
    payroll_kernel and payroll_engines.

Invariants enforced:
    - Atomic compare-and-set: the batch row is updated only if approval
      status, processing status and version still equal what was read.
      Two actors racing on one batch produce exactly one transition.
    - One append-only audit record per successful transition, written in
      the same transaction as the status change.
    - All-or-nothing: any failure rolls back; no partial mutation.
    - Events are published only after commit.
    - Tenant scope: a batch of another company is reported as not found.

Failure modes:
    - BatchNotFoundError: unknown batch id or another company's batch.
    - InvalidStateError: guard failed, either on read or at the
      compare-and-set (concurrent transition).
    - ValidationError: reject without notes.

Audit relevance:
    ``payroll_approval_audit`` records actor, from-state, to-state,
    timestamp, notes, and the rejection notes a resubmission supersedes.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from payroll_kernel.domain.approval import (
    APPROVAL_TRANSITIONS,
    ApprovalAction,
    ApprovalActionKind,
    Approve,
    Reject,
    SubmitForApproval,
    TransitionOutcome,
    status_label,
)
from payroll_kernel.domain.batch import ApprovalAuditEntry, PayrollBatch
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.exceptions import (
    BatchNotFoundError,
    InvalidStateError,
    PayrollCoreError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.models.approval_audit import ApprovalAuditRecordModel
from payroll_kernel.models.batch import PayrollBatchModel
from payroll_engines.approval import check_guard, legal_actions, transition
from payroll_services.events import (
    EVENT_FOR_STATUS,
    ApprovalEventSink,
    LoggingEventSink,
)

logger = get_logger("services.approval")


class ApprovalService:
    """
    Applies approval transitions to payroll batches.

    Contract:
        Each public transition method either commits exactly one status
        change plus one audit record and returns the updated batch, or
        raises and leaves the batch untouched.

    Non-goals:
        - Does NOT decide who may approve; callers pass an already
          authorized ``actor_id``.
        - Does NOT change processing status (see BatchRegistry).
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        event_sink: ApprovalEventSink | None = None,
    ) -> None:
        self._session = session
        self._clock = clock or SystemClock()
        self._events = event_sink or LoggingEventSink()

    # =========================================================================
    # Transitions
    # =========================================================================

    def submit_for_approval(
        self,
        batch_id: UUID,
        company_id: UUID,
        actor_id: UUID,
        notes: str | None = None,
    ) -> PayrollBatch:
        """Submit a COMPLETED batch, or resubmit a REJECTED one."""
        return self.apply(batch_id, company_id, actor_id, SubmitForApproval(notes=notes))

    def approve(
        self,
        batch_id: UUID,
        company_id: UUID,
        actor_id: UUID,
        notes: str | None = None,
    ) -> PayrollBatch:
        """Approve a PENDING_APPROVAL batch; it becomes disbursable."""
        return self.apply(batch_id, company_id, actor_id, Approve(notes=notes))

    def reject(
        self,
        batch_id: UUID,
        company_id: UUID,
        actor_id: UUID,
        notes: str,
    ) -> PayrollBatch:
        """Reject a PENDING_APPROVAL batch.  ``notes`` must be non-empty."""
        return self.apply(batch_id, company_id, actor_id, Reject(notes=notes))

    def apply(
        self,
        batch_id: UUID,
        company_id: UUID,
        actor_id: UUID,
        action: ApprovalAction,
    ) -> PayrollBatch:
        """
        Read, guard, compare-and-set, audit, commit, publish.

        Raises:
            BatchNotFoundError, InvalidStateError, ValidationError.
        """
        with LogContext.bind(
            batch_id=str(batch_id),
            company_id=str(company_id),
            actor_id=str(actor_id),
        ):
            try:
                batch = self._load(batch_id, company_id).to_dto()
                outcome = transition(batch.approval_state, action, self._clock.now_utc())
                self._compare_and_set(batch, outcome)
                audit = self._record_audit(batch, actor_id, outcome)
                self._session.commit()
            except PayrollCoreError as exc:
                self._session.rollback()
                logger.warning(
                    "approval_transition_refused",
                    extra={
                        "action": action.kind.value,
                        "error_code": exc.code,
                        "reason": str(exc),
                    },
                )
                raise
            except Exception:
                self._session.rollback()
                raise

            updated = self.get_batch(batch_id, company_id)
            logger.info(
                "approval_transition_applied",
                extra={
                    "action": outcome.kind.value,
                    "from_state": status_label(outcome.from_status),
                    "to_state": outcome.to_status.value,
                    "audit_id": str(audit.id),
                },
            )
            self._publish(updated, actor_id, outcome)
            return updated

    # =========================================================================
    # Queries
    # =========================================================================

    def get_batch(self, batch_id: UUID, company_id: UUID) -> PayrollBatch:
        return self._load(batch_id, company_id).to_dto()

    def legal_actions(
        self,
        batch_id: UUID,
        company_id: UUID,
    ) -> tuple[ApprovalActionKind, ...]:
        return legal_actions(self.get_batch(batch_id, company_id).approval_state)

    def audit_trail(
        self,
        batch_id: UUID,
        company_id: UUID,
    ) -> tuple[ApprovalAuditEntry, ...]:
        """Audit records of one batch, oldest first."""
        self._load(batch_id, company_id)
        records = self._session.scalars(
            select(ApprovalAuditRecordModel)
            .where(ApprovalAuditRecordModel.batch_id == batch_id)
            .order_by(ApprovalAuditRecordModel.sequence)
        ).all()
        return tuple(r.to_dto() for r in records)

    # =========================================================================
    # Internals
    # =========================================================================

    def _load(self, batch_id: UUID, company_id: UUID) -> PayrollBatchModel:
        model = self._session.scalars(
            select(PayrollBatchModel)
            .where(PayrollBatchModel.id == batch_id)
            .execution_options(populate_existing=True)
        ).one_or_none()
        if model is None or model.company_id != company_id:
            raise BatchNotFoundError(str(batch_id))
        return model

    def _compare_and_set(self, batch: PayrollBatch, outcome: TransitionOutcome) -> None:
        """
        Write ``outcome.new_state`` only if the row still matches ``batch``.

        Raises:
            InvalidStateError: the row changed since it was read.
        """
        expected = outcome.previous
        status_col = PayrollBatchModel.approval_status
        status_matches = (
            status_col.is_(None)
            if expected.approval_status is None
            else status_col == expected.approval_status.value
        )
        new = outcome.new_state
        stmt = (
            update(PayrollBatchModel)
            .where(
                PayrollBatchModel.id == batch.id,
                PayrollBatchModel.company_id == batch.company_id,
                PayrollBatchModel.version == batch.version,
                PayrollBatchModel.processing_status == expected.processing_status.value,
                status_matches,
            )
            .values(
                approval_status=new.approval_status.value,
                submitted_at=new.submitted_at,
                approved_at=new.approved_at,
                rejected_at=new.rejected_at,
                rejection_notes=new.rejection_notes,
                version=PayrollBatchModel.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        if result.rowcount == 1:
            return

        current = self._load(batch.id, batch.company_id).to_dto()
        logger.warning(
            "approval_compare_and_set_lost",
            extra={
                "action": outcome.kind.value,
                "expected_version": batch.version,
                "found_version": current.version,
                "found_state": status_label(current.approval_status),
            },
        )
        check_guard(current.approval_state, APPROVAL_TRANSITIONS[outcome.kind])
        raise InvalidStateError(
            action=outcome.kind.value,
            required=f"batch version {batch.version} (no concurrent transition)",
            found=f"version {current.version}",
        )

    def _record_audit(
        self,
        batch: PayrollBatch,
        actor_id: UUID,
        outcome: TransitionOutcome,
    ) -> ApprovalAuditRecordModel:
        sequence = self._session.scalar(
            select(func.count())
            .select_from(ApprovalAuditRecordModel)
            .where(ApprovalAuditRecordModel.batch_id == batch.id)
        ) or 0
        record = ApprovalAuditRecordModel(
            batch_id=batch.id,
            sequence=sequence + 1,
            company_id=batch.company_id,
            actor_id=actor_id,
            action=outcome.kind.value,
            from_state=status_label(outcome.from_status),
            to_state=outcome.to_status.value,
            occurred_at=outcome.occurred_at,
            notes=outcome.notes,
            prior_rejection_notes=outcome.prior_rejection_notes,
        )
        self._session.add(record)
        self._session.flush()
        return record

    def _publish(
        self,
        batch: PayrollBatch,
        actor_id: UUID,
        outcome: TransitionOutcome,
    ) -> None:
        payload: dict[str, object] = {
            "batch_id": str(batch.id),
            "company_id": str(batch.company_id),
            "actor_id": str(actor_id),
            "month": batch.month,
            "year": batch.year,
            "from_state": status_label(outcome.from_status),
            "to_state": outcome.to_status.value,
        }
        if outcome.notes is not None:
            payload["notes"] = outcome.notes
        self._events.publish(EVENT_FOR_STATUS[outcome.to_status], payload)
