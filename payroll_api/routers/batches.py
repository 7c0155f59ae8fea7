"""Batch approval transitions and audit trail."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from payroll_api.dependencies import get_actor_id, get_approval_service, get_company_id
from payroll_api.schemas import AuditRecordOut, BatchOut, NotesRequest, RejectRequest
from payroll_services.approval_service import ApprovalService

router = APIRouter(prefix="/batches", tags=["approval"])


def _notes(payload: NotesRequest | None) -> str | None:
    return payload.notes if payload is not None else None


@router.get("/{batch_id}", response_model=BatchOut)
def get_batch(
    batch_id: UUID,
    company_id: UUID = Depends(get_company_id),
    service: ApprovalService = Depends(get_approval_service),
) -> dict:
    return service.get_batch(batch_id, company_id).to_dict()


@router.post("/{batch_id}/submit-for-approval", response_model=BatchOut)
def submit_for_approval(
    batch_id: UUID,
    payload: NotesRequest | None = None,
    company_id: UUID = Depends(get_company_id),
    actor_id: UUID = Depends(get_actor_id),
    service: ApprovalService = Depends(get_approval_service),
) -> dict:
    batch = service.submit_for_approval(batch_id, company_id, actor_id, notes=_notes(payload))
    return batch.to_dict()


@router.post("/{batch_id}/approve", response_model=BatchOut)
def approve(
    batch_id: UUID,
    payload: NotesRequest | None = None,
    company_id: UUID = Depends(get_company_id),
    actor_id: UUID = Depends(get_actor_id),
    service: ApprovalService = Depends(get_approval_service),
) -> dict:
    batch = service.approve(batch_id, company_id, actor_id, notes=_notes(payload))
    return batch.to_dict()


@router.post("/{batch_id}/reject", response_model=BatchOut)
def reject(
    batch_id: UUID,
    payload: RejectRequest,
    company_id: UUID = Depends(get_company_id),
    actor_id: UUID = Depends(get_actor_id),
    service: ApprovalService = Depends(get_approval_service),
) -> dict:
    batch = service.reject(batch_id, company_id, actor_id, notes=payload.notes)
    return batch.to_dict()


@router.get("/{batch_id}/audit-trail", response_model=list[AuditRecordOut])
def audit_trail(
    batch_id: UUID,
    company_id: UUID = Depends(get_company_id),
    service: ApprovalService = Depends(get_approval_service),
) -> list[dict]:
    return [entry.to_dict() for entry in service.audit_trail(batch_id, company_id)]
