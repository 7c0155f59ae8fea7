"""Month-over-month reconciliation report."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from payroll_api.dependencies import get_company_id, get_reconciliation_service
from payroll_api.schemas import ReconciliationResponse
from payroll_services.reconciliation_service import ReconciliationService

router = APIRouter(tags=["reconciliation"])


@router.get("/reconciliation", response_model=ReconciliationResponse)
def get_reconciliation(
    month: int = Query(...),
    year: int = Query(...),
    company_id: UUID = Depends(get_company_id),
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> dict:
    return service.reconcile(company_id, month, year).to_dict()
