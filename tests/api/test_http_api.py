"""
HTTP contract tests for the payroll API.

Tests cover:
- pay-dates / compliance-deadlines / calendar / reconciliation payloads
- Approval endpoints and the audit trail
- Error mapping: 400 configuration, 422 validation, 404 not found,
  409 invalid state
- Tenant headers and correlation ids
"""

from uuid import uuid4

import pytest

from tests.factories import STANDARD_LINES


class TestPayDates:
    def test_monthly_february(self, client):
        response = client.get(
            "/pay-dates", params={"year": 2025, "month": 2, "frequency": "MONTHLY"},
        )
        assert response.status_code == 200
        assert response.json() == {
            "year": 2025,
            "month": 2,
            "frequency": "MONTHLY",
            "dates": ["2025-02-28"],
        }

    def test_unknown_frequency_is_400(self, client):
        response = client.get(
            "/pay-dates", params={"year": 2025, "month": 2, "frequency": "DAILY"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "CONFIGURATION_ERROR"
        assert body["unknown_code"] == "DAILY"
        assert "MONTHLY" in body["known"]

    def test_month_out_of_range_is_422(self, client):
        response = client.get(
            "/pay-dates", params={"year": 2025, "month": 13, "frequency": "MONTHLY"},
        )
        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"
        assert response.json()["field"] == "month"

    def test_missing_parameter_is_422(self, client):
        response = client.get("/pay-dates", params={"year": 2025, "month": 2})
        assert response.status_code == 422


class TestComplianceDeadlines:
    def test_india_july(self, client):
        response = client.get(
            "/compliance-deadlines",
            params={"year": 2025, "month": 7, "jurisdiction": "IN"},
        )
        assert response.status_code == 200
        deadlines = response.json()["deadlines"]
        assert deadlines[-1] == {
            "date": "2025-07-31",
            "label": "Form 24Q (Q1) Due",
            "category": "filing",
        }
        assert [d["date"] for d in deadlines[:3]] == [
            "2025-07-07",
            "2025-07-15",
            "2025-07-15",
        ]

    def test_unknown_jurisdiction_is_400(self, client):
        response = client.get(
            "/compliance-deadlines",
            params={"year": 2025, "month": 7, "jurisdiction": "ZZ"},
        )
        assert response.status_code == 400


class TestReconciliation:
    def test_report(self, client, make_batch, tenant_headers):
        make_batch(2025, 2)
        make_batch(2025, 3, lines=STANDARD_LINES[:2])

        response = client.get(
            "/reconciliation", params={"month": 3, "year": 2025}, headers=tenant_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["headcount_change"] == -1
        assert body["variance"] == "-61000.00"
        assert body["previous_batch_total"] == "153000.00"
        assert body["anomalies"][0]["type"] == "MISSING"
        assert body["anomalies"][0]["employee_id"] == "E003"

    def test_missing_batch_is_404(self, client, tenant_headers):
        response = client.get(
            "/reconciliation", params={"month": 3, "year": 2025}, headers=tenant_headers,
        )
        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_company_header_required(self, client):
        response = client.get("/reconciliation", params={"month": 3, "year": 2025})
        assert response.status_code == 422


class TestApprovalEndpoints:
    def test_full_cycle(self, client, completed_batch, tenant_headers):
        base = f"/batches/{completed_batch.id}"

        submitted = client.post(f"{base}/submit-for-approval", json={}, headers=tenant_headers)
        assert submitted.status_code == 200
        assert submitted.json()["approval_status"] == "PENDING_APPROVAL"

        rejected = client.post(
            f"{base}/reject", json={"notes": "PF mismatch"}, headers=tenant_headers,
        )
        assert rejected.status_code == 200
        assert rejected.json()["rejection_notes"] == "PF mismatch"

        resubmitted = client.post(
            f"{base}/submit-for-approval", json={"notes": "fixed"}, headers=tenant_headers,
        )
        assert resubmitted.json()["rejection_notes"] is None

        approved = client.post(f"{base}/approve", headers=tenant_headers)
        assert approved.status_code == 200
        assert approved.json()["approval_status"] == "APPROVED"

        trail = client.get(f"{base}/audit-trail", headers=tenant_headers).json()
        assert [r["to_state"] for r in trail] == [
            "PENDING_APPROVAL",
            "REJECTED",
            "PENDING_APPROVAL",
            "APPROVED",
        ]
        assert trail[2]["prior_rejection_notes"] == "PF mismatch"

    def test_reject_approved_is_409(self, client, pending_batch, tenant_headers):
        base = f"/batches/{pending_batch.id}"
        client.post(f"{base}/approve", headers=tenant_headers)

        response = client.post(f"{base}/reject", json={"notes": "late"}, headers=tenant_headers)
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "INVALID_STATE"
        assert body["message"] == (
            "reject requires approval status PENDING_APPROVAL, found APPROVED"
        )

    def test_reject_blank_notes_is_422(self, client, pending_batch, tenant_headers):
        response = client.post(
            f"/batches/{pending_batch.id}/reject", json={"notes": "  "}, headers=tenant_headers,
        )
        assert response.status_code == 422
        assert response.json()["field"] == "notes"

        batch = client.get(f"/batches/{pending_batch.id}", headers=tenant_headers).json()
        assert batch["approval_status"] == "PENDING_APPROVAL"

    def test_reject_without_body_is_422(self, client, pending_batch, tenant_headers):
        response = client.post(f"/batches/{pending_batch.id}/reject", headers=tenant_headers)
        assert response.status_code == 422

    def test_other_tenant_is_404(self, client, completed_batch, actor_id):
        headers = {"X-Company-Id": str(uuid4()), "X-Actor-Id": str(actor_id)}
        response = client.post(
            f"/batches/{completed_batch.id}/submit-for-approval", json={}, headers=headers,
        )
        assert response.status_code == 404
        assert response.json()["error"] == "BATCH_NOT_FOUND"

    def test_actor_header_required(self, client, completed_batch, company_id):
        response = client.post(
            f"/batches/{completed_batch.id}/submit-for-approval",
            json={},
            headers={"X-Company-Id": str(company_id)},
        )
        assert response.status_code == 422

    def test_events_published(self, client, completed_batch, tenant_headers, event_sink):
        client.post(
            f"/batches/{completed_batch.id}/submit-for-approval", json={}, headers=tenant_headers,
        )
        assert event_sink.names == ["payroll.approval.pending"]


class TestCalendar:
    def test_month_view(self, client, make_batch, tenant_headers):
        make_batch(2025, 3)
        response = client.get(
            "/calendar",
            params={"year": 2025, "month": 3, "frequency": "SEMI_MONTHLY", "jurisdiction": "IN"},
            headers=tenant_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["today"] == "2025-03-10"
        assert body["pay_dates"] == ["2025-03-14", "2025-03-31"]
        assert body["next_pay_date"] == "2025-03-14"
        assert body["overdue_count"] == 1
        assert body["batch"]["employee_count"] == 3


class TestCorrelation:
    def test_correlation_id_echoed(self, client):
        response = client.get(
            "/pay-dates",
            params={"year": 2025, "month": 2, "frequency": "MONTHLY"},
            headers={"X-Correlation-Id": "req-123"},
        )
        assert response.headers["X-Correlation-Id"] == "req-123"

    def test_correlation_id_generated(self, client):
        response = client.get("/")
        assert response.headers["X-Correlation-Id"]
        assert response.json()["rules_version"] == "2026.1"

    @pytest.mark.parametrize("path", ["/pay-dates", "/compliance-deadlines"])
    def test_request_failure_logged(self, client, captured_logs, path):
        client.get(path, params={"year": 2025, "month": 2, "frequency": "X", "jurisdiction": "X"})
        failures = [r for r in captured_logs() if r["message"] == "request_failed"]
        assert failures[-1]["status_code"] == 400
        assert failures[-1]["path"] == path
