"""
Tests for ReconciliationService and the SQL snapshot source.

Tests cover:
- Month-over-month report from persisted batches
- January compared against the prior December
- Missing current batch, missing previous batch
- Bonus lines excluded from snapshots
- Per-call settings override
- Batches without lines fall back to recorded totals
"""

from decimal import Decimal

import pytest

from payroll_engines.reconciliation import AnomalySortOrder, AnomalyType, ReconciliationSettings
from payroll_kernel.exceptions import NotFoundError, ValidationError
from payroll_services import ReconciliationService, SqlBatchSnapshotSource
from tests.factories import STANDARD_LINES, line


@pytest.fixture
def service(session, rules):
    return ReconciliationService(session, settings=rules.reconciliation)


class TestReconcile:
    def test_unchanged_month(self, service, make_batch, company_id):
        make_batch(2025, 2)
        make_batch(2025, 3)

        report = service.reconcile(company_id, 3, 2025)

        assert report.has_baseline
        assert report.variance == Decimal("0.00")
        assert report.headcount_change == 0
        assert report.anomalies == ()

    def test_employee_removed(self, service, make_batch, company_id):
        make_batch(2025, 2)
        make_batch(2025, 3, lines=STANDARD_LINES[:2])

        report = service.reconcile(company_id, 3, 2025)

        assert report.headcount_change == -1
        (anomaly,) = report.anomalies
        assert anomaly.type == AnomalyType.MISSING
        assert anomaly.employee_id == "E003"
        assert anomaly.employee_name == "Chen Wei"

    def test_january_compares_with_prior_december(self, service, make_batch, company_id):
        make_batch(2024, 12)
        make_batch(2025, 1, lines=(*STANDARD_LINES, line("E004", "Dana Ito", "38000.00")))

        report = service.reconcile(company_id, 1, 2025)

        assert (report.previous_year, report.previous_month) == (2024, 12)
        assert [a.type for a in report.anomalies] == [AnomalyType.NEW]

    def test_no_previous_batch(self, service, make_batch, company_id):
        make_batch(2025, 3)

        report = service.reconcile(company_id, 3, 2025)

        assert not report.has_baseline
        assert report.headcount_change == 3
        assert report.previous_batch_total == Decimal("0.00")

    def test_missing_current_batch(self, service, make_batch, company_id):
        make_batch(2025, 2)
        report = service.reconcile(company_id, 3, 2025)

        assert report.has_baseline
        assert report.current_batch_total == Decimal("0.00")
        assert report.variance == Decimal("-153000.00")
        assert report.variance_percent == -100.0
        assert report.headcount_change == -3
        assert [(a.employee_id, a.type) for a in report.anomalies] == [
            ("E001", AnomalyType.MISSING),
            ("E002", AnomalyType.MISSING),
            ("E003", AnomalyType.MISSING),
        ]

    def test_no_batch_in_either_month(self, service, make_batch, company_id):
        make_batch(2025, 1)
        with pytest.raises(NotFoundError, match="2025-03"):
            service.reconcile(company_id, 3, 2025)

    def test_other_company_batches_ignored(self, service, make_batch, company_id, other_company_id):
        make_batch(2025, 2, company=other_company_id)
        make_batch(2025, 3)

        assert not service.reconcile(company_id, 3, 2025).has_baseline

    def test_bad_month(self, service, company_id):
        with pytest.raises(ValidationError):
            service.reconcile(company_id, 13, 2025)

    def test_settings_override(self, service, make_batch, company_id):
        make_batch(2025, 2)
        make_batch(2025, 3, lines=(
            line("E001", "Asha Rao", "50500.00", "5000.00"),
            *STANDARD_LINES[1:],
        ))

        assert len(service.reconcile(company_id, 3, 2025).anomalies) == 1
        quiet = ReconciliationSettings(
            salary_change_threshold_percent=5,
            sort_order=AnomalySortOrder.EMPLOYEE,
        )
        assert service.reconcile(company_id, 3, 2025, settings=quiet).anomalies == ()


class TestSnapshots:
    def test_bonus_lines_excluded(self, session, make_batch, company_id):
        make_batch(2025, 3, lines=(
            *STANDARD_LINES,
            line("E001", "Asha Rao", "10000.00", is_bonus=True),
        ))

        snapshot = SqlBatchSnapshotSource(session).get_snapshot(company_id, 2025, 3)

        assert snapshot.headcount == 3
        assert snapshot.gross_total == Decimal("153000.00")
        assert snapshot.per_employee["E001"].gross == Decimal("50000.00")

    def test_line_order_preserved(self, session, make_batch, company_id):
        make_batch(2025, 3)
        snapshot = SqlBatchSnapshotSource(session).get_snapshot(company_id, 2025, 3)
        assert list(snapshot.per_employee) == ["E001", "E002", "E003"]

    def test_batch_without_lines_uses_totals(self, session, make_batch, company_id):
        make_batch(2025, 3, lines=())
        snapshot = SqlBatchSnapshotSource(session).get_snapshot(company_id, 2025, 3)

        assert snapshot.headcount == 0
        assert snapshot.gross_total == Decimal("0.00")
        assert dict(snapshot.per_employee) == {}

    def test_no_batch(self, session, company_id):
        assert SqlBatchSnapshotSource(session).get_snapshot(company_id, 2025, 3) is None
