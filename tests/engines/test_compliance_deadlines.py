"""
Tests for the compliance deadline calendar.

Tests cover:
- India: monthly remittances plus the quarterly Form 24Q filing months
- United States: deposit deadline, Form 941 and W-2/W-3 in January
- Month filtering, ordering (date, then table order)
- Unknown jurisdiction, malformed period
- Overdue evaluation
"""

from datetime import date

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from payroll_engines.compliance import ComplianceDeadlineCalendar, overdue_deadlines
from payroll_kernel.domain.rules import DeadlineRule, JurisdictionRules
from payroll_kernel.domain.schedule import DeadlineCategory
from payroll_kernel.exceptions import ConfigurationError, ValidationError


@pytest.fixture
def calendar(rules):
    return ComplianceDeadlineCalendar(rules.jurisdictions)


def rows(deadlines):
    return [(d.date, d.label, d.category.value) for d in deadlines]


class TestIndia:
    def test_july_includes_form_24q_q1(self, calendar):
        assert rows(calendar.compute_deadlines(2025, 7, "IN")) == [
            (date(2025, 7, 7), "TDS Remittance Due", "tax"),
            (date(2025, 7, 15), "PF Remittance Due", "compliance"),
            (date(2025, 7, 15), "ESI Remittance Due", "compliance"),
            (date(2025, 7, 31), "Form 24Q (Q1) Due", "filing"),
        ]

    def test_weekend_remittance_dates_move_back(self, calendar):
        # 2025-06-07 is a Saturday and 2025-06-15 a Sunday.
        assert rows(calendar.compute_deadlines(2025, 6, "IN")) == [
            (date(2025, 6, 6), "TDS Remittance Due", "tax"),
            (date(2025, 6, 13), "PF Remittance Due", "compliance"),
            (date(2025, 6, 13), "ESI Remittance Due", "compliance"),
        ]

    @pytest.mark.parametrize(
        "month, label, expected",
        [
            (7, "Form 24Q (Q1) Due", date(2025, 7, 31)),
            (10, "Form 24Q (Q2) Due", date(2025, 10, 31)),
            (1, "Form 24Q (Q3) Due", date(2025, 1, 31)),
            (5, "Form 24Q (Q4) Due", date(2025, 5, 31)),
        ],
    )
    def test_quarterly_filing_months(self, calendar, month, label, expected):
        filings = [
            d for d in calendar.compute_deadlines(2025, month, "IN")
            if d.category == DeadlineCategory.FILING
        ]
        assert [(d.label, d.date) for d in filings] == [(label, expected)]

    @pytest.mark.parametrize("month", [2, 3, 4, 6, 8, 9, 11, 12])
    def test_no_filing_outside_quarter_months(self, calendar, month):
        categories = {d.category for d in calendar.compute_deadlines(2025, month, "IN")}
        assert DeadlineCategory.FILING not in categories

    def test_fixed_date_is_not_weekend_adjusted(self, calendar):
        # 2025-05-31 is a Saturday; the statutory date stands.
        (filing,) = [
            d for d in calendar.compute_deadlines(2025, 5, "IN")
            if d.category == DeadlineCategory.FILING
        ]
        assert filing.date == date(2025, 5, 31)


class TestUnitedStates:
    def test_january_filings_in_table_order(self, calendar):
        assert rows(calendar.compute_deadlines(2026, 1, "US")) == [
            (date(2026, 1, 15), "Federal Tax Deposit", "tax"),
            (date(2026, 1, 31), "Form 941 (Q4) Due", "filing"),
            (date(2026, 1, 31), "W-2/W-3 Filing Deadline", "filing"),
        ]

    def test_february_only_deposit(self, calendar):
        # 2026-02-15 is a Sunday.
        assert rows(calendar.compute_deadlines(2026, 2, "US")) == [
            (date(2026, 2, 13), "Federal Tax Deposit", "tax"),
        ]


class TestTableDriven:
    def test_new_jurisdiction_is_table_only(self):
        table = JurisdictionRules(
            code="GB",
            deadlines=(
                DeadlineRule(
                    label="PAYE Payment Due",
                    category=DeadlineCategory.TAX,
                    kind="weekday_on_or_before",
                    day=22,
                ),
                DeadlineRule(
                    label="P60 Issue Deadline",
                    category=DeadlineCategory.FILING,
                    kind="fixed_date",
                    month=5,
                    day=31,
                ),
            ),
        )
        calendar = ComplianceDeadlineCalendar({"GB": table})
        assert rows(calendar.compute_deadlines(2025, 5, "GB")) == [
            (date(2025, 5, 22), "PAYE Payment Due", "tax"),
            (date(2025, 5, 31), "P60 Issue Deadline", "filing"),
        ]

    def test_unknown_rule_kind(self):
        table = JurisdictionRules(
            code="XX",
            deadlines=(
                DeadlineRule(
                    label="Odd",
                    category=DeadlineCategory.TAX,
                    kind="first_monday",
                    day=1,
                ),
            ),
        )
        with pytest.raises(ConfigurationError, match="first_monday"):
            ComplianceDeadlineCalendar({"XX": table}).compute_deadlines(2025, 1, "XX")


class TestErrors:
    def test_unknown_jurisdiction(self, calendar):
        with pytest.raises(ConfigurationError) as exc_info:
            calendar.compute_deadlines(2025, 7, "ZZ")
        assert exc_info.value.unknown_code == "ZZ"
        assert set(exc_info.value.known) == {"IN", "US"}

    def test_bad_month(self, calendar):
        with pytest.raises(ValidationError):
            calendar.compute_deadlines(2025, 0, "IN")


class TestOverdue:
    def test_strictly_before_today(self, calendar):
        deadlines = calendar.compute_deadlines(2025, 7, "IN")
        overdue = overdue_deadlines(deadlines, date(2025, 7, 15))
        assert [d.label for d in overdue] == ["TDS Remittance Due"]

    def test_nothing_overdue_at_month_start(self, calendar):
        deadlines = calendar.compute_deadlines(2025, 7, "IN")
        assert overdue_deadlines(deadlines, date(2025, 7, 1)) == ()


class TestProperties:
    @given(
        year=st.integers(min_value=1900, max_value=2200),
        month=st.integers(min_value=1, max_value=12),
        jurisdiction=st.sampled_from(["IN", "US"]),
    )
    @settings(max_examples=200, deadline=None)
    def test_every_deadline_inside_month_and_ordered(self, rules, year, month, jurisdiction):
        calendar = ComplianceDeadlineCalendar(rules.jurisdictions)
        deadlines = calendar.compute_deadlines(year, month, jurisdiction)
        assert deadlines
        assert all((d.date.year, d.date.month) == (year, month) for d in deadlines)
        assert [d.date for d in deadlines] == sorted(d.date for d in deadlines)
