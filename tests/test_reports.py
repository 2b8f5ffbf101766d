"""Tests for the reports page breakdowns."""

from datetime import date
from decimal import Decimal

from rentbook.calculations import (
    build_financial_report,
    daily_totals,
    expenses_by_category,
)
from rentbook.models import ExpenseCategory


class TestDailyTotals:
    """Tests for per-day income vs expense."""

    def test_days_sorted_and_merged(self, make_income, make_expense):
        """Test days are oldest first and same-day records are summed."""
        incomes = [
            make_income(1000, commission=100, on=date(2024, 3, 12)),
            make_income(500, on=date(2024, 3, 3)),
            make_income(200, on=date(2024, 3, 12)),
        ]
        expenses = [make_expense(300, on=date(2024, 3, 3)), make_expense(50, on=date(2024, 3, 7))]

        days = daily_totals(incomes, expenses)

        assert [d.day for d in days] == [date(2024, 3, 3), date(2024, 3, 7), date(2024, 3, 12)]
        assert days[0].income == Decimal("500")
        assert days[0].expense == Decimal("300")
        assert days[1].income == Decimal("0")
        assert days[2].income == Decimal("1100")

    def test_empty(self):
        """Test no records gives no days."""
        assert daily_totals([], []) == []


class TestCategoryBreakdown:
    """Tests for expenses grouped by category."""

    def test_largest_first(self, make_expense):
        """Test categories are ordered by amount, largest first."""
        expenses = [
            make_expense(100, category=ExpenseCategory.SUPPLIES),
            make_expense(400, category=ExpenseCategory.REPAIRS),
            make_expense(250, category=ExpenseCategory.SUPPLIES),
        ]
        totals = expenses_by_category(expenses)
        assert [t.category for t in totals] == [ExpenseCategory.REPAIRS, ExpenseCategory.SUPPLIES]
        assert totals[1].amount == Decimal("350")
        assert totals[1].count == 2

    def test_report(self, make_income, make_expense):
        """Test the assembled monthly report."""
        report = build_financial_report(
            "2024-03",
            [make_income(1000, caution=200, commission=100)],
            [make_expense(400)],
        )
        assert report.total_net_income == Decimal("1100")
        assert report.total_expenses == Decimal("400")
        assert report.net_operating_profit == Decimal("700")
        assert len(report.daily) == 1
        assert report.categories[0].category == ExpenseCategory.UTILITIES


class TestReportStatistics:
    """Tests for per-entry counts, highest and average figures."""

    def test_statistics(self, make_income, make_expense):
        """Test counts, highest and average over net income and expenses."""
        report = build_financial_report(
            "2024-03",
            [
                make_income(1000, caution=200, commission=100),
                make_income(500),
                make_income(200),
            ],
            [make_expense(400), make_expense(250)],
        )
        assert report.income_count == 3
        assert report.expense_count == 2
        assert report.highest_income == Decimal("1100")
        assert report.average_income == Decimal("600")
        assert report.highest_expense == Decimal("400")
        assert report.average_expense == Decimal("325")

    def test_average_rounded_to_cent(self, make_income):
        """Test a repeating average is rounded half up to two places."""
        report = build_financial_report(
            "2024-03", [make_income(100), make_income(100), make_income(101)], []
        )
        assert report.average_income == Decimal("100.33")

    def test_empty_month(self):
        """Test a month with no entries reports zeros."""
        report = build_financial_report("2024-03", [], [])
        assert report.income_count == 0
        assert report.expense_count == 0
        assert report.highest_income == Decimal("0")
        assert report.average_income == Decimal("0")
        assert report.highest_expense == Decimal("0")
        assert report.average_expense == Decimal("0")
