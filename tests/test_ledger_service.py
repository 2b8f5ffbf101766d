"""Tests for the ledger service over in-memory storage."""

import asyncio
import pytest
from datetime import date
from decimal import Decimal

from rentbook.calculations import LedgerCalculator
from rentbook.ledger import LedgerService, create_app_components
from rentbook.models import (
    DEFAULT_PARTNERS,
    ExpenseUpdate,
    IncomeDraft,
    IncomeUpdate,
)
from rentbook.services.storage import (
    InMemoryExpenseStorage,
    InMemoryIncomeStorage,
    InMemoryWithdrawalStorage,
    PersistenceFailure,
)
from rentbook.validation import ValidationError


def record_month(service, actor):
    """Scenario month: net income 500000, expenses 200000, two withdrawals."""
    async def _record():
        await service.record_income(service.income_draft_from_form({
            "date": "2024-03-02", "client_name": "Ada", "brought_by": "Bethel",
            "primary_amount": "400000", "caution_fee": "50000", "commission": "30000",
        }), actor)
        await service.record_income(service.income_draft_from_form({
            "date": "2024-03-18", "client_name": "Bayo", "brought_by": "Desmond",
            "primary_amount": "80000",
        }), actor)
        await service.record_expense(service.expense_draft_from_form({
            "date": "2024-03-05", "name": "Staff", "category": "Staff Salary", "amount": "150000",
        }), actor)
        await service.record_expense(service.expense_draft_from_form({
            "date": "2024-03-09", "name": "Power", "category": "Utilities", "amount": "50000",
        }), actor)
        await service.record_withdrawal(service.withdrawal_draft_from_form({
            "date": "2024-03-20", "amount": "200000", "recipient": "Desmond",
        }), actor)
        await service.record_withdrawal(service.withdrawal_draft_from_form({
            "date": "2024-03-21", "amount": "50000", "recipient": "Bethel",
        }), actor)

    asyncio.run(_record())


class TestSummaries:
    """Tests for the screen read operations."""

    def test_monthly_summary(self, service, actor):
        """Test dashboard totals for the month."""
        record_month(service, actor)
        summary = asyncio.run(service.monthly_summary("2024-03"))

        assert summary.total_income == Decimal("480000")
        assert summary.total_net_income == Decimal("500000")
        assert summary.total_expenses == Decimal("200000")
        assert summary.net_operating_profit == Decimal("300000")
        assert summary.partner_shares["Desmond"] == Decimal("150000")

    def test_partner_overview(self, service, actor):
        """Test partner balances clamp at zero."""
        record_month(service, actor)
        overview = asyncio.run(service.partner_overview("2024-03"))

        balances = {b.partner.name: b.balance for b in overview.partners}
        assert balances == {"Desmond": Decimal("0"), "Bethel": Decimal("100000")}
        assert overview.manager_commission == Decimal("30000")
        assert overview.available_balance == Decimal("50000")

    def test_withdrawal_summary(self, service, actor):
        """Test the withdrawals page header."""
        record_month(service, actor)
        summary = asyncio.run(service.withdrawal_summary("2024-03"))

        assert summary.total_available_balance == Decimal("50000")
        assert summary.withdrawals_this_month == Decimal("250000")
        assert summary.withdrawal_count == 2

    def test_financial_report(self, service, actor):
        """Test the reports page breakdown."""
        record_month(service, actor)
        report = asyncio.run(service.financial_report("2024-03"))

        assert report.net_operating_profit == Decimal("300000")
        assert report.categories[0].amount == Decimal("150000")
        assert len(report.daily) == 4

    def test_empty_month(self, service):
        """Test a month with no records is all zeros."""
        summary = asyncio.run(service.monthly_summary("2030-01"))
        assert summary.net_operating_profit == Decimal("0")
        assert summary.income_count == 0

    def test_lists_newest_first(self, service, actor):
        """Test listings are ordered by date, newest first."""
        record_month(service, actor)
        incomes = asyncio.run(service.list_incomes("2024-03"))
        assert [i.client_name for i in incomes] == ["Bayo", "Ada"]

    def test_bad_month_key_rejected(self, service):
        """Test malformed month keys never reach storage."""
        with pytest.raises(ValidationError):
            asyncio.run(service.monthly_summary("2024-3"))


class TestWrites:
    """Tests for validated writes."""

    def test_invalid_income_not_stored(self, service, actor):
        """Test validation fails before anything is persisted."""
        draft = IncomeDraft(
            date=date(2024, 3, 1),
            client_name="Ada",
            brought_by="Bethel",
            primary_amount=Decimal("0"),
        )
        with pytest.raises(ValidationError):
            asyncio.run(service.record_income(draft, actor))
        assert asyncio.run(service.list_incomes("2024-03")) == []

    def test_unknown_recipient_rejected(self, service, actor):
        """Test withdrawals must go to a configured partner."""
        draft = service.withdrawal_draft_from_form({
            "date": "2024-03-01", "amount": "100", "recipient": "Daniel",
        })
        with pytest.raises(ValidationError, match="not a partner"):
            asyncio.run(service.record_withdrawal(draft, actor))

    def test_update_and_delete(self, service, actor):
        """Test update returns the new record and delete reports removal."""
        record_month(service, actor)
        expense = asyncio.run(service.list_expenses("2024-03"))[0]

        updated = asyncio.run(
            service.update_expense(expense.id, ExpenseUpdate(amount=Decimal("60000")), actor)
        )
        assert updated.amount == Decimal("60000")
        assert updated.name == expense.name

        assert asyncio.run(service.delete_expense(expense.id, actor)) is True
        assert asyncio.run(service.delete_expense(expense.id, actor)) is False

    def test_update_missing_returns_none(self, service, actor):
        """Test updating an unknown record is a no-op."""
        assert asyncio.run(service.update_income("nope", IncomeUpdate(client_name="X"), actor)) is None

    def test_invalid_update_rejected(self, service, actor):
        """Test updates are validated against the merged record."""
        record_month(service, actor)
        income = asyncio.run(service.list_incomes("2024-03"))[0]
        with pytest.raises(ValidationError):
            asyncio.run(service.update_income(income.id, IncomeUpdate(client_name=""), actor))


class FailingIncomeStorage(InMemoryIncomeStorage):
    async def list_by_month(self, month_key):
        raise PersistenceFailure("backend unavailable")


class TestFailures:
    """Tests that storage failures are not hidden."""

    def test_read_failure_propagates(self):
        """Test a failed read raises instead of showing zeros."""
        service = LedgerService(
            FailingIncomeStorage(),
            InMemoryExpenseStorage(),
            InMemoryWithdrawalStorage(),
            LedgerCalculator(DEFAULT_PARTNERS),
        )
        with pytest.raises(PersistenceFailure):
            asyncio.run(service.monthly_summary("2024-03"))


class TestFactory:
    """Tests for building the service from settings."""

    def test_memory_backend(self, monkeypatch, tmp_path):
        """Test the memory backend needs no Google configuration."""
        from rentbook.config import Settings

        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.delenv("LEDGER_PARTNERS", raising=False)

        service = create_app_components(Settings())

        assert isinstance(service, LedgerService)
        assert service.partners.names == ["Desmond", "Bethel"]
