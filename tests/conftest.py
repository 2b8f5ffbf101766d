"""Shared fixtures: record builders and an in-memory ledger."""

import itertools
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from rentbook.calculations import LedgerCalculator
from rentbook.ledger import LedgerService
from rentbook.models import (
    DEFAULT_PARTNERS,
    Actor,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    Income,
    IncomeDraft,
    Withdrawal,
    WithdrawalDraft,
)
from rentbook.services.storage import (
    InMemoryExpenseStorage,
    InMemoryIncomeStorage,
    InMemoryWithdrawalStorage,
)

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
ACTOR = Actor(id="user-1", email="desmond@example.com")


@pytest.fixture
def actor():
    return ACTOR


@pytest.fixture
def make_income():
    ids = itertools.count(1)

    def _make(primary, caution=None, commission=0, on=date(2024, 3, 10), **fields):
        draft = IncomeDraft(
            date=on,
            client_name=fields.pop("client_name", "Ada Obi"),
            brought_by=fields.pop("brought_by", "Bethel"),
            primary_amount=Decimal(str(primary)),
            caution_fee=Decimal(str(caution)) if caution is not None else None,
            commission=Decimal(str(commission)),
        )
        return Income.from_draft(
            draft,
            record_id=fields.pop("record_id", f"inc-{next(ids)}"),
            actor=ACTOR,
            now=NOW,
        )

    return _make


@pytest.fixture
def make_expense():
    ids = itertools.count(1)

    def _make(amount, category=ExpenseCategory.UTILITIES, on=date(2024, 3, 10), name="Power bill"):
        draft = ExpenseDraft(date=on, name=name, category=category, amount=Decimal(str(amount)))
        return Expense.from_draft(draft, record_id=f"exp-{next(ids)}", actor=ACTOR, now=NOW)

    return _make


@pytest.fixture
def make_withdrawal():
    ids = itertools.count(1)

    def _make(amount, recipient="Desmond", on=date(2024, 3, 20)):
        draft = WithdrawalDraft(date=on, amount=Decimal(str(amount)), recipient=recipient)
        return Withdrawal.from_draft(draft, record_id=f"wd-{next(ids)}", actor=ACTOR, now=NOW)

    return _make


@pytest.fixture
def service():
    """Ledger service over empty in-memory storage, default 50/50 partners."""
    return LedgerService(
        InMemoryIncomeStorage(),
        InMemoryExpenseStorage(),
        InMemoryWithdrawalStorage(),
        LedgerCalculator(DEFAULT_PARTNERS),
    )
