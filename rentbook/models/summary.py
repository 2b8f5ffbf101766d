"""
Derived Summary Models

Read-only views produced by the calculation engine for the dashboard,
partner, withdrawal and report screens. Nothing here is persisted.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from rentbook.models.partner import PartnerBalance
from rentbook.models.records import ExpenseCategory


class MonthlySummary(BaseModel):
    """Dashboard figures for one month."""

    month_key: str
    income_count: int = Field(ge=0)
    expense_count: int = Field(ge=0)

    total_income: Decimal = Field(..., description="Sum of primary amounts")
    total_commission: Decimal
    total_caution_fees: Decimal
    total_net_income: Decimal
    total_expenses: Decimal
    net_operating_profit: Decimal = Field(..., ge=0)

    # Partner name -> share of this month's profit
    partner_shares: dict[str, Decimal] = Field(default_factory=dict)


class PartnerOverview(BaseModel):
    """
    Partner balances screen.

    Profit and withdrawals are all-time figures; manager commission is for
    the selected month only.
    """

    month_key: str
    net_operating_profit: Decimal = Field(..., ge=0)
    total_withdrawals: Decimal
    available_balance: Decimal = Field(..., ge=0)
    manager_commission: Decimal
    partners: list[PartnerBalance] = Field(default_factory=list)


class WithdrawalSummary(BaseModel):
    """Withdrawals screen header figures."""

    month_key: str
    total_available_balance: Decimal = Field(..., ge=0)
    withdrawals_this_month: Decimal
    withdrawal_count: int = Field(ge=0)


class DailyTotals(BaseModel):
    """Net income and expenses booked on one day."""

    day: dt.date
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")


class CategoryTotal(BaseModel):
    """Expenses booked under one category."""

    category: ExpenseCategory
    amount: Decimal
    count: int = Field(ge=0)


class FinancialReport(BaseModel):
    """Reports screen: monthly totals plus chart breakdowns."""

    month_key: str
    total_net_income: Decimal
    total_expenses: Decimal
    net_operating_profit: Decimal = Field(..., ge=0)

    # Per-entry statistics; zero when the month has no entries
    income_count: int = Field(default=0, ge=0)
    expense_count: int = Field(default=0, ge=0)
    highest_income: Decimal = Decimal("0")
    average_income: Decimal = Decimal("0")
    highest_expense: Decimal = Decimal("0")
    average_expense: Decimal = Decimal("0")

    daily: list[DailyTotals] = Field(default_factory=list)
    categories: list[CategoryTotal] = Field(default_factory=list)
