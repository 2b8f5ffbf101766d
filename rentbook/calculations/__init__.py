"""Calculation package: pure aggregation functions and the ledger calculator."""

from rentbook.calculations.aggregation import (
    find_net_income_drift,
    manager_commission,
    net_income_of,
    net_operating_profit,
    partner_balance,
    partner_share,
    round_currency,
    sum_withdrawals,
    total_available_balance,
    total_caution_fees,
    total_commission,
    total_expenses,
    total_income,
    total_net_income,
)
from rentbook.calculations.engine import LedgerCalculator
from rentbook.calculations.reports import (
    build_financial_report,
    daily_totals,
    expenses_by_category,
)

__all__ = [
    # Aggregation
    "find_net_income_drift",
    "manager_commission",
    "net_income_of",
    "net_operating_profit",
    "partner_balance",
    "partner_share",
    "round_currency",
    "sum_withdrawals",
    "total_available_balance",
    "total_caution_fees",
    "total_commission",
    "total_expenses",
    "total_income",
    "total_net_income",
    # Calculator
    "LedgerCalculator",
    # Reports
    "build_financial_report",
    "daily_totals",
    "expenses_by_category",
]
