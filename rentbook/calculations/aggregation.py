"""
Financial Aggregation

DESIGN DECISION: Every figure shown on a screen is computed here, from
plain lists of records, with no storage access. The functions are pure:
same input, same output, no I/O, no exceptions for well-formed input.

All arithmetic uses Decimal so that many small transactions never drift
the way floating point sums do. Differences may go negative before
clamping; every clamp is explicit.

Formulas:
    net income            = primary amount + caution fee - commission
    net operating profit  = max(0, sum(net income) - sum(expenses))
    partner share         = profit * share% / 100
    partner balance       = max(0, partner share - partner withdrawals)
    available balance     = max(0, profit - all withdrawals)
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from rentbook.models.records import Expense, Income, Withdrawal


ZERO = Decimal("0")
WHOLE_UNIT = Decimal("1")


def _clamp(value: Decimal) -> Decimal:
    return value if value > ZERO else ZERO


def net_income_of(income: Income) -> Decimal:
    """
    Recompute net income from the record's inputs.

    The stored net_income is ignored on purpose: rows written under an
    older formula must not leak into the totals.
    """
    return income.primary_amount + (income.caution_fee or ZERO) - income.commission


def total_income(incomes: Iterable[Income]) -> Decimal:
    """Sum of primary amounts (the dashboard "Total Income")."""
    return sum((income.primary_amount for income in incomes), ZERO)


def total_commission(incomes: Iterable[Income]) -> Decimal:
    """Sum of commission owed to the manager."""
    return sum((income.commission for income in incomes), ZERO)


def total_caution_fees(incomes: Iterable[Income]) -> Decimal:
    """Sum of refundable caution fees."""
    return sum((income.caution_fee or ZERO for income in incomes), ZERO)


def total_net_income(incomes: Iterable[Income]) -> Decimal:
    """Sum of recomputed net income."""
    return sum((net_income_of(income) for income in incomes), ZERO)


def total_expenses(expenses: Iterable[Expense]) -> Decimal:
    """Sum of expense amounts."""
    return sum((expense.amount for expense in expenses), ZERO)


def net_operating_profit(
    incomes: Iterable[Income],
    expenses: Iterable[Expense],
) -> Decimal:
    """Total net income minus total expenses, never below zero."""
    return _clamp(total_net_income(incomes) - total_expenses(expenses))


def manager_commission(incomes: Iterable[Income], month_key: str) -> Decimal:
    """
    Commission owed to the manager for one month.

    The manager is not a partner, so this is independent of partner shares.
    """
    return sum(
        (income.commission for income in incomes if income.month_key == month_key),
        ZERO,
    )


def partner_share(profit: Decimal, share_percentage: Decimal) -> Decimal:
    """A partner's portion of net operating profit."""
    return profit * Decimal(share_percentage) / Decimal("100")


def partner_balance(
    profit: Decimal,
    share_percentage: Decimal,
    partner_withdrawals: Decimal,
) -> Decimal:
    """
    What a partner may still withdraw.

    A partner who has withdrawn more than their share shows zero, never a
    negative balance.
    """
    return _clamp(partner_share(profit, share_percentage) - partner_withdrawals)


def total_available_balance(profit: Decimal, all_withdrawals: Decimal) -> Decimal:
    """Profit not yet withdrawn by anyone, never below zero."""
    return _clamp(profit - all_withdrawals)


def sum_withdrawals(
    withdrawals: Iterable[Withdrawal],
    recipient: Optional[str] = None,
) -> Decimal:
    """Sum of withdrawal amounts, optionally for one recipient (exact match)."""
    return sum(
        (
            w.amount
            for w in withdrawals
            if recipient is None or w.recipient == recipient
        ),
        ZERO,
    )


def find_net_income_drift(incomes: Iterable[Income]) -> list[str]:
    """Ids of incomes whose stored net_income disagrees with its inputs."""
    return [
        income.id
        for income in incomes
        if income.net_income != net_income_of(income)
    ]


def round_currency(amount: Decimal) -> Decimal:
    """Round to whole currency units for zero-decimal display."""
    return Decimal(amount).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)
