"""Chart breakdowns for the reports screen."""

from collections.abc import Iterable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from rentbook.calculations.aggregation import (
    ZERO,
    net_income_of,
    net_operating_profit,
    total_expenses,
    total_net_income,
)
from rentbook.models.records import Expense, ExpenseCategory, Income
from rentbook.models.summary import CategoryTotal, DailyTotals, FinancialReport

CENT = Decimal("0.01")


def daily_totals(
    incomes: Iterable[Income],
    expenses: Iterable[Expense],
) -> list[DailyTotals]:
    """Net income vs expenses per day, oldest day first."""
    days: dict[date, DailyTotals] = {}

    for income in incomes:
        totals = days.setdefault(income.date, DailyTotals(day=income.date))
        totals.income += net_income_of(income)

    for expense in expenses:
        totals = days.setdefault(expense.date, DailyTotals(day=expense.date))
        totals.expense += expense.amount

    return [days[day] for day in sorted(days)]


def expenses_by_category(expenses: Iterable[Expense]) -> list[CategoryTotal]:
    """Expense totals per category, largest first."""
    amounts: dict[ExpenseCategory, Decimal] = {}
    counts: dict[ExpenseCategory, int] = {}

    for expense in expenses:
        amounts[expense.category] = amounts.get(expense.category, ZERO) + expense.amount
        counts[expense.category] = counts.get(expense.category, 0) + 1

    ordered = sorted(amounts.items(), key=lambda item: (-item[1], item[0].value))
    return [
        CategoryTotal(category=category, amount=amount, count=counts[category])
        for category, amount in ordered
    ]


def _highest(amounts: list[Decimal]) -> Decimal:
    return max(amounts, default=ZERO)


def _average(amounts: list[Decimal]) -> Decimal:
    """Mean rounded to the cent; zero for no amounts."""
    if not amounts:
        return ZERO
    return (sum(amounts, ZERO) / len(amounts)).quantize(CENT, rounding=ROUND_HALF_UP)


def build_financial_report(
    month_key: str,
    incomes: list[Income],
    expenses: list[Expense],
) -> FinancialReport:
    """Assemble the full report for one month."""
    net_incomes = [net_income_of(income) for income in incomes]
    amounts = [expense.amount for expense in expenses]
    return FinancialReport(
        month_key=month_key,
        total_net_income=total_net_income(incomes),
        total_expenses=total_expenses(expenses),
        net_operating_profit=net_operating_profit(incomes, expenses),
        income_count=len(net_incomes),
        expense_count=len(amounts),
        highest_income=_highest(net_incomes),
        average_income=_average(net_incomes),
        highest_expense=_highest(amounts),
        average_expense=_average(amounts),
        daily=daily_totals(incomes, expenses),
        categories=expenses_by_category(expenses),
    )
