"""
Data Models Package

This package contains all Pydantic models used in Rentbook.
All data flowing through the system must conform to these schemas.
"""

from rentbook.models.records import (
    Actor,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    ExpenseUpdate,
    Income,
    IncomeDraft,
    IncomeUpdate,
    LedgerRecord,
    RecordKind,
    Withdrawal,
    WithdrawalDraft,
    WithdrawalUpdate,
)
from rentbook.models.partner import (
    DEFAULT_PARTNERS,
    Partner,
    PartnerBalance,
    PartnerConfig,
)
from rentbook.models.summary import (
    CategoryTotal,
    DailyTotals,
    FinancialReport,
    MonthlySummary,
    PartnerOverview,
    WithdrawalSummary,
)

__all__ = [
    # Records
    "Actor",
    "Expense",
    "ExpenseCategory",
    "ExpenseDraft",
    "ExpenseUpdate",
    "Income",
    "IncomeDraft",
    "IncomeUpdate",
    "LedgerRecord",
    "RecordKind",
    "Withdrawal",
    "WithdrawalDraft",
    "WithdrawalUpdate",
    # Partners
    "DEFAULT_PARTNERS",
    "Partner",
    "PartnerBalance",
    "PartnerConfig",
    # Summaries
    "CategoryTotal",
    "DailyTotals",
    "FinancialReport",
    "MonthlySummary",
    "PartnerOverview",
    "WithdrawalSummary",
]
