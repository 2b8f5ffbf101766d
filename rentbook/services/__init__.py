"""Services package."""

from rentbook.services.storage import (
    ExpenseStorageInterface,
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
    GoogleSheetsIncomeStorage,
    GoogleSheetsWithdrawalStorage,
    InMemoryExpenseStorage,
    InMemoryIncomeStorage,
    InMemoryWithdrawalStorage,
    IncomeStorageInterface,
    PersistenceFailure,
    StorageConnectionError,
    WithdrawalStorageInterface,
)

__all__ = [
    "ExpenseStorageInterface",
    "GoogleSheetsClient",
    "GoogleSheetsExpenseStorage",
    "GoogleSheetsIncomeStorage",
    "GoogleSheetsWithdrawalStorage",
    "InMemoryExpenseStorage",
    "InMemoryIncomeStorage",
    "InMemoryWithdrawalStorage",
    "IncomeStorageInterface",
    "PersistenceFailure",
    "StorageConnectionError",
    "WithdrawalStorageInterface",
]
