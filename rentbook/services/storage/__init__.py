"""
Storage Services Package

Provides abstract interfaces and concrete implementations for ledger storage.
Google Sheets is the hosted backend; the in-memory gateways serve tests and
local runs.
"""

from rentbook.services.storage.interface import (
    ExpenseStorageInterface,
    IncomeStorageInterface,
    MalformedRowsError,
    PersistenceFailure,
    RecordStorageInterface,
    StorageConnectionError,
    WithdrawalStorageInterface,
)
from rentbook.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
    GoogleSheetsIncomeStorage,
    GoogleSheetsWithdrawalStorage,
)
from rentbook.services.storage.memory import (
    InMemoryExpenseStorage,
    InMemoryIncomeStorage,
    InMemoryWithdrawalStorage,
)
from rentbook.services.storage.mapping import (
    SCHEMA_VERSION,
    MappingError,
    RecordMapper,
    mapper_for,
)

__all__ = [
    # Interfaces
    "ExpenseStorageInterface",
    "IncomeStorageInterface",
    "RecordStorageInterface",
    "WithdrawalStorageInterface",
    # Exceptions
    "MalformedRowsError",
    "MappingError",
    "PersistenceFailure",
    "StorageConnectionError",
    # Google Sheets implementation
    "GoogleSheetsClient",
    "GoogleSheetsExpenseStorage",
    "GoogleSheetsIncomeStorage",
    "GoogleSheetsWithdrawalStorage",
    # In-memory implementation
    "InMemoryExpenseStorage",
    "InMemoryIncomeStorage",
    "InMemoryWithdrawalStorage",
    # Mapping
    "SCHEMA_VERSION",
    "RecordMapper",
    "mapper_for",
]
