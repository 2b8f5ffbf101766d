"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the hosted backend (Google Sheets) out of the calculation code
2. Use in-memory storage for testing
3. Swap the backend later without touching the service layer

The interface is intentionally simple - we're not building a full ORM.
Just list, get, create, update and delete per record type, plus the
withdrawal totals the partner pages need.

Not-found is never an exception here: update returns None and delete
returns False. Every other backend problem raises PersistenceFailure.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from typing import Generic, Optional, TypeVar
from uuid import uuid4

from pydantic import BaseModel

from rentbook.models.records import (
    Actor,
    Expense,
    ExpenseDraft,
    ExpenseUpdate,
    Income,
    IncomeDraft,
    IncomeUpdate,
    Withdrawal,
    WithdrawalDraft,
    WithdrawalUpdate,
)
from rentbook.validation.validator import check_month_key


RecordT = TypeVar("RecordT", bound=BaseModel)
DraftT = TypeVar("DraftT", bound=BaseModel)
UpdateT = TypeVar("UpdateT", bound=BaseModel)


class RecordStorageInterface(ABC, Generic[RecordT, DraftT, UpdateT]):
    """
    Abstract interface for one logical table of the ledger.

    Any storage implementation (Google Sheets, in-memory, ...)
    must implement these methods.
    """

    @abstractmethod
    async def list_by_month(self, month_key: str) -> list[RecordT]:
        """
        List records whose month key equals `month_key`.

        Order is unspecified.
        """
        pass

    @abstractmethod
    async def list_all(self) -> list[RecordT]:
        """List records across all months."""
        pass

    @abstractmethod
    async def get_by_id(self, record_id: str) -> Optional[RecordT]:
        """
        Retrieve a record by its id.

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, draft: DraftT, actor: Actor) -> RecordT:
        """
        Persist a new record.

        Assigns the id, timestamps, actor stamps and derived fields.

        Args:
            draft: The submitted record
            actor: Who is writing

        Returns:
            The stored record

        Raises:
            ValidationError: If an explicit month key disagrees with the date
            PersistenceFailure: If the backend rejects the write
        """
        pass

    @abstractmethod
    async def update(
        self,
        record_id: str,
        changes: UpdateT,
        actor: Actor,
    ) -> Optional[RecordT]:
        """
        Apply a partial update.

        Returns:
            The updated record, or None if no record has that id

        Raises:
            PersistenceFailure: If the backend rejects the write
        """
        pass

    @abstractmethod
    async def delete(self, record_id: str, actor: Actor) -> bool:
        """
        Delete a record.

        Returns:
            True if a record was removed, False if none had that id
        """
        pass


class IncomeStorageInterface(RecordStorageInterface[Income, IncomeDraft, IncomeUpdate]):
    """Storage for income entries."""


class ExpenseStorageInterface(RecordStorageInterface[Expense, ExpenseDraft, ExpenseUpdate]):
    """Storage for expenses."""


class WithdrawalStorageInterface(
    RecordStorageInterface[Withdrawal, WithdrawalDraft, WithdrawalUpdate]
):
    """
    Storage for partner withdrawals.

    Adds the totals used by the partner balance and withdrawal pages.
    """

    @abstractmethod
    async def total_withdrawals(self) -> Decimal:
        """Sum of every withdrawal ever made."""
        pass

    @abstractmethod
    async def total_withdrawals_by_month(self, month_key: str) -> Decimal:
        """Sum of withdrawals in one month."""
        pass

    @abstractmethod
    async def total_withdrawals_by_partner(self, partner_name: str) -> Decimal:
        """
        Sum of withdrawals made by one partner, all time.

        Matches `recipient` by exact string equality.
        """
        pass


# Storage-specific exceptions
class PersistenceFailure(Exception):
    """Base exception for storage errors."""
    pass


class StorageConnectionError(PersistenceFailure):
    """Failed to authenticate or to open the spreadsheet."""
    pass


class MalformedRowsError(PersistenceFailure):
    """Stored rows could not be read, so totals over them would be wrong."""

    def __init__(self, table: str, rows: list[str]):
        self.table = table
        self.rows = rows
        super().__init__(f"Malformed {table} rows: {', '.join(rows)}")


# -------------------------------------------------------------------------
# Helpers shared by implementations
# -------------------------------------------------------------------------

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def build_record(model: type, draft: BaseModel, actor: Actor):
    """
    Turn a draft into a stored record with a fresh id and stamps.

    Raises:
        ValidationError: If an explicit month key disagrees with the date
    """
    check_month_key(draft)
    return model.from_draft(draft, record_id=str(uuid4()), actor=actor, now=utc_now())


def apply_changes(current: BaseModel, changes: BaseModel, actor: Actor):
    """Apply a partial update, recomputing derived fields."""
    return current.with_changes(changes, actor=actor, now=utc_now())
