"""
In-Memory Storage Implementation

Dict-backed gateways with the same semantics as the Google Sheets ones.
Used by the test suite and by the "memory" storage backend for local runs.
Nothing is persisted across processes.
"""

from decimal import Decimal
from typing import Optional

from rentbook.calculations.aggregation import sum_withdrawals
from rentbook.models.records import (
    Actor,
    Expense,
    Income,
    LedgerRecord,
    Withdrawal,
)
from rentbook.services.storage.interface import (
    DraftT,
    ExpenseStorageInterface,
    IncomeStorageInterface,
    RecordStorageInterface,
    RecordT,
    UpdateT,
    WithdrawalStorageInterface,
    apply_changes,
    build_record,
)


class InMemoryRecordStorage(RecordStorageInterface[RecordT, DraftT, UpdateT]):
    """Shared dict-backed implementation, keyed by record id."""

    model: type[LedgerRecord]

    def __init__(self):
        self._records: dict[str, RecordT] = {}

    async def list_by_month(self, month_key: str) -> list[RecordT]:
        return [r for r in self._records.values() if r.month_key == month_key]

    async def list_all(self) -> list[RecordT]:
        return list(self._records.values())

    async def get_by_id(self, record_id: str) -> Optional[RecordT]:
        return self._records.get(record_id)

    async def create(self, draft: DraftT, actor: Actor) -> RecordT:
        record = build_record(self.model, draft, actor)
        self._records[record.id] = record
        return record

    async def update(self, record_id: str, changes: UpdateT, actor: Actor) -> Optional[RecordT]:
        current = self._records.get(record_id)
        if current is None:
            return None
        updated = apply_changes(current, changes, actor)
        self._records[record_id] = updated
        return updated

    async def delete(self, record_id: str, actor: Actor) -> bool:
        return self._records.pop(record_id, None) is not None


class InMemoryIncomeStorage(InMemoryRecordStorage, IncomeStorageInterface):
    model = Income


class InMemoryExpenseStorage(InMemoryRecordStorage, ExpenseStorageInterface):
    model = Expense


class InMemoryWithdrawalStorage(InMemoryRecordStorage, WithdrawalStorageInterface):
    model = Withdrawal

    async def total_withdrawals(self) -> Decimal:
        return sum_withdrawals(await self.list_all())

    async def total_withdrawals_by_month(self, month_key: str) -> Decimal:
        return sum_withdrawals(await self.list_by_month(month_key))

    async def total_withdrawals_by_partner(self, partner_name: str) -> Decimal:
        return sum_withdrawals(await self.list_all(), recipient=partner_name)
