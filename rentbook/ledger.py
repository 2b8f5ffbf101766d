"""
Ledger Service

This module ties together storage, validation and calculation, and is the
single entry point the presentation layer calls.

Flows:
1. Write (form values -> draft -> validate -> persist -> log)
2. Read (fetch records concurrently -> calculate -> summary model)

DESIGN DECISION: The service enforces the boundaries:
- Nothing reaches storage without passing validation first
- Storage failures propagate; a failed read is never shown as zero
- Every write is logged with the acting user
"""

import asyncio
from typing import Any, Callable, Optional

from rentbook.calculations import (
    LedgerCalculator,
    build_financial_report,
    find_net_income_drift,
    net_operating_profit,
)
from rentbook.config import Settings, get_settings
from rentbook.logs import configure_logging, get_logger
from rentbook.models.partner import PartnerConfig
from rentbook.models.records import (
    Actor,
    Expense,
    ExpenseDraft,
    ExpenseUpdate,
    Income,
    IncomeDraft,
    IncomeUpdate,
    RecordKind,
    Withdrawal,
    WithdrawalDraft,
    WithdrawalUpdate,
)
from rentbook.models.summary import (
    FinancialReport,
    MonthlySummary,
    PartnerOverview,
    WithdrawalSummary,
)
from rentbook.periods import is_month_key
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
    RecordStorageInterface,
    WithdrawalStorageInterface,
)
from rentbook.validation import RecordValidator, ValidationError, parse_draft


class LedgerService:
    """
    Records income, expenses and withdrawals, and answers the screen queries.

    The three gateways are injected; the calculator carries the partner
    configuration. Independent reads run concurrently with asyncio.gather.
    """

    def __init__(
        self,
        incomes: IncomeStorageInterface,
        expenses: ExpenseStorageInterface,
        withdrawals: WithdrawalStorageInterface,
        calculator: LedgerCalculator,
        validator: Optional[RecordValidator] = None,
    ):
        self._incomes = incomes
        self._expenses = expenses
        self._withdrawals = withdrawals
        self._calculator = calculator
        self._validator = validator or RecordValidator(calculator.partners)
        self._logger = get_logger(__name__)

    @property
    def partners(self) -> PartnerConfig:
        return self._calculator.partners

    # =========================================================================
    # Form entry
    # =========================================================================

    def income_draft_from_form(self, values: dict[str, Any]) -> IncomeDraft:
        """Parse submitted income form values."""
        return parse_draft(IncomeDraft, values)

    def expense_draft_from_form(self, values: dict[str, Any]) -> ExpenseDraft:
        """Parse submitted expense form values."""
        return parse_draft(ExpenseDraft, values)

    def withdrawal_draft_from_form(self, values: dict[str, Any]) -> WithdrawalDraft:
        """Parse submitted withdrawal form values."""
        return parse_draft(WithdrawalDraft, values)

    # =========================================================================
    # Writes
    # =========================================================================

    async def _create(
        self,
        kind: RecordKind,
        store: RecordStorageInterface,
        draft,
        actor: Actor,
        validate: Callable,
    ):
        warnings = validate(draft)
        record = await store.create(draft, actor)
        self._logger.info(
            "record_created",
            kind=kind.value,
            record_id=record.id,
            month_key=record.month_key,
            actor_id=actor.id,
            warnings=[w.message for w in warnings],
        )
        return record

    async def _update(
        self,
        kind: RecordKind,
        store: RecordStorageInterface,
        record_id: str,
        changes,
        actor: Actor,
    ):
        current = await store.get_by_id(record_id)
        if current is None:
            self._logger.info(
                "record_not_found",
                kind=kind.value,
                record_id=record_id,
                action="update",
                actor_id=actor.id,
            )
            return None

        warnings = self._validator.validate_update(current, changes)
        record = await store.update(record_id, changes, actor)
        if record is None:
            # Removed between the read and the write
            return None

        self._logger.info(
            "record_updated",
            kind=kind.value,
            record_id=record_id,
            month_key=record.month_key,
            fields=sorted(changes.model_dump(exclude_unset=True)),
            actor_id=actor.id,
            warnings=[w.message for w in warnings],
        )
        return record

    async def _delete(
        self,
        kind: RecordKind,
        store: RecordStorageInterface,
        record_id: str,
        actor: Actor,
    ) -> bool:
        removed = await store.delete(record_id, actor)
        self._logger.info(
            "record_deleted" if removed else "record_not_found",
            kind=kind.value,
            record_id=record_id,
            action="delete",
            actor_id=actor.id,
        )
        return removed

    async def record_income(self, draft: IncomeDraft, actor: Actor) -> Income:
        """
        Validate and store a new income entry.

        Raises:
            ValidationError: Before any storage call, if the draft is invalid
            PersistenceFailure: If storage rejects the write
        """
        return await self._create(
            RecordKind.INCOME, self._incomes, draft, actor, self._validator.validate_income
        )

    async def update_income(
        self,
        record_id: str,
        changes: IncomeUpdate,
        actor: Actor,
    ) -> Optional[Income]:
        """Apply a partial change; None if the entry does not exist."""
        return await self._update(RecordKind.INCOME, self._incomes, record_id, changes, actor)

    async def delete_income(self, record_id: str, actor: Actor) -> bool:
        return await self._delete(RecordKind.INCOME, self._incomes, record_id, actor)

    async def record_expense(self, draft: ExpenseDraft, actor: Actor) -> Expense:
        """
        Validate and store a new expense.

        Raises:
            ValidationError: Before any storage call, if the draft is invalid
            PersistenceFailure: If storage rejects the write
        """
        return await self._create(
            RecordKind.EXPENSE, self._expenses, draft, actor, self._validator.validate_expense
        )

    async def update_expense(
        self,
        record_id: str,
        changes: ExpenseUpdate,
        actor: Actor,
    ) -> Optional[Expense]:
        return await self._update(RecordKind.EXPENSE, self._expenses, record_id, changes, actor)

    async def delete_expense(self, record_id: str, actor: Actor) -> bool:
        return await self._delete(RecordKind.EXPENSE, self._expenses, record_id, actor)

    async def record_withdrawal(self, draft: WithdrawalDraft, actor: Actor) -> Withdrawal:
        """
        Validate and store a partner withdrawal.

        The recipient must be one of the configured partners. The amount is
        not checked against the partner's balance.
        """
        return await self._create(
            RecordKind.WITHDRAWAL,
            self._withdrawals,
            draft,
            actor,
            self._validator.validate_withdrawal,
        )

    async def update_withdrawal(
        self,
        record_id: str,
        changes: WithdrawalUpdate,
        actor: Actor,
    ) -> Optional[Withdrawal]:
        return await self._update(
            RecordKind.WITHDRAWAL, self._withdrawals, record_id, changes, actor
        )

    async def delete_withdrawal(self, record_id: str, actor: Actor) -> bool:
        return await self._delete(RecordKind.WITHDRAWAL, self._withdrawals, record_id, actor)

    # =========================================================================
    # Reads
    # =========================================================================

    @staticmethod
    def _check_month_key(month_key: str) -> None:
        if not is_month_key(month_key):
            raise ValidationError.single(
                "month_key", "invalid_format", f"Month key {month_key!r} is not YYYY-MM"
            )

    def _warn_on_drift(self, incomes: list[Income]) -> None:
        drifted = find_net_income_drift(incomes)
        if drifted:
            self._logger.warning(
                "net_income_drift",
                count=len(drifted),
                record_ids=drifted,
            )

    async def list_incomes(self, month_key: str) -> list[Income]:
        """Income entries for a month, newest first."""
        self._check_month_key(month_key)
        incomes = await self._incomes.list_by_month(month_key)
        return sorted(incomes, key=lambda r: (r.date, r.created_at), reverse=True)

    async def list_expenses(self, month_key: str) -> list[Expense]:
        """Expenses for a month, newest first."""
        self._check_month_key(month_key)
        expenses = await self._expenses.list_by_month(month_key)
        return sorted(expenses, key=lambda r: (r.date, r.created_at), reverse=True)

    async def list_withdrawals(self, month_key: str) -> list[Withdrawal]:
        """Withdrawals for a month, newest first."""
        self._check_month_key(month_key)
        withdrawals = await self._withdrawals.list_by_month(month_key)
        return sorted(withdrawals, key=lambda r: (r.date, r.created_at), reverse=True)

    async def monthly_summary(self, month_key: str) -> MonthlySummary:
        """Dashboard figures for one month."""
        self._check_month_key(month_key)
        incomes, expenses = await asyncio.gather(
            self._incomes.list_by_month(month_key),
            self._expenses.list_by_month(month_key),
        )
        self._warn_on_drift(incomes)
        return self._calculator.monthly_summary(month_key, incomes, expenses)

    async def partner_overview(self, month_key: str) -> PartnerOverview:
        """
        Partner balances page.

        Profit and balances are all-time; the manager commission is for
        `month_key` only.
        """
        self._check_month_key(month_key)
        incomes, expenses, withdrawals = await asyncio.gather(
            self._incomes.list_all(),
            self._expenses.list_all(),
            self._withdrawals.list_all(),
        )
        self._warn_on_drift(incomes)
        return self._calculator.partner_overview(month_key, incomes, expenses, withdrawals)

    async def withdrawal_summary(self, month_key: str) -> WithdrawalSummary:
        """Withdrawals page header: all-time available balance and this month's total."""
        self._check_month_key(month_key)
        incomes, expenses, all_withdrawals, month_withdrawals = await asyncio.gather(
            self._incomes.list_all(),
            self._expenses.list_all(),
            self._withdrawals.total_withdrawals(),
            self._withdrawals.list_by_month(month_key),
        )
        return self._calculator.withdrawal_summary(
            month_key,
            net_operating_profit(incomes, expenses),
            all_withdrawals,
            month_withdrawals,
        )

    async def financial_report(self, month_key: str) -> FinancialReport:
        """Reports page: daily totals and the expense breakdown by category."""
        self._check_month_key(month_key)
        incomes, expenses = await asyncio.gather(
            self._incomes.list_by_month(month_key),
            self._expenses.list_by_month(month_key),
        )
        return build_financial_report(month_key, incomes, expenses)


def create_app_components(settings: Optional[Settings] = None) -> LedgerService:
    """
    Factory function to build the service from configuration.

    Args:
        settings: Settings to use; defaults to the cached environment settings

    Returns:
        A LedgerService wired to the configured storage backend
    """
    settings = settings or get_settings()
    app = settings.app
    configure_logging(app.log_level, app.log_format)

    calculator = LedgerCalculator(settings.ledger.partner_config)

    if app.storage_backend == "memory":
        incomes = InMemoryIncomeStorage()
        expenses = InMemoryExpenseStorage()
        withdrawals = InMemoryWithdrawalStorage()
    else:
        client = GoogleSheetsClient(settings.google_sheets)
        incomes = GoogleSheetsIncomeStorage(client)
        expenses = GoogleSheetsExpenseStorage(client)
        withdrawals = GoogleSheetsWithdrawalStorage(client)

    get_logger(__name__).info(
        "ledger_started",
        environment=app.app_environment,
        storage_backend=app.storage_backend,
        partners=calculator.partners.names,
    )
    return LedgerService(incomes, expenses, withdrawals, calculator)
