"""
Core Record Models for Rentbook

These models define the canonical schema for every record kept in the
ledger. There is exactly one shape per record type; storage-specific column
names live in the mapping layer and never leak past it.

Three shapes exist for each record type:
1. Draft   - what a form submits (no id, no timestamps, no derived values)
2. Record  - what storage returns (id, timestamps, month key, derived values)
3. Update  - a partial change (only explicitly set fields are applied)

DESIGN DECISION: Derived fields (month_key, net_income) are always computed
here when a record is created or changed. Callers cannot supply them.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field

from rentbook.periods import month_key_of


Amount = Annotated[Decimal, Field(ge=0, decimal_places=2)]

# Stored rows may carry more precision than a form allows (hand edits, formulas)
StoredAmount = Annotated[Decimal, Field(ge=0)]


# =============================================================================
# ENUMS
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Fixed set of expense categories.

    Values are the labels shown to the partners and stored verbatim.
    """
    UTILITIES = "Utilities"
    MAINTENANCE = "Maintenance"
    REPAIRS = "Repairs"
    SUPPLIES = "Supplies"
    STAFF_SALARY = "Staff Salary"
    RENT = "Rent"
    TAXES = "Taxes"
    INSURANCE = "Insurance"
    MARKETING = "Marketing"
    OTHER = "Other"


class RecordKind(str, Enum):
    """Logical tables in the ledger."""
    INCOME = "income"
    EXPENSE = "expense"
    WITHDRAWAL = "withdrawal"


# =============================================================================
# ACTOR
# =============================================================================

class Actor(BaseModel):
    """
    The authenticated identity performing a write.

    Only used to stamp created_by / updated_by. The ledger is shared, so the
    actor never restricts which records can be read or changed.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(..., min_length=1, description="Authenticated user id")
    email: Optional[str] = Field(default=None, description="User email, if known")


# =============================================================================
# BASE RECORD
# =============================================================================

class LedgerRecord(BaseModel):
    """
    Fields shared by every stored record.

    Subclasses add their own fields and may extend _derive() to compute
    additional derived values.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1, description="Record id assigned by storage")
    month_key: str = Field(
        ...,
        pattern=r"^\d{4}-(0[1-9]|1[0-2])$",
        description="YYYY-MM bucket of the record date",
    )
    created_at: dt.datetime = Field(..., description="When the record was created (UTC)")
    updated_at: dt.datetime = Field(..., description="Last update timestamp (UTC)")
    created_by: Optional[str] = Field(default=None, description="Actor id of the creator")
    updated_by: Optional[str] = Field(default=None, description="Actor id of the last editor")

    # Fields an update may clear by setting them to None
    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    @classmethod
    def _derive(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Recompute derived fields on a raw field dict."""
        data["month_key"] = month_key_of(data["date"])
        return data

    @classmethod
    def from_draft(
        cls,
        draft: BaseModel,
        *,
        record_id: str,
        actor: Actor,
        now: dt.datetime,
    ):
        """Build a stored record from a submitted draft."""
        data = draft.model_dump(exclude={"month_key"})
        data.update(
            id=record_id,
            created_at=now,
            updated_at=now,
            created_by=actor.id,
            updated_by=actor.id,
        )
        return cls.model_validate(cls._derive(data))

    def with_changes(
        self,
        changes: BaseModel,
        *,
        actor: Actor,
        now: dt.datetime,
    ):
        """
        Apply a partial update and return the new record.

        Only fields explicitly set on `changes` are applied. id, created_at
        and created_by are never touched. None on a field that cannot be
        cleared means "leave unchanged".
        """
        data = self.model_dump()
        applied = {
            name: value
            for name, value in changes.model_dump(exclude_unset=True).items()
            if value is not None or name in self.nullable_fields
        }
        for protected in ("id", "created_at", "created_by", "month_key", "net_income"):
            applied.pop(protected, None)
        data.update(applied)
        data.update(updated_at=now, updated_by=actor.id)
        return type(self).model_validate(type(self)._derive(data))


# =============================================================================
# INCOME
# =============================================================================

class IncomeDraft(BaseModel):
    """An income entry as submitted from the income form."""
    model_config = ConfigDict(str_strip_whitespace=True)

    date: dt.date = Field(..., description="Date the payment was received")
    client_name: str = Field(..., max_length=200, description="Guest / client name")
    brought_by: str = Field(..., max_length=200, description="Who referred the client")
    primary_amount: Amount = Field(..., description="Rent collected")
    caution_fee: Optional[Amount] = Field(
        default=None,
        description="Refundable deposit, excluded from commission",
    )
    commission: Amount = Field(
        default=Decimal("0"),
        description="Commission owed to the manager",
    )
    month_key: Optional[str] = Field(
        default=None,
        description="Optional explicit month key; must match the date",
    )


class Income(LedgerRecord):
    """
    A stored income entry.

    net_income is persisted for display, but the aggregation engine always
    recomputes it from the three inputs.
    """

    date: dt.date
    client_name: str = Field(..., max_length=200)
    brought_by: str = Field(..., max_length=200)
    primary_amount: StoredAmount
    caution_fee: Optional[StoredAmount] = None
    commission: StoredAmount = Decimal("0")
    net_income: Decimal = Field(
        ...,
        description="primary_amount + caution_fee - commission",
    )

    nullable_fields: ClassVar[frozenset[str]] = frozenset({"caution_fee"})

    @classmethod
    def _derive(cls, data: dict[str, Any]) -> dict[str, Any]:
        data = super()._derive(data)
        data["net_income"] = (
            Decimal(data["primary_amount"])
            + Decimal(data.get("caution_fee") or 0)
            - Decimal(data["commission"])
        )
        return data


class IncomeUpdate(BaseModel):
    """Partial change to an income entry."""
    model_config = ConfigDict(str_strip_whitespace=True)

    date: Optional[dt.date] = None
    client_name: Optional[str] = Field(default=None, max_length=200)
    brought_by: Optional[str] = Field(default=None, max_length=200)
    primary_amount: Optional[Amount] = None
    caution_fee: Optional[Amount] = None
    commission: Optional[Amount] = None


# =============================================================================
# EXPENSE
# =============================================================================

class ExpenseDraft(BaseModel):
    """An expense as submitted from the expense form."""
    model_config = ConfigDict(str_strip_whitespace=True)

    date: dt.date = Field(..., description="Date the expense was paid")
    name: str = Field(..., max_length=200, description="What was paid for")
    category: ExpenseCategory = Field(..., description="Expense category")
    amount: Amount = Field(..., description="Amount paid")
    notes: Optional[str] = Field(default=None, max_length=1000)
    month_key: Optional[str] = Field(
        default=None,
        description="Optional explicit month key; must match the date",
    )


class Expense(LedgerRecord):
    """A stored expense."""

    date: dt.date
    name: str = Field(..., max_length=200)
    category: ExpenseCategory
    amount: StoredAmount
    notes: Optional[str] = Field(default=None, max_length=1000)

    nullable_fields: ClassVar[frozenset[str]] = frozenset({"notes"})


class ExpenseUpdate(BaseModel):
    """Partial change to an expense."""
    model_config = ConfigDict(str_strip_whitespace=True)

    date: Optional[dt.date] = None
    name: Optional[str] = Field(default=None, max_length=200)
    category: Optional[ExpenseCategory] = None
    amount: Optional[Amount] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


# =============================================================================
# WITHDRAWAL
# =============================================================================

class WithdrawalDraft(BaseModel):
    """A partner withdrawal as submitted from the withdrawal form."""
    model_config = ConfigDict(str_strip_whitespace=True)

    date: dt.date = Field(..., description="Date of the withdrawal")
    amount: Amount = Field(..., description="Amount withdrawn")
    recipient: str = Field(..., max_length=200, description="Partner name")
    description: Optional[str] = Field(default=None, max_length=1000)
    month_key: Optional[str] = Field(
        default=None,
        description="Optional explicit month key; must match the date",
    )


class Withdrawal(LedgerRecord):
    """
    A stored partner withdrawal.

    recipient matches a partner by name (string equality), not by id.
    """

    date: dt.date
    amount: StoredAmount
    recipient: str = Field(..., max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)

    nullable_fields: ClassVar[frozenset[str]] = frozenset({"description"})


class WithdrawalUpdate(BaseModel):
    """Partial change to a withdrawal."""
    model_config = ConfigDict(str_strip_whitespace=True)

    date: Optional[dt.date] = None
    amount: Optional[Amount] = None
    recipient: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
