"""
Write-Boundary Validation

DESIGN DECISION: Every record is checked before any storage call is made.
Problems are collected into ValidationIssue objects and raised together as
a single ValidationError, so a form can show every problem at once.

Two sources of problems:
1. Form parsing (types, required fields) - pydantic errors are converted
2. Ledger rules (positive amounts, known recipients, month key agreement)

Warnings never block a write; only error-severity issues do.

IMPORTANT: Validation NEVER silently fixes values.
It reports them so the partner can correct the entry.
"""

from decimal import Decimal
from typing import Any, Optional, Type, TypeVar, Union

import pydantic
from pydantic import BaseModel, Field

from rentbook.models.partner import PartnerConfig
from rentbook.models.records import (
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
from rentbook.periods import is_month_key, month_key_of


DraftT = TypeVar("DraftT", bound=BaseModel)


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_recipient')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationError(Exception):
    """
    A record failed validation at the write boundary.

    Raised before any persistence attempt.
    """

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        summary = "; ".join(f"{i.field}: {i.message}" for i in self.errors)
        super().__init__(summary or "Validation failed")

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @classmethod
    def single(cls, field: str, issue_type: str, message: str) -> "ValidationError":
        return cls([ValidationIssue(field=field, issue_type=issue_type, message=message)])

    @classmethod
    def from_pydantic(cls, error: pydantic.ValidationError) -> "ValidationError":
        """Convert pydantic's error list into ledger issues."""
        issues = []
        for detail in error.errors():
            location = ".".join(str(part) for part in detail.get("loc", ())) or "record"
            issue_type = "missing" if detail.get("type") == "missing" else "invalid_value"
            issues.append(ValidationIssue(
                field=location,
                issue_type=issue_type,
                message=detail.get("msg", "Invalid value"),
            ))
        return cls(issues)


def parse_draft(model: Type[DraftT], values: dict[str, Any]) -> DraftT:
    """
    Parse raw form values into a draft or update model.

    Blank strings are treated as "not provided", the way an empty form
    input is.

    Raises:
        ValidationError: If the values do not fit the model
    """
    cleaned = {
        key: value
        for key, value in values.items()
        if not (isinstance(value, str) and not value.strip())
    }
    try:
        return model.model_validate(cleaned)
    except pydantic.ValidationError as e:
        raise ValidationError.from_pydantic(e) from e


def check_month_key(draft: BaseModel) -> None:
    """
    An explicitly supplied month key must agree with the date.

    Raises:
        ValidationError: If the keys disagree or the key is malformed
    """
    supplied = getattr(draft, "month_key", None)
    if supplied is None:
        return
    if not is_month_key(supplied):
        raise ValidationError.single(
            "month_key", "invalid_format", f"Month key {supplied!r} is not YYYY-MM"
        )
    expected = month_key_of(draft.date)
    if supplied != expected:
        raise ValidationError.single(
            "month_key",
            "inconsistent",
            f"Month key {supplied} does not match date {draft.date} ({expected})",
        )


class RecordValidator:
    """
    Validates drafts and merged updates before they are written.

    Withdrawal recipients are checked against the configured partner names,
    since withdrawals refer to partners by name.
    """

    def __init__(self, partners: PartnerConfig):
        self._partners = partners

    # -------------------------------------------------------------------------
    # Shared checks
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_text(issues: list[ValidationIssue], field: str, value: Optional[str], label: str):
        if value is None or not value.strip():
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
            ))

    @staticmethod
    def _require_positive(issues: list[ValidationIssue], field: str, value: Optional[Decimal], label: str):
        if value is None:
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
            ))
        elif value <= 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{label} must be greater than zero",
            ))

    @staticmethod
    def _require_non_negative(issues: list[ValidationIssue], field: str, value: Optional[Decimal], label: str):
        if value is not None and value < 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{label} cannot be negative",
            ))

    @staticmethod
    def _raise_if_errors(issues: list[ValidationIssue]) -> list[ValidationIssue]:
        if any(issue.severity == "error" for issue in issues):
            raise ValidationError(issues)
        return issues

    # -------------------------------------------------------------------------
    # Income
    # -------------------------------------------------------------------------

    def validate_income(self, income: Union[IncomeDraft, Income]) -> list[ValidationIssue]:
        """
        Check an income draft (or a merged income record).

        Returns the non-blocking warnings.

        Raises:
            ValidationError: If any error-level issue is found
        """
        issues: list[ValidationIssue] = []

        self._require_text(issues, "client_name", income.client_name, "Client name")
        self._require_text(issues, "brought_by", income.brought_by, "Brought by")
        self._require_positive(issues, "primary_amount", income.primary_amount, "Primary amount")
        self._require_non_negative(issues, "caution_fee", income.caution_fee, "Caution fee")
        self._require_non_negative(issues, "commission", income.commission, "Commission")

        if (
            income.primary_amount is not None
            and income.commission is not None
            and income.commission > income.primary_amount + (income.caution_fee or 0)
        ):
            issues.append(ValidationIssue(
                field="commission",
                issue_type="suspicious_value",
                message="Commission is larger than the amount received; net income will be negative",
                severity="warning",
            ))

        if isinstance(income, IncomeDraft):
            check_month_key(income)

        return self._raise_if_errors(issues)

    # -------------------------------------------------------------------------
    # Expense
    # -------------------------------------------------------------------------

    def validate_expense(self, expense: Union[ExpenseDraft, Expense]) -> list[ValidationIssue]:
        """
        Check an expense draft (or a merged expense record).

        Raises:
            ValidationError: If any error-level issue is found
        """
        issues: list[ValidationIssue] = []

        self._require_text(issues, "name", expense.name, "Name")
        self._require_positive(issues, "amount", expense.amount, "Amount")

        if isinstance(expense, ExpenseDraft):
            check_month_key(expense)

        return self._raise_if_errors(issues)

    # -------------------------------------------------------------------------
    # Withdrawal
    # -------------------------------------------------------------------------

    def validate_withdrawal(
        self,
        withdrawal: Union[WithdrawalDraft, Withdrawal],
    ) -> list[ValidationIssue]:
        """
        Check a withdrawal draft (or a merged withdrawal record).

        Raises:
            ValidationError: If any error-level issue is found
        """
        issues: list[ValidationIssue] = []

        self._require_positive(issues, "amount", withdrawal.amount, "Amount")

        recipient = withdrawal.recipient
        if recipient is None or not recipient.strip():
            issues.append(ValidationIssue(
                field="recipient",
                issue_type="missing",
                message="Recipient is required",
            ))
        elif self._partners.get(recipient) is None:
            issues.append(ValidationIssue(
                field="recipient",
                issue_type="unknown_recipient",
                message=(
                    f"Recipient {recipient!r} is not a partner "
                    f"(expected one of: {', '.join(self._partners.names)})"
                ),
            ))

        if isinstance(withdrawal, WithdrawalDraft):
            check_month_key(withdrawal)

        return self._raise_if_errors(issues)

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    def validate_update(
        self,
        current: Union[Income, Expense, Withdrawal],
        changes: Union[IncomeUpdate, ExpenseUpdate, WithdrawalUpdate],
    ) -> list[ValidationIssue]:
        """
        Validate an update against the record it will produce.

        The merge is done with model_copy, so nothing is recomputed or
        persisted here.
        """
        applied = {
            name: value
            for name, value in changes.model_dump(exclude_unset=True).items()
            if value is not None or name in current.nullable_fields
        }
        merged = current.model_copy(update=applied)

        if isinstance(merged, Income):
            return self.validate_income(merged)
        if isinstance(merged, Expense):
            return self.validate_expense(merged)
        return self.validate_withdrawal(merged)
