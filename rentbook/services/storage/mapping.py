"""
Storage Column Mapping

Translates between the canonical record models and the flattened,
lower-case columns a worksheet row holds. This is the only module that
knows storage column names.

Schema versions:
- 1: camelCase headers (clientName, primaryAmount, monthYear, createdAt, ...)
- 2: lower-case headers (clientname, primaryamount, monthyear, createdat, ...)

New worksheets are written with version 2 headers. Rows are read by header
name, so both versions (and any column order) are accepted.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, NamedTuple, Optional, Sequence, Type

import pydantic
from pydantic import BaseModel

from rentbook.logs import get_logger
from rentbook.models.records import (
    Expense,
    ExpenseCategory,
    Income,
    LedgerRecord,
    RecordKind,
    Withdrawal,
)
from rentbook.periods import month_key_of

logger = get_logger(__name__)

SCHEMA_VERSION = 2

# Version 1 header -> version 2 header
LEGACY_ALIASES = {
    "clientName": "clientname",
    "broughtBy": "broughtby",
    "primaryAmount": "primaryamount",
    "cautionFee": "cautionfee",
    "netIncome": "netincome",
    "monthYear": "monthyear",
    "createdAt": "createdat",
    "updatedAt": "updatedat",
    "userId": "user_id",
    "updatedBy": "updatedby",
}


class MappingError(ValueError):
    """A stored row could not be turned into a record."""
    pass


class Column(NamedTuple):
    """One model field and the worksheet column that holds it."""
    field: str
    name: str
    kind: str = "text"  # text | decimal | date | datetime | category
    optional: bool = False


# Trailing bookkeeping columns shared by every table
_STAMP_COLUMNS = [
    Column("month_key", "monthyear", optional=True),
    Column("created_at", "createdat", "datetime"),
    Column("updated_at", "updatedat", "datetime", optional=True),
    Column("created_by", "user_id", optional=True),
    Column("updated_by", "updatedby", optional=True),
]


def canonical_header(header: str) -> str:
    """Map a stored header of any schema version to its version 2 name."""
    header = header.strip()
    return LEGACY_ALIASES.get(header, header.lower())


def _to_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    return str(value)


# Day zero of spreadsheet serial dates
SERIAL_EPOCH = dt.datetime(1899, 12, 30, tzinfo=dt.timezone.utc)


def _from_serial(raw: str) -> Optional[dt.datetime]:
    """A date typed into the sheet by hand reads back as a serial day number."""
    try:
        days = float(raw)
    except ValueError:
        return None
    return SERIAL_EPOCH + dt.timedelta(days=days)


def _parse_date(raw: str) -> dt.date:
    serial = _from_serial(raw)
    if serial is not None:
        return serial.date()
    return dt.date.fromisoformat(raw[:10])


def _parse_datetime(raw: str) -> dt.datetime:
    serial = _from_serial(raw)
    if serial is not None:
        return serial
    parsed = dt.datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def _parse_category(raw: str, record_id: str) -> ExpenseCategory:
    try:
        return ExpenseCategory(raw)
    except ValueError:
        logger.warning(
            "unknown_expense_category",
            record_id=record_id,
            category=raw,
            mapped_to=ExpenseCategory.OTHER.value,
        )
        return ExpenseCategory.OTHER


class RecordMapper:
    """
    Two-way mapping for one record type.

    Args:
        kind: Which logical table this mapper serves
        model: The stored record model
        columns: Column layout, in write order
    """

    def __init__(self, kind: RecordKind, model: Type[LedgerRecord], columns: list[Column]):
        self.kind = kind
        self.model = model
        self.columns = columns

    @property
    def headers(self) -> list[str]:
        """Version 2 header row."""
        return [column.name for column in self.columns]

    def to_row(self, record: BaseModel) -> list[str]:
        """Flatten a record into cell strings, in header order."""
        return [_to_cell(getattr(record, column.field)) for column in self.columns]

    def header_index(self, header_row: Sequence[str]) -> dict[str, int]:
        """Position of each known column in a stored header row."""
        return {canonical_header(str(name)): idx for idx, name in enumerate(header_row)}

    def from_row(self, header_index: dict[str, int], row: Sequence[str]):
        """
        Build a record from a stored row.

        Raises:
            MappingError: If a required cell is missing or unparseable
        """
        def cell(name: str) -> str:
            idx = header_index.get(name)
            if idx is None or idx >= len(row):
                return ""
            return str(row[idx]).strip()

        record_id = cell("id")
        data: dict[str, Any] = {}

        for column in self.columns:
            raw = cell(column.name)
            if not raw:
                if not column.optional:
                    raise MappingError(f"Missing {column.name} in row {record_id or '?'}")
                data[column.field] = None
                continue
            try:
                data[column.field] = self._parse(column, raw, record_id)
            except (ValueError, InvalidOperation, OverflowError) as e:
                raise MappingError(
                    f"Bad {column.name} value {raw!r} in row {record_id or '?'}: {e}"
                ) from e

        data = self._fill_defaults(data)
        try:
            return self.model.model_validate(data)
        except pydantic.ValidationError as e:
            raise MappingError(f"Row {record_id or '?'} failed validation: {e}") from e

    def _parse(self, column: Column, raw: str, record_id: str) -> Any:
        if column.kind == "decimal":
            return Decimal(raw.replace(",", ""))
        if column.kind == "date":
            return _parse_date(raw)
        if column.kind == "datetime":
            return _parse_datetime(raw)
        if column.kind == "category":
            return _parse_category(raw, record_id)
        return raw

    def _fill_defaults(self, data: dict[str, Any]) -> dict[str, Any]:
        """Fill bookkeeping values older rows may lack."""
        if data.get("month_key") is None:
            data["month_key"] = month_key_of(data["date"])
        if data.get("updated_at") is None:
            data["updated_at"] = data["created_at"]
        if self.kind is RecordKind.INCOME:
            if data.get("commission") is None:
                data["commission"] = Decimal("0")
            if data.get("net_income") is None:
                data["net_income"] = (
                    data["primary_amount"]
                    + (data.get("caution_fee") or Decimal("0"))
                    - data["commission"]
                )
        return {key: value for key, value in data.items() if value is not None}


INCOME_MAPPER = RecordMapper(
    RecordKind.INCOME,
    Income,
    [
        Column("id", "id"),
        Column("date", "date", "date"),
        Column("client_name", "clientname"),
        Column("brought_by", "broughtby"),
        Column("primary_amount", "primaryamount", "decimal"),
        Column("caution_fee", "cautionfee", "decimal", optional=True),
        Column("commission", "commission", "decimal", optional=True),
        Column("net_income", "netincome", "decimal", optional=True),
        *_STAMP_COLUMNS,
    ],
)

EXPENSE_MAPPER = RecordMapper(
    RecordKind.EXPENSE,
    Expense,
    [
        Column("id", "id"),
        Column("date", "date", "date"),
        Column("name", "name"),
        Column("category", "category", "category"),
        Column("amount", "amount", "decimal"),
        Column("notes", "notes", optional=True),
        *_STAMP_COLUMNS,
    ],
)

WITHDRAWAL_MAPPER = RecordMapper(
    RecordKind.WITHDRAWAL,
    Withdrawal,
    [
        Column("id", "id"),
        Column("date", "date", "date"),
        Column("amount", "amount", "decimal"),
        Column("recipient", "recipient"),
        Column("description", "description", optional=True),
        *_STAMP_COLUMNS,
    ],
)

_MAPPERS = {
    RecordKind.INCOME: INCOME_MAPPER,
    RecordKind.EXPENSE: EXPENSE_MAPPER,
    RecordKind.WITHDRAWAL: WITHDRAWAL_MAPPER,
}


def mapper_for(kind: RecordKind) -> RecordMapper:
    """Mapper for a logical table."""
    return _MAPPERS[kind]
