"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the hosted backend because:
1. The partners can view and correct the ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

Each logical table (incomes, expenses, withdrawals) is its own worksheet.
The first row holds the column names; rows are read by header name so
worksheets written by older versions still load (see mapping.py).

TRADEOFFS:
- No transactions: last write wins
- Limited query capabilities (we filter in Python)
- Reads are retried with exponential backoff, writes are not, so a
  transient failure never appends the same row twice. Connection errors
  (bad credentials, unknown spreadsheet) are not retried at all
- A stored row that cannot be parsed fails the read instead of being
  dropped, since its amount would otherwise vanish from every total
"""

from decimal import Decimal
from typing import Optional, Sequence

import gspread
from google.oauth2.service_account import Credentials
from tenacity import (
    Retrying,
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from rentbook.calculations.aggregation import sum_withdrawals
from rentbook.config import GoogleSheetsSettings, get_settings
from rentbook.logs import get_logger
from rentbook.models.records import Actor
from rentbook.services.storage.interface import (
    ExpenseStorageInterface,
    IncomeStorageInterface,
    MalformedRowsError,
    PersistenceFailure,
    StorageConnectionError,
    WithdrawalStorageInterface,
    apply_changes,
    build_record,
)
from rentbook.services.storage.mapping import (
    EXPENSE_MAPPER,
    INCOME_MAPPER,
    WITHDRAWAL_MAPPER,
    MappingError,
    RecordMapper,
    canonical_header,
)

logger = get_logger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and worksheet lookup. A ready spreadsheet
    object can be injected, which is how the tests avoid the network.
    """

    def __init__(
        self,
        settings: Optional[GoogleSheetsSettings] = None,
        spreadsheet: Optional[gspread.Spreadsheet] = None,
    ):
        self._settings = settings or get_settings().google_sheets
        self._client: Optional[gspread.Client] = None
        self._spreadsheet = spreadsheet

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_not_exception_type(StorageConnectionError),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=SCOPES,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(self._settings.spreadsheet_id)
            except gspread.SpreadsheetNotFound as e:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def get_worksheet(self, title: str, headers: list[str]) -> gspread.Worksheet:
        """Get a worksheet, creating it with a header row if missing."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            logger.info("worksheet_created", worksheet=title)
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(headers),
            )
            sheet.append_row(headers)
        return sheet


class GoogleSheetsRecordStorage:
    """
    Shared worksheet logic for one logical table.

    Rows are located by their id cell. Update rewrites the whole row in
    place; delete removes the row.
    """

    def __init__(
        self,
        client: GoogleSheetsClient,
        sheet_name: str,
        mapper: RecordMapper,
        read_attempts: Optional[int] = None,
    ):
        self._client = client
        self._sheet_name = sheet_name
        self._mapper = mapper
        attempts = read_attempts or client.settings.read_retry_attempts
        self._retrying = Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_not_exception_type(StorageConnectionError),
            reraise=True,
        )

    # -------------------------------------------------------------------------
    # Sheet access
    # -------------------------------------------------------------------------

    def _sheet(self) -> gspread.Worksheet:
        return self._client.get_worksheet(self._sheet_name, self._mapper.headers)

    def _read_values(self) -> tuple[gspread.Worksheet, list[list]]:
        """
        Fetch every cell of the worksheet, retrying transient failures.

        Cells are read unformatted, so a column the partners formatted as
        currency still comes back as a plain number.
        """
        def fetch():
            sheet = self._sheet()
            return sheet, sheet.get_all_values(value_render_option="UNFORMATTED_VALUE")

        try:
            return self._retrying(fetch)
        except PersistenceFailure:
            raise
        except Exception as e:
            logger.error("storage_read_failed", worksheet=self._sheet_name, error=str(e))
            raise PersistenceFailure(f"Failed to read {self._sheet_name}: {e}") from e

    def _parse_row(self, header_index: dict[str, int], row: Sequence, row_number: int):
        try:
            return self._mapper.from_row(header_index, row)
        except MappingError as e:
            logger.error(
                "malformed_row",
                worksheet=self._sheet_name,
                row=row_number,
                error=str(e),
            )
            raise

    def _records(self, values: list[list]) -> list[tuple[int, object]]:
        """
        Parse data rows into (sheet row number, record) pairs.

        Blank rows are ignored.

        Raises:
            MalformedRowsError: Naming every row that could not be parsed
        """
        if not values:
            return []
        header_index = self._mapper.header_index(values[0])
        records = []
        malformed = []
        for row_number, row in enumerate(values[1:], start=2):
            if not any(str(cell).strip() for cell in row):
                continue
            try:
                records.append((row_number, self._parse_row(header_index, row, row_number)))
            except MappingError:
                record_id = self._row_id(header_index, row) or "?"
                malformed.append(f"{record_id} (row {row_number})")
        if malformed:
            raise MalformedRowsError(self._sheet_name, malformed)
        return records

    def _row_id(self, header_index: dict[str, int], row: Sequence) -> str:
        id_column = header_index.get("id")
        if id_column is None or id_column >= len(row):
            return ""
        return str(row[id_column]).strip()

    def _find(self, values: list[list], record_id: str) -> Optional[int]:
        """Sheet row number holding `record_id`, if any."""
        if not values:
            return None
        header_index = self._mapper.header_index(values[0])
        for row_number, row in enumerate(values[1:], start=2):
            if self._row_id(header_index, row) == record_id:
                return row_number
        return None

    def _stored(self, values: list[list], row_number: int, record_id: str):
        """Parse the single row holding `record_id`."""
        header_index = self._mapper.header_index(values[0])
        try:
            return self._parse_row(header_index, values[row_number - 1], row_number)
        except MappingError as e:
            raise MalformedRowsError(self._sheet_name, [f"{record_id} (row {row_number})"]) from e

    def _ordered_row(self, record, header_row: Sequence[str]) -> list[str]:
        """Lay out a record's cells in the worksheet's own column order."""
        cells = dict(zip(self._mapper.headers, self._mapper.to_row(record)))
        return [cells.get(canonical_header(str(name)), "") for name in header_row]

    def _write_failed(self, action: str, record_id: str, error: Exception) -> PersistenceFailure:
        logger.error(
            "storage_write_failed",
            worksheet=self._sheet_name,
            action=action,
            record_id=record_id,
            error=str(error),
        )
        return PersistenceFailure(f"Failed to {action} {self._sheet_name} row {record_id}: {error}")

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def list_by_month(self, month_key: str) -> list:
        _, values = self._read_values()
        return [record for _, record in self._records(values) if record.month_key == month_key]

    async def list_all(self) -> list:
        _, values = self._read_values()
        return [record for _, record in self._records(values)]

    async def get_by_id(self, record_id: str):
        _, values = self._read_values()
        row_number = self._find(values, record_id)
        if row_number is None:
            return None
        return self._stored(values, row_number, record_id)

    async def create(self, draft, actor: Actor):
        record = build_record(self._mapper.model, draft, actor)
        sheet, values = self._read_values()
        try:
            if not values:
                sheet.append_row(self._mapper.headers)
                header_row = self._mapper.headers
            else:
                header_row = values[0]
            sheet.append_row(self._ordered_row(record, header_row), value_input_option="RAW")
        except Exception as e:
            raise self._write_failed("create", record.id, e) from e
        return record

    async def update(self, record_id: str, changes, actor: Actor):
        sheet, values = self._read_values()
        row_number = self._find(values, record_id)
        if row_number is None:
            return None

        current = self._stored(values, row_number, record_id)
        updated = apply_changes(current, changes, actor)
        try:
            sheet.update(
                range_name=f"A{row_number}",
                values=[self._ordered_row(updated, values[0])],
                value_input_option="RAW",
            )
        except Exception as e:
            raise self._write_failed("update", record_id, e) from e
        return updated

    async def delete(self, record_id: str, actor: Actor) -> bool:
        sheet, values = self._read_values()
        row_number = self._find(values, record_id)
        if row_number is None:
            return False
        try:
            sheet.delete_rows(row_number)
        except Exception as e:
            raise self._write_failed("delete", record_id, e) from e
        return True


class GoogleSheetsIncomeStorage(GoogleSheetsRecordStorage, IncomeStorageInterface):
    """Income entries in the incomes worksheet."""

    def __init__(self, client: GoogleSheetsClient, read_attempts: Optional[int] = None):
        super().__init__(client, client.settings.incomes_sheet_name, INCOME_MAPPER, read_attempts)


class GoogleSheetsExpenseStorage(GoogleSheetsRecordStorage, ExpenseStorageInterface):
    """Expenses in the expenses worksheet."""

    def __init__(self, client: GoogleSheetsClient, read_attempts: Optional[int] = None):
        super().__init__(client, client.settings.expenses_sheet_name, EXPENSE_MAPPER, read_attempts)


class GoogleSheetsWithdrawalStorage(GoogleSheetsRecordStorage, WithdrawalStorageInterface):
    """Partner withdrawals in the withdrawals worksheet."""

    def __init__(self, client: GoogleSheetsClient, read_attempts: Optional[int] = None):
        super().__init__(
            client, client.settings.withdrawals_sheet_name, WITHDRAWAL_MAPPER, read_attempts
        )

    async def total_withdrawals(self) -> Decimal:
        return sum_withdrawals(await self.list_all())

    async def total_withdrawals_by_month(self, month_key: str) -> Decimal:
        return sum_withdrawals(await self.list_by_month(month_key))

    async def total_withdrawals_by_partner(self, partner_name: str) -> Decimal:
        return sum_withdrawals(await self.list_all(), recipient=partner_name)
