"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the hosted store because:
1. The household can look at (and fix) its data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (a loan ledger is a few hundred rows)
- No transactions (each user action is a single row write)
- Limited query capabilities (we filter and sort in Python)

Each table lives in its own worksheet with a header row. The
implementation follows the abstract interface, so we can swap to
PostgreSQL/SQLite later without changing business logic.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Optional, TypeVar
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from household.config import get_settings
from household.models.audit import AuditEvent
from household.models.chore import ChoreCompletion
from household.models.loan import ClearedPayment, PaymentStatus
from household.models.snapshot import WeeklySnapshot
from household.services.storage.interface import (
    AuditStorageInterface,
    ChoreStorageInterface,
    ConnectionError,
    LoanPaymentStorageInterface,
    SnapshotStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Sort key for rows written before created_at was recorded
EPOCH = datetime.min.replace(tzinfo=timezone.utc)


# Column mappings for LoanPayments sheet
LOAN_PAYMENT_COLUMNS = [
    "id",
    "payment_date",
    "amount_paid",
    "principal_portion",
    "interest_portion",
    "remaining_balance",
    "status",
    "created_at",
]

# Column mappings for Snapshots sheet
SNAPSHOT_COLUMNS = [
    "id",
    "week_of",
    "checking_cents",
    "savings_cents",
    "credit_card_cents",
    "notes",
    "created_at",
]

# Column mappings for ChoreCompletions sheet
CHORE_COLUMNS = [
    "id",
    "area",
    "task",
    "completed_at",
    "notes",
    "created_at",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


def _cell(row: list, index: int, default: str = "") -> str:
    """Read a cell, treating missing trailing cells as empty."""
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


def _parse_rows(rows: list[list], parse: Callable[[list], T], sheet_name: str) -> list[T]:
    """Parse data rows, skipping blank rows and logging malformed ones."""
    parsed = []
    for row_number, row in enumerate(rows, start=2):
        if not row or not row[0]:
            continue
        try:
            parsed.append(parse(row))
        except (ValueError, ArithmeticError, KeyError) as e:
            logger.warning(
                "malformed_row_skipped",
                sheet=sheet_name,
                row=row_number,
                error=str(e),
            )
    return parsed


def _find_row_index(all_rows: list[list], entity_id: UUID) -> Optional[int]:
    """1-based sheet row of the entity, or None. Row 1 is the header."""
    for idx, row in enumerate(all_rows[1:], start=2):
        if row and row[0] == str(entity_id):
            return idx
    return None


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def get_worksheet(
        self,
        title: str,
        columns: list[str],
        rows: int = 1000,
    ) -> gspread.Worksheet:
        """Get a worksheet, creating it with a header row if missing."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_loan_payments_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.loan_payments_sheet_name, LOAN_PAYMENT_COLUMNS)

    def get_snapshots_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.snapshots_sheet_name, SNAPSHOT_COLUMNS)

    def get_chores_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.chores_sheet_name, CHORE_COLUMNS)

    def get_audit_sheet(self) -> gspread.Worksheet:
        # More rows for audit log
        return self.get_worksheet(self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000)


class GoogleSheetsLoanPaymentStorage(LoanPaymentStorageInterface):
    """
    Google Sheets implementation of the loan payment ledger.

    One payment per row; amounts are written as plain decimal strings.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _payment_to_row(payment: ClearedPayment) -> list:
        """Convert a ClearedPayment to a spreadsheet row."""
        return [
            str(payment.id),
            payment.payment_date.isoformat(),
            str(payment.amount_paid),
            str(payment.principal_portion),
            str(payment.interest_portion),
            str(payment.remaining_balance),
            payment.status.value,
            payment.created_at.isoformat(),
        ]

    @staticmethod
    def _row_to_payment(row: list) -> ClearedPayment:
        """Convert a spreadsheet row to a ClearedPayment."""
        created_at = _cell(row, 7)
        return ClearedPayment(
            id=UUID(_cell(row, 0)),
            payment_date=date.fromisoformat(_cell(row, 1)),
            amount_paid=Decimal(_cell(row, 2)),
            principal_portion=Decimal(_cell(row, 3)),
            interest_portion=Decimal(_cell(row, 4)),
            remaining_balance=Decimal(_cell(row, 5)),
            status=PaymentStatus(_cell(row, 6, PaymentStatus.PENDING.value)),
            created_at=datetime.fromisoformat(created_at) if created_at else EPOCH,
        )

    async def list_payments(
        self,
        status: Optional[PaymentStatus] = PaymentStatus.CLEARED,
    ) -> list[ClearedPayment]:
        """List ledger rows, oldest payment first."""
        try:
            sheet = self._client.get_loan_payments_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except Exception as e:
            raise StorageError(f"Failed to list loan payments: {e}") from e

        payments = _parse_rows(all_rows, self._row_to_payment, "loan_payments")
        if status is not None:
            payments = [p for p in payments if p.status == status]

        payments.sort(key=lambda p: (p.payment_date, p.created_at))
        return payments

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def insert_payment(self, payment: ClearedPayment) -> ClearedPayment:
        """Append a ledger row."""
        try:
            sheet = self._client.get_loan_payments_sheet()
            sheet.append_row(self._payment_to_row(payment), value_input_option="RAW")
            return payment
        except Exception as e:
            raise StorageError(f"Failed to save loan payment: {e}") from e

    async def delete_payment(self, payment_id: UUID) -> bool:
        """Delete a ledger row by ID."""
        try:
            sheet = self._client.get_loan_payments_sheet()
            idx = _find_row_index(sheet.get_all_values(), payment_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete loan payment: {e}") from e


class GoogleSheetsSnapshotStorage(SnapshotStorageInterface):
    """Google Sheets implementation of weekly snapshot storage."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _snapshot_to_row(snapshot: WeeklySnapshot) -> list:
        return [
            str(snapshot.id),
            snapshot.week_of.isoformat(),
            str(snapshot.checking_cents),
            str(snapshot.savings_cents),
            str(snapshot.credit_card_cents),
            snapshot.notes or "",
            snapshot.created_at.isoformat(),
        ]

    @staticmethod
    def _row_to_snapshot(row: list) -> WeeklySnapshot:
        created_at = _cell(row, 6)
        return WeeklySnapshot(
            id=UUID(_cell(row, 0)),
            week_of=date.fromisoformat(_cell(row, 1)),
            checking_cents=int(_cell(row, 2, "0")),
            savings_cents=int(_cell(row, 3, "0")),
            credit_card_cents=int(_cell(row, 4, "0")),
            notes=_cell(row, 5) or None,
            created_at=datetime.fromisoformat(created_at) if created_at else EPOCH,
        )

    async def list_snapshots(self) -> list[WeeklySnapshot]:
        try:
            sheet = self._client.get_snapshots_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to list snapshots: {e}") from e

        snapshots = _parse_rows(all_rows, self._row_to_snapshot, "snapshots")
        snapshots.sort(key=lambda s: s.week_of)
        return snapshots

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def upsert_snapshot(self, snapshot: WeeklySnapshot) -> WeeklySnapshot:
        """Insert, or overwrite the row that has the same week_of."""
        try:
            sheet = self._client.get_snapshots_sheet()
            all_rows = sheet.get_all_values()

            week = snapshot.week_of.isoformat()
            for idx, row in enumerate(all_rows[1:], start=2):
                if row and _cell(row, 1) == week:
                    stored = snapshot.model_copy(update={"id": UUID(row[0])})
                    sheet.update(
                        range_name=f"A{idx}",
                        values=[self._snapshot_to_row(stored)],
                        value_input_option="RAW",
                    )
                    return stored

            sheet.append_row(self._snapshot_to_row(snapshot), value_input_option="RAW")
            return snapshot
        except Exception as e:
            raise StorageError(f"Failed to save snapshot: {e}") from e

    async def delete_snapshot(self, snapshot_id: UUID) -> bool:
        try:
            sheet = self._client.get_snapshots_sheet()
            idx = _find_row_index(sheet.get_all_values(), snapshot_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete snapshot: {e}") from e


class GoogleSheetsChoreStorage(ChoreStorageInterface):
    """Google Sheets implementation of chore completion storage."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _completion_to_row(completion: ChoreCompletion) -> list:
        return [
            str(completion.id),
            completion.area,
            completion.task,
            completion.completed_at.isoformat(),
            completion.notes or "",
            completion.created_at.isoformat(),
        ]

    @staticmethod
    def _row_to_completion(row: list) -> ChoreCompletion:
        completed_at = datetime.fromisoformat(_cell(row, 3))
        created_at = _cell(row, 5)
        return ChoreCompletion(
            id=UUID(_cell(row, 0)),
            area=_cell(row, 1),
            task=_cell(row, 2),
            completed_at=completed_at,
            notes=_cell(row, 4) or None,
            created_at=datetime.fromisoformat(created_at) if created_at else completed_at,
        )

    async def list_completions(self) -> list[ChoreCompletion]:
        try:
            sheet = self._client.get_chores_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to list chore completions: {e}") from e

        completions = _parse_rows(all_rows, self._row_to_completion, "chore_completions")
        # Newest first
        completions.sort(key=lambda c: c.completed_at, reverse=True)
        return completions

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def insert_completion(self, completion: ChoreCompletion) -> ChoreCompletion:
        try:
            sheet = self._client.get_chores_sheet()
            sheet.append_row(self._completion_to_row(completion), value_input_option="RAW")
            return completion
        except Exception as e:
            raise StorageError(f"Failed to save chore completion: {e}") from e

    async def delete_completion(self, completion_id: UUID) -> bool:
        try:
            sheet = self._client.get_chores_sheet()
            idx = _find_row_index(sheet.get_all_values(), completion_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete chore completion: {e}") from e


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            # Don't raise - audit logging should not break the main flow
            logger.warning("audit_write_failed", error=str(e), event_id=str(event.event_id))
            return False

