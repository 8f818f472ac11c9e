"""
Google Sheets Ledger Backend

The ledger is one worksheet with a row per transaction, in insertion
order, so the owner can read and edit it in Sheets directly. Store
names and counts are derived from those rows on every read.

Sheets has no multi-row transactions: a store rename or delete that
fails halfway leaves some rows changed. The client resyncs after every
mutation, so it never keeps believing in a half-applied write.

Only connecting is retried. Ledger operations are attempted once and
fail with BackendError; the client never retries them.
"""

import asyncio
import time
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from storeledger.config import get_settings
from storeledger.models.audit import AUDIT_FIELDS, AuditEvent
from storeledger.models.transaction import ALL_STORES, Transaction, TransactionKind
from storeledger.services.ledger.interface import (
    AuditStorageInterface,
    BackendError,
    LedgerGatewayInterface,
    NotFoundError,
    TransportError,
)


logger = structlog.get_logger(__name__)


# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "type",
    "amount",
    "description",
    "store_name",
    "timestamp",
]

class GoogleSheetsClient:
    """Authorized gspread handle plus worksheet lookup; connecting is retried."""

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """Authorize with the service account file, once per client."""
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
            except FileNotFoundError:
                raise TransportError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise TransportError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Open the ledger spreadsheet by key, once."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise TransportError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(self, title: str, columns: list[str], rows: int) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # First use: header row only
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self._get_or_create_sheet(
            self._settings.transactions_sheet_name,
            TRANSACTION_COLUMNS,
            rows=1000,
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """The audit worksheet, created on first use."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name,
            AUDIT_FIELDS,
            rows=5000,
        )


def transaction_to_row(transaction: Transaction) -> list:
    """Convert a Transaction to a spreadsheet row."""
    return [
        transaction.id,
        transaction.kind.value,
        str(transaction.amount),
        transaction.description,
        transaction.store_name,
        str(transaction.timestamp),
    ]


def row_to_transaction(row: list) -> Transaction:
    """Convert a spreadsheet row to a Transaction."""
    def cell(index: int, default: str = "") -> str:
        value = row[index] if index < len(row) else ""
        return value or default

    return Transaction(
        id=cell(0),
        kind=TransactionKind(cell(1)),
        amount=Decimal(cell(2)),
        description=cell(3),
        store_name=cell(4),
        timestamp=int(cell(5, "0")),
    )


class GoogleSheetsLedgerGateway(LedgerGatewayInterface):
    """
    Google Sheets implementation of the ledger backend.

    Transactions are stored one per row, in insertion order.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _read_rows(self) -> list[tuple[int, list]]:
        """All data rows with their 1-based sheet row index."""
        sheet = self._client.get_transactions_sheet()
        all_rows = sheet.get_all_values()
        return [
            (idx, row)
            for idx, row in enumerate(all_rows[1:], start=2)  # Row 1 is header
            if row and row[0]
        ]

    def _read_transactions(self) -> list[Transaction]:
        transactions = []
        for _, row in self._read_rows():
            try:
                transactions.append(row_to_transaction(row))
            except Exception as e:
                logger.warning("malformed_ledger_row", row=row, error=str(e))
        return transactions

    # -------------------------------------------------------------------------
    # Async surface: each gspread call runs in a worker thread
    # -------------------------------------------------------------------------

    async def is_available(self) -> bool:
        try:
            await asyncio.to_thread(self._client.get_transactions_sheet)
            return True
        except Exception:
            return False

    async def list_transactions(self) -> list[Transaction]:
        return await asyncio.to_thread(self._list_transactions)

    async def list_unique_stores(self) -> list[str]:
        return await asyncio.to_thread(self._list_unique_stores)

    async def get_store_info(self) -> dict[str, int]:
        return await asyncio.to_thread(self._get_store_info)

    async def add_transaction(
        self,
        kind: TransactionKind,
        amount: Decimal,
        description: str,
        store_name: str,
    ) -> Transaction:
        return await asyncio.to_thread(
            self._add_transaction, kind, amount, description, store_name,
        )

    async def update_transaction(
        self,
        transaction_id: str,
        kind: TransactionKind,
        amount: Decimal,
        description: str,
        store_name: str,
    ) -> Transaction:
        return await asyncio.to_thread(
            self._update_transaction,
            transaction_id, kind, amount, description, store_name,
        )

    async def delete_transaction(self, transaction_id: str) -> None:
        await asyncio.to_thread(self._delete_transaction, transaction_id)

    async def rename_store(self, old_name: str, new_name: str) -> None:
        await asyncio.to_thread(self._rename_store, old_name, new_name)

    async def delete_store(self, store_name: str) -> None:
        await asyncio.to_thread(self._delete_store, store_name)

    # -------------------------------------------------------------------------
    # Blocking implementations
    # -------------------------------------------------------------------------

    def _list_transactions(self) -> list[Transaction]:
        try:
            return self._read_transactions()
        except Exception as e:
            raise BackendError(f"Failed to read transactions: {e}")

    def _list_unique_stores(self) -> list[str]:
        try:
            stores = {t.store_name for t in self._read_transactions()}
        except Exception as e:
            raise BackendError(f"Failed to read stores: {e}")
        stores.add(ALL_STORES)
        return sorted(stores)

    def _get_store_info(self) -> dict[str, int]:
        try:
            transactions = self._read_transactions()
        except Exception as e:
            raise BackendError(f"Failed to read store info: {e}")

        counts: dict[str, int] = {}
        for t in transactions:
            counts[t.store_name] = counts.get(t.store_name, 0) + 1
        return counts

    def _add_transaction(
        self,
        kind: TransactionKind,
        amount: Decimal,
        description: str,
        store_name: str,
    ) -> Transaction:
        transaction = Transaction(
            id=str(uuid4()),
            kind=kind,
            amount=amount,
            description=description.strip(),
            store_name=store_name.strip(),
            timestamp=int(time.time()),
        )
        try:
            sheet = self._client.get_transactions_sheet()
            sheet.append_row(transaction_to_row(transaction), value_input_option="RAW")
        except Exception as e:
            raise BackendError(f"Failed to save transaction: {e}")
        return transaction

    def _update_transaction(
        self,
        transaction_id: str,
        kind: TransactionKind,
        amount: Decimal,
        description: str,
        store_name: str,
    ) -> Transaction:
        try:
            sheet = self._client.get_transactions_sheet()
            for idx, row in self._read_rows():
                if row[0] == transaction_id:
                    existing = row_to_transaction(row)
                    updated = existing.model_copy(update={
                        "kind": kind,
                        "amount": amount,
                        "description": description.strip(),
                        "store_name": store_name.strip(),
                    })
                    sheet.update(
                        f"A{idx}:F{idx}",
                        [transaction_to_row(updated)],
                        value_input_option="RAW",
                    )
                    return updated
        except Exception as e:
            raise BackendError(f"Failed to update transaction: {e}")

        raise NotFoundError(f"Transaction with ID {transaction_id} not found.")

    def _delete_transaction(self, transaction_id: str) -> None:
        try:
            sheet = self._client.get_transactions_sheet()
            for idx, row in self._read_rows():
                if row[0] == transaction_id:
                    sheet.delete_rows(idx)
                    return
        except Exception as e:
            raise BackendError(f"Failed to delete transaction: {e}")

        raise NotFoundError(f"Transaction with ID {transaction_id} not found.")

    def _rename_store(self, old_name: str, new_name: str) -> None:
        old_name, new_name = old_name.strip(), new_name.strip()
        renamed = 0
        try:
            sheet = self._client.get_transactions_sheet()
            store_col = TRANSACTION_COLUMNS.index("store_name")
            for idx, row in self._read_rows():
                if len(row) > store_col and row[store_col] == old_name:
                    sheet.update_cell(idx, store_col + 1, new_name)
                    renamed += 1
        except Exception as e:
            raise BackendError(f"Failed to rename store: {e}")

        if not renamed:
            raise NotFoundError(
                f"Store '{old_name}' not found or has no transactions to rename."
            )

    def _delete_store(self, store_name: str) -> None:
        store_name = store_name.strip()
        try:
            sheet = self._client.get_transactions_sheet()
            store_col = TRANSACTION_COLUMNS.index("store_name")
            matching = [
                idx for idx, row in self._read_rows()
                if len(row) > store_col and row[store_col] == store_name
            ]
            # Bottom-up so earlier row indexes stay valid
            for idx in reversed(matching):
                sheet.delete_rows(idx)
        except Exception as e:
            raise BackendError(f"Failed to delete store: {e}")

        if not matching:
            raise NotFoundError(
                f"Store '{store_name}' not found or has no transactions to delete."
            )


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """Appends audit events as rows of the audit worksheet."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _append_row(self, row: list) -> None:
        sheet = self._client.get_audit_sheet()
        sheet.append_row(row, value_input_option="RAW")

    async def append_event(self, event: AuditEvent) -> bool:
        """Append one row off the event loop; a failure is raised as BackendError."""
        try:
            await asyncio.to_thread(self._append_row, event.to_sheets_row())
            return True
        except Exception as e:
            raise BackendError(f"Failed to write audit event: {e}")
