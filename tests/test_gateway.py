"""Tests for the ledger backends."""

import threading

import pytest
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

from storeledger.models.audit import AuditEventBuilder
from storeledger.models.transaction import ALL_STORES, TransactionKind
from storeledger.services.ledger import (
    BackendError,
    GoogleSheetsAuditStorage,
    GoogleSheetsLedgerGateway,
    InMemoryLedgerGateway,
    NotFoundError,
)
from storeledger.services.ledger.google_sheets import row_to_transaction, transaction_to_row


class TestInMemoryGateway:
    """Tests for the in-memory backend."""

    @pytest.mark.asyncio
    async def test_add_assigns_id_and_timestamp(self):
        gateway = InMemoryLedgerGateway()
        created = await gateway.add_transaction(
            TransactionKind.INCOME, Decimal("100"), "Sale", "StoreX",
        )
        assert created.id
        assert created.timestamp > 0
        assert await gateway.list_transactions() == [created]

    @pytest.mark.asyncio
    async def test_add_rejects_non_positive(self):
        gateway = InMemoryLedgerGateway()
        with pytest.raises(BackendError):
            await gateway.add_transaction(TransactionKind.INCOME, Decimal("0"), "Sale", "StoreX")

    @pytest.mark.asyncio
    async def test_unique_stores_include_sentinel(self):
        """Test that the backend's store list carries the sentinel."""
        gateway = InMemoryLedgerGateway()
        await gateway.add_transaction(TransactionKind.INCOME, Decimal("1"), "a", "StoreB")
        await gateway.add_transaction(TransactionKind.INCOME, Decimal("1"), "b", "StoreA")
        stores = await gateway.list_unique_stores()
        assert ALL_STORES in stores
        assert {"StoreA", "StoreB"} <= set(stores)

    @pytest.mark.asyncio
    async def test_store_info_counts(self):
        gateway = InMemoryLedgerGateway()
        for store in ["StoreA", "StoreA", "StoreB"]:
            await gateway.add_transaction(TransactionKind.EXPENSE, Decimal("1"), "x", store)
        assert await gateway.get_store_info() == {"StoreA": 2, "StoreB": 1}

    @pytest.mark.asyncio
    async def test_update_unknown_id(self):
        gateway = InMemoryLedgerGateway()
        with pytest.raises(NotFoundError):
            await gateway.update_transaction(
                "missing", TransactionKind.INCOME, Decimal("1"), "x", "StoreA",
            )

    @pytest.mark.asyncio
    async def test_update_keeps_id_and_timestamp(self):
        gateway = InMemoryLedgerGateway()
        created = await gateway.add_transaction(TransactionKind.INCOME, Decimal("1"), "x", "A")
        updated = await gateway.update_transaction(
            created.id, TransactionKind.EXPENSE, Decimal("2"), "y", "B",
        )
        assert updated.id == created.id
        assert updated.timestamp == created.timestamp
        assert updated.kind == TransactionKind.EXPENSE

    @pytest.mark.asyncio
    async def test_rename_and_delete_unknown_store(self):
        """Test that store operations without matching transactions fail."""
        gateway = InMemoryLedgerGateway()
        with pytest.raises(NotFoundError):
            await gateway.rename_store("Nope", "Other")
        with pytest.raises(NotFoundError):
            await gateway.delete_store("Nope")

    @pytest.mark.asyncio
    async def test_delete_store_removes_its_transactions(self):
        gateway = InMemoryLedgerGateway()
        await gateway.add_transaction(TransactionKind.INCOME, Decimal("1"), "x", "A")
        await gateway.add_transaction(TransactionKind.INCOME, Decimal("1"), "y", "B")
        await gateway.delete_store("A")
        assert [t.store_name for t in gateway.transactions] == ["B"]

    @pytest.mark.asyncio
    async def test_availability(self):
        assert await InMemoryLedgerGateway().is_available()
        assert not await InMemoryLedgerGateway(available=False).is_available()


class TestSheetsRows:
    """Tests for spreadsheet row conversion."""

    def test_row_round_trip(self):
        row = ["t1", "Expense", "30.50", "Rent", "StoreX", "1700000000"]
        transaction = row_to_transaction(row)
        assert transaction.kind == TransactionKind.EXPENSE
        assert transaction.amount == Decimal("30.50")
        assert transaction_to_row(transaction) == row


class TestSheetsGateway:
    """Tests for the Google Sheets backend with a mocked worksheet."""

    def make_gateway(self, rows):
        sheet = MagicMock()
        sheet.get_all_values.return_value = [
            ["id", "type", "amount", "description", "store_name", "timestamp"],
            *rows,
        ]
        client = MagicMock()
        client.get_transactions_sheet.return_value = sheet
        return GoogleSheetsLedgerGateway(client), sheet

    @pytest.mark.asyncio
    async def test_list_transactions(self):
        gateway, _ = self.make_gateway([
            ["t1", "Income", "100", "Sale", "StoreX", "1"],
            ["t2", "Expense", "30", "Rent", "StoreY", "2"],
        ])
        transactions = await gateway.list_transactions()
        assert [t.id for t in transactions] == ["t1", "t2"]
        assert await gateway.get_store_info() == {"StoreX": 1, "StoreY": 1}

    @pytest.mark.asyncio
    async def test_delete_missing_transaction(self):
        gateway, sheet = self.make_gateway([["t1", "Income", "100", "Sale", "StoreX", "1"]])
        with pytest.raises(NotFoundError):
            await gateway.delete_transaction("missing")
        sheet.delete_rows.assert_not_called()

    @pytest.mark.asyncio
    async def test_sheet_errors_become_backend_errors(self):
        client = MagicMock()
        client.get_transactions_sheet.side_effect = RuntimeError("quota exceeded")
        gateway = GoogleSheetsLedgerGateway(client)
        with pytest.raises(BackendError, match="quota exceeded"):
            await gateway.list_transactions()

    @pytest.mark.asyncio
    async def test_sheet_calls_run_off_the_event_loop(self):
        """Test that reads and writes happen in a worker thread."""
        gateway, sheet = self.make_gateway([["t1", "Income", "100", "Sale", "StoreX", "1"]])
        loop_thread = threading.get_ident()
        seen = []
        sheet.get_all_values.side_effect = lambda: (
            seen.append(threading.get_ident())
            or [["id", "type", "amount", "description", "store_name", "timestamp"],
                ["t1", "Income", "100", "Sale", "StoreX", "1"]]
        )
        sheet.append_row.side_effect = lambda *args, **kwargs: seen.append(threading.get_ident())
        sheet.update_cell.side_effect = lambda *args: seen.append(threading.get_ident())

        await gateway.list_transactions()
        created = await gateway.add_transaction(TransactionKind.EXPENSE, Decimal("5"), "Tea", "StoreX")
        await gateway.rename_store("StoreX", "StoreZ")

        assert created.store_name == "StoreX"
        assert sheet.append_row.call_count == 1
        sheet.update_cell.assert_called_once_with(2, 5, "StoreZ")
        assert seen
        assert loop_thread not in seen

    @pytest.mark.asyncio
    async def test_audit_rows_written_off_the_event_loop(self):
        sheet = MagicMock()
        client = MagicMock()
        client.get_audit_sheet.return_value = sheet
        loop_thread = threading.get_ident()
        seen = []
        sheet.append_row.side_effect = lambda *args, **kwargs: seen.append(threading.get_ident())

        event = AuditEventBuilder.store_renamed("StoreX", "StoreZ", uuid4())
        assert await GoogleSheetsAuditStorage(client).append_event(event) is True
        assert len(seen) == 1
        assert seen[0] != loop_thread


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
