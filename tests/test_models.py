"""
Tests for Store Ledger models

Test strategy:
1. Unit tests for individual components (models, validators, formatting)
2. Integration tests for flows (with the in-memory backend and fake AI models)
3. No real API calls in tests
"""

import json
import pytest
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from storeledger.models.transaction import (
    ALL_STORES,
    LEDGER_VIEWS,
    MutationResult,
    PendingEditTransaction,
    StoreEntry,
    Totals,
    Transaction,
    TransactionKind,
    View,
)
from storeledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


def make_transaction(**overrides) -> Transaction:
    fields = {
        "id": "a1b2c3d4-0000-0000-0000-000000000000",
        "kind": TransactionKind.INCOME,
        "amount": Decimal("100"),
        "description": "Sale",
        "store_name": "StoreX",
        "timestamp": 1700000000,
    }
    fields.update(overrides)
    return Transaction(**fields)


class TestTransactionModels:
    """Tests for ledger Pydantic models."""

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        t = make_transaction()
        assert t.kind == TransactionKind.INCOME
        assert t.amount == Decimal("100")
        assert t.store_name == "StoreX"

    def test_transaction_accepts_wire_names(self):
        """Test that the backend's 'type' field populates kind."""
        t = Transaction(
            id="x1",
            type="Expense",
            amount="30.5",
            description="Rent",
            store_name="StoreX",
            timestamp=0,
        )
        assert t.kind == TransactionKind.EXPENSE
        assert t.amount == Decimal("30.5")

    def test_transaction_is_immutable(self):
        """Test that cached records cannot be edited in place."""
        t = make_transaction()
        with pytest.raises(PydanticValidationError):
            t.amount = Decimal("5")

    def test_transaction_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(PydanticValidationError):
            make_transaction(amount=Decimal("0"))
        with pytest.raises(PydanticValidationError):
            make_transaction(amount=Decimal("-1"))

    def test_short_id(self):
        """Test the eight-character id used in status messages."""
        assert make_transaction().short_id == "a1b2c3d4"

    def test_wire_dict_uses_type_alias(self):
        """Test wire serialization."""
        data = make_transaction().to_wire_dict()
        assert data["type"] == "Income"
        assert "kind" not in data
        assert data["store_name"] == "StoreX"
        json.dumps(data)

    def test_pending_edit_exposes_id(self):
        """Test PendingEditTransaction id shortcut."""
        t = make_transaction()
        assert PendingEditTransaction(transaction=t).transaction_id == t.id

    def test_totals_default_to_zero(self):
        """Test empty Totals."""
        totals = Totals()
        assert totals.income == totals.expense == totals.balance == Decimal("0")

    def test_store_entry_rejects_negative_count(self):
        """Test StoreEntry count bound."""
        with pytest.raises(PydanticValidationError):
            StoreEntry(name="StoreX", transaction_count=-1)

    def test_mutation_result_helpers(self):
        """Test MutationResult ok/failed constructors."""
        t = make_transaction()
        ok = MutationResult.ok("done", t)
        assert ok.success and ok.transaction == t and ok.error is None

        error = ValueError("bad")
        failed = MutationResult.failed("bad", error)
        assert not failed.success
        assert failed.error is error

    def test_ledger_views(self):
        """Test which views show ledger state."""
        assert View.AI not in LEDGER_VIEWS
        assert {View.INPUT, View.SUMMARY, View.STORES} == set(LEDGER_VIEWS)

    def test_sentinel_name(self):
        assert ALL_STORES == "All Stores"


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Test event",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.STORE_RENAMED,
            description="Test",
            entity_id="StoreX",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "store_renamed"
        assert log_dict["entity_id"] == "StoreX"

    def test_audit_event_to_sheets_row(self):
        """Test conversion to Google Sheets row."""
        event = AuditEvent(
            event_type=AuditEventType.MUTATION_FAILED,
            description="Test",
            details={"operation": "add transaction"},
        )
        row = event.to_sheets_row()
        assert len(row) == 11
        assert row[2] == "mutation_failed"
        assert json.loads(row[8]) == {"operation": "add transaction"}

    def test_audit_builder_transaction_added(self):
        """Test AuditEventBuilder for additions."""
        correlation_id = uuid4()
        event = AuditEventBuilder.transaction_added(
            transaction_id="t1",
            kind="Income",
            amount="100",
            store_name="StoreX",
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.entity_id == "t1"
        assert event.correlation_id == correlation_id
        assert event.is_user_action

    def test_audit_builder_store_deleted_is_warning(self):
        """Test that store deletions are flagged for review."""
        event = AuditEventBuilder.store_deleted("StoreX", 3, uuid4())
        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == "StoreX"

    def test_audit_builder_startup_failed_is_critical(self):
        """Test startup failure severity."""
        event = AuditEventBuilder.startup_failed("no transport")
        assert event.severity == AuditSeverity.CRITICAL
        assert event.error_message == "no transport"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
