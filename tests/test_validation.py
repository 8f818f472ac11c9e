"""Tests for local precondition checks."""

import pytest
from decimal import Decimal

from storeledger.models.transaction import ALL_STORES, TransactionKind
from storeledger.validation import InvalidOperation, LedgerValidator, ValidationError


@pytest.fixture
def validator():
    return LedgerValidator()


class TestTransactionValidation:
    """Tests for add/update field validation."""

    def test_valid_transaction(self, validator):
        """Test that valid fields produce a trimmed draft."""
        draft = validator.validate_transaction("Income", "100", "  Sale ", " StoreX ")
        assert draft.kind == TransactionKind.INCOME
        assert draft.amount == Decimal("100")
        assert draft.description == "Sale"
        assert draft.store_name == "StoreX"

    def test_accepts_enum_and_float(self, validator):
        """Test enum kinds and float amounts."""
        draft = validator.validate_transaction(TransactionKind.EXPENSE, 30.1, "Rent", "StoreX")
        assert draft.kind == TransactionKind.EXPENSE
        assert draft.amount == Decimal("30.1")

    @pytest.mark.parametrize("amount", ["0", "-5", 0, -0.01, "abc", "nan", "inf", True])
    def test_rejects_bad_amounts(self, validator, amount):
        """Test that zero, negative, non-numeric and non-finite amounts fail."""
        with pytest.raises(ValidationError, match="Invalid amount"):
            validator.validate_transaction("Income", amount, "Sale", "StoreX")

    @pytest.mark.parametrize("amount,description,store", [
        ("", "Sale", "StoreX"),
        (None, "Sale", "StoreX"),
        ("10", "   ", "StoreX"),
        ("10", "Sale", ""),
    ])
    def test_rejects_missing_fields(self, validator, amount, description, store):
        """Test the required-fields message."""
        with pytest.raises(ValidationError, match="All fields"):
            validator.validate_transaction("Income", amount, description, store)

    def test_rejects_unknown_kind(self, validator):
        with pytest.raises(ValidationError, match="Invalid transaction type"):
            validator.validate_transaction("Transfer", "10", "Sale", "StoreX")


class TestStoreValidation:
    """Tests for rename and delete preconditions."""

    def test_rename_returns_trimmed_name(self, validator):
        assert validator.validate_rename("StoreX", "  StoreY ") == "StoreY"

    def test_rename_blank(self, validator):
        """Test that a blank new name is rejected."""
        with pytest.raises(ValidationError):
            validator.validate_rename("StoreX", "   ")

    def test_rename_same_name(self, validator):
        """Test that renaming to the current name is rejected."""
        with pytest.raises(ValidationError, match="same"):
            validator.validate_rename("StoreX", " StoreX ")

    def test_rename_sentinel(self, validator):
        """Test that the sentinel cannot be renamed."""
        with pytest.raises(InvalidOperation):
            validator.validate_rename(ALL_STORES, "Other")

    def test_delete_sentinel(self, validator):
        """Test that the sentinel cannot be deleted."""
        with pytest.raises(InvalidOperation):
            validator.validate_store_deletion(ALL_STORES)

    def test_delete_blank(self, validator):
        with pytest.raises(ValidationError):
            validator.validate_store_deletion("")


class TestQuestionValidation:
    """Tests for AI question validation."""

    def test_blank_question(self, validator):
        with pytest.raises(ValidationError, match="Please write a question"):
            validator.validate_question("   ")

    def test_question_trimmed(self, validator):
        assert validator.validate_question("  How am I doing? ") == "How am I doing?"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
