"""
Local Precondition Checks

DESIGN DECISION: Everything the client can reject on its own is rejected
here, before any backend call:
- blank descriptions, store names and AI questions
- missing, non-numeric, non-finite or non-positive amounts
- unknown transaction kinds
- renaming or deleting the "All Stores" sentinel
- renaming a store to a blank name or to its current name

IMPORTANT: Validation NEVER silently fixes issues beyond trimming
surrounding whitespace. It raises, and the coordinator turns the message
into a status string.
"""

from decimal import Decimal, InvalidOperation as DecimalInvalidOperation
from typing import Union

from storeledger.models.transaction import (
    ALL_STORES,
    TransactionDraft,
    TransactionKind,
)


AmountInput = Union[str, int, float, Decimal]


class ValidationError(ValueError):
    """A local precondition failed; the request never reaches the backend."""
    pass


class InvalidOperation(ValueError):
    """The operation is not allowed on its target (e.g. the sentinel store)."""
    pass


class LedgerValidator:
    """
    Validates user-supplied fields for ledger mutations.

    Stateless; one instance can be shared by every flow.
    """

    def parse_kind(self, kind: Union[str, TransactionKind]) -> TransactionKind:
        """Accept an enum member or its wire value."""
        if isinstance(kind, TransactionKind):
            return kind
        try:
            return TransactionKind(str(kind).strip())
        except ValueError:
            raise ValidationError(f"Invalid transaction type: {kind}")

    def parse_amount(self, amount: AmountInput) -> Decimal:
        """
        Convert user input to a finite, positive Decimal.

        Strings are parsed as plain decimal numbers ("12.50").
        """
        if isinstance(amount, bool):
            raise ValidationError("Invalid amount. Enter a positive number.")

        try:
            if isinstance(amount, float):
                value = Decimal(repr(amount))
            else:
                value = Decimal(str(amount).strip())
        except (DecimalInvalidOperation, ValueError):
            raise ValidationError("Invalid amount. Enter a positive number.")

        if not value.is_finite() or value <= 0:
            raise ValidationError("Invalid amount. Enter a positive number.")
        return value

    def validate_transaction(
        self,
        kind: Union[str, TransactionKind],
        amount: AmountInput,
        description: str,
        store_name: str,
    ) -> TransactionDraft:
        """
        Check and trim the fields of an add or update request.

        Raises:
            ValidationError: If any field is missing or invalid
        """
        amount_missing = amount is None or (
            isinstance(amount, str) and not amount.strip()
        )
        if amount_missing or not (description or "").strip() or not (store_name or "").strip():
            raise ValidationError(
                "All fields (amount, description, store) are required."
            )

        return TransactionDraft(
            kind=self.parse_kind(kind),
            amount=self.parse_amount(amount),
            description=description.strip(),
            store_name=store_name.strip(),
        )

    def validate_rename(self, old_name: str, new_name: str) -> str:
        """
        Check a store rename and return the trimmed new name.

        Raises:
            ValidationError: Blank names, or new name equal to the old one
            InvalidOperation: Renaming the sentinel
        """
        if not (old_name or "").strip() or not (new_name or "").strip():
            raise ValidationError("Store name cannot be empty.")
        if old_name == ALL_STORES:
            raise InvalidOperation(f"Cannot rename '{ALL_STORES}'.")

        trimmed = new_name.strip()
        if trimmed == old_name:
            raise ValidationError("The new store name is the same as the old one.")
        return trimmed

    def validate_store_deletion(self, store_name: str) -> str:
        """
        Check a store deletion target.

        Raises:
            ValidationError: Blank name
            InvalidOperation: Deleting the sentinel
        """
        if not (store_name or "").strip():
            raise ValidationError("Store name cannot be empty.")
        if store_name == ALL_STORES:
            raise InvalidOperation(f"Cannot delete '{ALL_STORES}'.")
        return store_name

    def validate_question(self, question: str) -> str:
        """Reject blank AI questions; return the trimmed text."""
        if not (question or "").strip():
            raise ValidationError("Please write a question for the AI.")
        return question.strip()
