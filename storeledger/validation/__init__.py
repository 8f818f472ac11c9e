"""Local validation package."""

from storeledger.validation.validator import (
    InvalidOperation,
    LedgerValidator,
    ValidationError,
)

__all__ = ["InvalidOperation", "LedgerValidator", "ValidationError"]
