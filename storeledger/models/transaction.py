"""
Core Data Models for Store Ledger

These models define the schemas for everything the client keeps in memory
or exchanges with the ledger backend. They are designed to:
1. Enforce type safety at runtime
2. Be immutable once built, so cached records cannot be edited by aliasing
3. Be serializable for the backend wire format and for AI prompts

DESIGN DECISION: Amounts are Decimal end to end. Floats only appear at the
edges (user input, JSON from a backend) and are converted on the way in.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# The synthetic directory entry meaning "no filter"
ALL_STORES = "All Stores"


# =============================================================================
# ENUMS
# =============================================================================

class TransactionKind(str, Enum):
    """Direction of a transaction."""
    INCOME = "Income"
    EXPENSE = "Expense"


class View(str, Enum):
    """
    Top-level views of the client.

    Only the views that show ledger state trigger a resync on navigation.
    """
    INPUT = "input"
    SUMMARY = "summary"
    AI = "ai"
    STORES = "stores"


LEDGER_VIEWS = frozenset({View.INPUT, View.SUMMARY, View.STORES})


class StartupState(str, Enum):
    """Startup sequence: wait for the transport, then serve."""
    WAITING_FOR_TRANSPORT = "waiting_for_transport"
    READY = "ready"
    FAILED = "failed"


# =============================================================================
# TRANSACTION MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    A canonical transaction record as returned by the backend.

    `id` and `timestamp` are assigned by the backend. The wire name of
    `kind` is `type`.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Backend-assigned opaque identifier"
    )
    kind: TransactionKind = Field(
        ...,
        alias="type",
        description="Income or Expense"
    )
    amount: Annotated[
        Decimal,
        Field(gt=0, description="Amount in the transaction's native currency unit")
    ]
    description: str = Field(..., min_length=1)
    store_name: str = Field(..., min_length=1)
    timestamp: int = Field(
        ...,
        ge=0,
        description="Seconds since epoch, backend-assigned"
    )

    @property
    def short_id(self) -> str:
        """First eight characters of the id, for status messages."""
        return self.id[:8]

    def to_wire_dict(self) -> dict:
        """Serialize with wire field names and JSON-friendly values."""
        return self.model_dump(mode="json", by_alias=True)


class TransactionDraft(BaseModel):
    """
    Validated, trimmed fields for an add or update request.

    Only the validator builds these, so anything holding a draft has
    already passed the local preconditions.
    """
    model_config = ConfigDict(frozen=True)

    kind: TransactionKind
    amount: Decimal = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    store_name: str = Field(..., min_length=1)


# =============================================================================
# STORE & AGGREGATION MODELS
# =============================================================================

class StoreEntry(BaseModel):
    """A store name with its authoritative transaction count."""
    model_config = ConfigDict(frozen=True)

    name: str
    transaction_count: int = Field(ge=0)


class Totals(BaseModel):
    """Income, expense and balance of a filtered transaction set."""
    model_config = ConfigDict(frozen=True)

    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")


# =============================================================================
# PENDING ACTIONS (two-phase confirm/cancel flows)
# =============================================================================

class PendingEditTransaction(BaseModel):
    """User opened the editor for a transaction."""
    model_config = ConfigDict(frozen=True)

    transaction: Transaction

    @property
    def transaction_id(self) -> str:
        return self.transaction.id


class PendingDeleteTransaction(BaseModel):
    """User asked to delete a transaction and has not confirmed yet."""
    model_config = ConfigDict(frozen=True)

    transaction_id: str


class PendingRenameStore(BaseModel):
    """User opened the rename dialog for a store."""
    model_config = ConfigDict(frozen=True)

    store_name: str


class PendingDeleteStore(BaseModel):
    """User asked to delete a store and has not confirmed yet."""
    model_config = ConfigDict(frozen=True)

    store_name: str


PendingAction = Union[
    PendingEditTransaction,
    PendingDeleteTransaction,
    PendingRenameStore,
    PendingDeleteStore,
]


# =============================================================================
# MUTATION OUTCOME
# =============================================================================

class MutationResult(BaseModel):
    """
    Outcome of a coordinator operation.

    Coordinator methods never raise; they return one of these.
    `message` is the user-facing status string.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    message: str
    transaction: Optional[Transaction] = None
    error: Optional[Exception] = None

    @classmethod
    def ok(cls, message: str, transaction: Optional[Transaction] = None) -> "MutationResult":
        return cls(success=True, message=message, transaction=transaction)

    @classmethod
    def failed(cls, message: str, error: Exception) -> "MutationResult":
        return cls(success=False, message=message, error=error)
