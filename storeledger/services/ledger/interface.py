"""
Abstract Ledger Gateway Interface

DESIGN DECISION: The client talks to the ledger backend only through this
interface. This allows us to:
1. Swap Google Sheets for another backend later
2. Use in-memory storage for testing and offline runs
3. Keep the coordinator decoupled from transport details

The contract is request/response only: no streaming, no cancellation, no
timeouts. A hung call hangs its caller.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from storeledger.models.audit import AuditEvent
from storeledger.models.transaction import Transaction, TransactionKind


class LedgerGatewayInterface(ABC):
    """
    Abstract interface for the ledger backend.

    Any backend implementation must implement these methods and wrap its
    own failures into BackendError (or NotFoundError).
    """

    @abstractmethod
    async def is_available(self) -> bool:
        """
        Check that the transport is live.

        Called once by the startup sequence after the ready signal.
        """
        pass

    @abstractmethod
    async def list_transactions(self) -> list[Transaction]:
        """
        Get every transaction, in backend order.

        Raises:
            BackendError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def list_unique_stores(self) -> list[str]:
        """
        Get the distinct store names.

        The result may include the sentinel; callers filter it.

        Raises:
            BackendError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def get_store_info(self) -> dict[str, int]:
        """
        Get the transaction count per store.

        Raises:
            BackendError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def add_transaction(
        self,
        kind: TransactionKind,
        amount: Decimal,
        description: str,
        store_name: str,
    ) -> Transaction:
        """
        Create a transaction.

        Returns:
            The canonical record, with backend-assigned id and timestamp

        Raises:
            BackendError: If the write fails
        """
        pass

    @abstractmethod
    async def update_transaction(
        self,
        transaction_id: str,
        kind: TransactionKind,
        amount: Decimal,
        description: str,
        store_name: str,
    ) -> Transaction:
        """
        Replace every field of an existing transaction.

        Returns:
            The canonical updated record

        Raises:
            NotFoundError: If the id does not exist
            BackendError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> None:
        """
        Delete a transaction by id.

        Raises:
            NotFoundError: If the id does not exist
            BackendError: If the write fails
        """
        pass

    @abstractmethod
    async def rename_store(self, old_name: str, new_name: str) -> None:
        """
        Move every transaction of `old_name` to `new_name`.

        Raises:
            NotFoundError: If no transaction uses `old_name`
            BackendError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_store(self, store_name: str) -> None:
        """
        Delete a store and all of its transactions.

        Raises:
            BackendError: If the write fails or the store is unknown
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass


class BackendError(Exception):
    """Base exception for ledger backend operations. The message is opaque."""
    pass


class NotFoundError(BackendError):
    """Transaction or store no longer exists in the backend."""
    pass


class TransportError(BackendError):
    """Could not reach the backend."""
    pass
