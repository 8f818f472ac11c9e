"""
Transaction Cache

The client's in-memory copy of the ledger. It owns its records: they are
immutable models, and every read returns a new list, so nothing outside
the cache can change what it holds.

Append order is the authority for "most recent last".
"""

from typing import Iterable, Optional

from storeledger.models.transaction import Transaction


class TransactionCache:
    """Insertion-ordered collection of canonical transactions."""

    def __init__(self, transactions: Optional[Iterable[Transaction]] = None):
        self._transactions: list[Transaction] = list(transactions or [])

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self):
        return iter(list(self._transactions))

    def __contains__(self, transaction_id: object) -> bool:
        return any(t.id == transaction_id for t in self._transactions)

    def all(self) -> list[Transaction]:
        """Snapshot of every cached transaction, oldest first."""
        return list(self._transactions)

    def get(self, transaction_id: str) -> Optional[Transaction]:
        for t in self._transactions:
            if t.id == transaction_id:
                return t
        return None

    def replace_all(self, transactions: Iterable[Transaction]) -> None:
        """Replace the whole cache with authoritative backend state."""
        self._transactions = list(transactions)

    def append(self, transaction: Transaction) -> None:
        self._transactions.append(transaction)

    def replace(self, transaction: Transaction) -> bool:
        """
        Swap in the record with the same id, keeping its position.

        Returns False if no cached record has that id.
        """
        for idx, existing in enumerate(self._transactions):
            if existing.id == transaction.id:
                self._transactions[idx] = transaction
                return True
        return False

    def remove(self, transaction_id: str) -> bool:
        """Drop the record with this id. Returns False if it was not cached."""
        before = len(self._transactions)
        self._transactions = [t for t in self._transactions if t.id != transaction_id]
        return len(self._transactions) < before

    def rename_store(self, old_name: str, new_name: str) -> int:
        """Point every record of `old_name` at `new_name`. Returns how many moved."""
        renamed = 0
        for idx, t in enumerate(self._transactions):
            if t.store_name == old_name:
                self._transactions[idx] = t.model_copy(update={"store_name": new_name})
                renamed += 1
        return renamed

    def remove_store(self, store_name: str) -> int:
        """Drop every record of `store_name`. Returns how many were removed."""
        before = len(self._transactions)
        self._transactions = [
            t for t in self._transactions if t.store_name != store_name
        ]
        return before - len(self._transactions)
