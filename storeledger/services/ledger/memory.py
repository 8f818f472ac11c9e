"""
In-Memory Ledger Gateway

Keeps the ledger in a Python list and applies the same rules the real
backend applies. Used for tests and for running the client without a
configured spreadsheet.

Every call yields to the event loop once, so callers observe the same
suspend points they would with a remote backend.
"""

import asyncio
import time
from decimal import Decimal
from typing import Iterable, Optional
from uuid import uuid4

from storeledger.models.transaction import ALL_STORES, Transaction, TransactionKind
from storeledger.services.ledger.interface import (
    BackendError,
    LedgerGatewayInterface,
    NotFoundError,
)


class InMemoryLedgerGateway(LedgerGatewayInterface):
    """Ledger backend held in process memory."""

    def __init__(
        self,
        transactions: Optional[Iterable[Transaction]] = None,
        available: bool = True,
    ):
        self._transactions: list[Transaction] = list(transactions or [])
        self._available = available

    @property
    def transactions(self) -> list[Transaction]:
        """Snapshot of the stored records."""
        return list(self._transactions)

    def _check_fields(self, amount: Decimal, description: str, store_name: str) -> None:
        if amount <= 0:
            raise BackendError("Amount must be positive.")
        if not description.strip() or not store_name.strip():
            raise BackendError("Description and store name cannot be empty.")

    async def is_available(self) -> bool:
        await asyncio.sleep(0)
        return self._available

    async def list_transactions(self) -> list[Transaction]:
        await asyncio.sleep(0)
        return list(self._transactions)

    async def list_unique_stores(self) -> list[str]:
        await asyncio.sleep(0)
        stores = {t.store_name for t in self._transactions}
        stores.add(ALL_STORES)
        return sorted(stores)

    async def get_store_info(self) -> dict[str, int]:
        await asyncio.sleep(0)
        counts: dict[str, int] = {}
        for t in self._transactions:
            counts[t.store_name] = counts.get(t.store_name, 0) + 1
        return counts

    async def add_transaction(
        self,
        kind: TransactionKind,
        amount: Decimal,
        description: str,
        store_name: str,
    ) -> Transaction:
        await asyncio.sleep(0)
        self._check_fields(amount, description, store_name)

        transaction = Transaction(
            id=str(uuid4()),
            kind=kind,
            amount=amount,
            description=description.strip(),
            store_name=store_name.strip(),
            timestamp=int(time.time()),
        )
        self._transactions.append(transaction)
        return transaction

    async def update_transaction(
        self,
        transaction_id: str,
        kind: TransactionKind,
        amount: Decimal,
        description: str,
        store_name: str,
    ) -> Transaction:
        await asyncio.sleep(0)
        self._check_fields(amount, description, store_name)

        for idx, existing in enumerate(self._transactions):
            if existing.id == transaction_id:
                updated = existing.model_copy(update={
                    "kind": kind,
                    "amount": amount,
                    "description": description.strip(),
                    "store_name": store_name.strip(),
                })
                self._transactions[idx] = updated
                return updated

        raise NotFoundError(f"Transaction with ID {transaction_id} not found.")

    async def delete_transaction(self, transaction_id: str) -> None:
        await asyncio.sleep(0)
        remaining = [t for t in self._transactions if t.id != transaction_id]
        if len(remaining) == len(self._transactions):
            raise NotFoundError(f"Transaction with ID {transaction_id} not found.")
        self._transactions = remaining

    async def rename_store(self, old_name: str, new_name: str) -> None:
        await asyncio.sleep(0)
        old_name, new_name = old_name.strip(), new_name.strip()
        if not old_name or not new_name:
            raise BackendError("Store names cannot be empty.")
        if old_name == ALL_STORES:
            raise BackendError(f"Cannot rename '{ALL_STORES}'.")
        if old_name == new_name:
            raise BackendError("The new store name is the same as the old one.")

        renamed = 0
        for idx, t in enumerate(self._transactions):
            if t.store_name == old_name:
                self._transactions[idx] = t.model_copy(update={"store_name": new_name})
                renamed += 1

        if not renamed:
            raise NotFoundError(
                f"Store '{old_name}' not found or has no transactions to rename."
            )

    async def delete_store(self, store_name: str) -> None:
        await asyncio.sleep(0)
        store_name = store_name.strip()
        if not store_name:
            raise BackendError("Store name cannot be empty.")
        if store_name == ALL_STORES:
            raise BackendError(f"Cannot delete '{ALL_STORES}'.")

        remaining = [t for t in self._transactions if t.store_name != store_name]
        if len(remaining) == len(self._transactions):
            raise NotFoundError(
                f"Store '{store_name}' not found or has no transactions to delete."
            )
        self._transactions = remaining
