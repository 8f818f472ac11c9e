"""Shared fixtures: an in-memory backend that records calls and can fail on demand."""

import asyncio
from decimal import Decimal

import pytest

from storeledger.audit import AuditLogger
from storeledger.models.transaction import Transaction, TransactionKind
from storeledger.orchestrator import MutationCoordinator, SyncOrchestrator
from storeledger.services.ledger import BackendError, InMemoryLedgerGateway
from storeledger.state import LedgerState


class RecordingGateway(InMemoryLedgerGateway):
    """In-memory backend that counts calls and raises for names in `fail_on`."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls: list[str] = []
        self.fail_on: set[str] = set()

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise BackendError(f"{name} exploded")

    def count(self, name: str) -> int:
        return self.calls.count(name)

    @property
    def mutation_calls(self) -> list[str]:
        reads = {"is_available", "list_transactions", "list_unique_stores", "get_store_info"}
        return [c for c in self.calls if c not in reads]

    async def is_available(self):
        self._record("is_available")
        return await super().is_available()

    async def list_transactions(self):
        self._record("list_transactions")
        return await super().list_transactions()

    async def list_unique_stores(self):
        self._record("list_unique_stores")
        return await super().list_unique_stores()

    async def get_store_info(self):
        self._record("get_store_info")
        return await super().get_store_info()

    async def add_transaction(self, *args):
        self._record("add_transaction")
        return await super().add_transaction(*args)

    async def update_transaction(self, *args):
        self._record("update_transaction")
        return await super().update_transaction(*args)

    async def delete_transaction(self, *args):
        self._record("delete_transaction")
        return await super().delete_transaction(*args)

    async def rename_store(self, *args):
        self._record("rename_store")
        return await super().rename_store(*args)

    async def delete_store(self, *args):
        self._record("delete_store")
        return await super().delete_store(*args)


def seed_transactions() -> list[Transaction]:
    return [
        Transaction(
            id="11111111-aaaa", kind=TransactionKind.INCOME, amount=Decimal("100"),
            description="Sale", store_name="StoreX", timestamp=1,
        ),
        Transaction(
            id="22222222-bbbb", kind=TransactionKind.EXPENSE, amount=Decimal("30"),
            description="Supplies", store_name="StoreX", timestamp=2,
        ),
        Transaction(
            id="33333333-cccc", kind=TransactionKind.INCOME, amount=Decimal("50"),
            description="Sale", store_name="StoreY", timestamp=3,
        ),
    ]


@pytest.fixture
def ready():
    """A transport-ready signal that has already fired."""
    signal = asyncio.Event()
    signal.set()
    return signal


@pytest.fixture
def gateway():
    return RecordingGateway(seed_transactions())


@pytest.fixture
def state():
    return LedgerState()


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def sync(state, gateway, audit_logger):
    return SyncOrchestrator(state, gateway, audit_logger=audit_logger)


@pytest.fixture
def coordinator(state, gateway, sync, audit_logger):
    return MutationCoordinator(state, gateway, sync, audit_logger=audit_logger)
