"""Client-side ledger state package."""

from storeledger.state.cache import TransactionCache
from storeledger.state.directory import StoreDirectory
from storeledger.state.ledger_state import LedgerState

__all__ = ["LedgerState", "StoreDirectory", "TransactionCache"]
