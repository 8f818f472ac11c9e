"""
Shared client state.

One instance is shared by the mutation coordinator, the synchronization
orchestrator and the summary flow. All of them run on the same event
loop, so no locking is needed.
"""

from typing import Optional

from storeledger.models.transaction import (
    PendingAction,
    StartupState,
    View,
)
from storeledger.state.cache import TransactionCache
from storeledger.state.directory import StoreDirectory


class LedgerState:
    """Cache, directory, status line, pending action and current view."""

    def __init__(
        self,
        cache: Optional[TransactionCache] = None,
        directory: Optional[StoreDirectory] = None,
    ):
        self.cache = cache if cache is not None else TransactionCache()
        self.directory = directory if directory is not None else StoreDirectory()
        self.status_message = ""
        self.pending: Optional[PendingAction] = None
        self.startup_state = StartupState.WAITING_FOR_TRANSPORT
        self.current_view = View.INPUT
        self.ai_response = ""
        self.ai_summary: Optional[str] = None
