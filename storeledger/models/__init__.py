"""
Data Models Package

This package contains all Pydantic models used in the Store Ledger client.
All data flowing through the system must conform to these schemas.
"""

from storeledger.models.transaction import (
    ALL_STORES,
    LEDGER_VIEWS,
    MutationResult,
    PendingAction,
    PendingDeleteStore,
    PendingDeleteTransaction,
    PendingEditTransaction,
    PendingRenameStore,
    StartupState,
    StoreEntry,
    Totals,
    Transaction,
    TransactionDraft,
    TransactionKind,
    View,
)
from storeledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "ALL_STORES",
    "LEDGER_VIEWS",
    "MutationResult",
    "PendingAction",
    "PendingDeleteStore",
    "PendingDeleteTransaction",
    "PendingEditTransaction",
    "PendingRenameStore",
    "StartupState",
    "StoreEntry",
    "Totals",
    "Transaction",
    "TransactionDraft",
    "TransactionKind",
    "View",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
