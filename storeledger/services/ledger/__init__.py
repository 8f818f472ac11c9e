"""
Ledger Backend Package

Provides the abstract gateway contract and its implementations.
Google Sheets is the production backend; the in-memory gateway serves
tests and offline runs.
"""

from storeledger.services.ledger.interface import (
    AuditStorageInterface,
    BackendError,
    LedgerGatewayInterface,
    NotFoundError,
    TransportError,
)
from storeledger.services.ledger.memory import InMemoryLedgerGateway
from storeledger.services.ledger.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerGateway,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerGatewayInterface",
    # Exceptions
    "BackendError",
    "NotFoundError",
    "TransportError",
    # Implementations
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerGateway",
    "InMemoryLedgerGateway",
]
