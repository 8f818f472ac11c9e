"""Services package."""

from storeledger.services.ledger import (
    AuditStorageInterface,
    BackendError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerGateway,
    InMemoryLedgerGateway,
    LedgerGatewayInterface,
    NotFoundError,
    TransportError,
)

__all__ = [
    "AuditStorageInterface",
    "BackendError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerGateway",
    "InMemoryLedgerGateway",
    "LedgerGatewayInterface",
    "NotFoundError",
    "TransportError",
]
