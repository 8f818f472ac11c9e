"""
Audit Models for Store Ledger

An AuditEvent records one thing that happened to the ledger or to the
client's view of it: a mutation, a rejected request, a refresh that
failed, the startup outcome, an AI call.

Events are only ever appended. Nothing in the client edits or removes
one once it is written.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """What an event records."""
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Stores
    STORE_RENAMED = "store_renamed"
    STORE_DELETED = "store_deleted"

    # Failures at the coordinator boundary
    VALIDATION_REJECTED = "validation_rejected"
    MUTATION_FAILED = "mutation_failed"

    # Synchronization
    SYNC_FAILED = "sync_failed"
    STARTUP_READY = "startup_ready"
    STARTUP_FAILED = "startup_failed"

    # AI
    AI_SUMMARY_REQUESTED = "ai_summary_requested"
    AI_SUMMARY_FAILED = "ai_summary_failed"


class AuditSeverity(str, Enum):
    """Maps onto the structlog method used for the local log line."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Column order of the audit worksheet
AUDIT_FIELDS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details",
    "error_message",
    "is_user_action",
]


class AuditEvent(BaseModel):
    """One audit record."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=_utcnow, description="UTC")

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # "transaction", "store" or "ai"
    entity_type: Optional[str] = None
    entity_id: Optional[str] = Field(
        default=None,
        description="Transaction id or store name"
    )

    # Shared by all events of one user action
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """JSON-safe fields for a structlog event."""
        return self.model_dump(mode="json")

    def to_sheets_row(self) -> list:
        """Cells in AUDIT_FIELDS order; empty strings for missing values."""
        data = self.to_log_dict()
        data["details"] = json.dumps(self.details) if self.details else ""

        row = []
        for name in AUDIT_FIELDS:
            value = data[name]
            if value is None:
                value = ""
            elif name == "is_user_action":
                value = str(value)
            row.append(value)
        return row


class AuditEventBuilder:
    """
    Factory methods, one per AuditEventType.

    Usage:
        event = AuditEventBuilder.transaction_added(t.id, "Income", "100", "StoreX", correlation_id)
        event = AuditEventBuilder.store_deleted("StoreX", 3, correlation_id)
    """

    @staticmethod
    def transaction_added(
        transaction_id: str,
        kind: str,
        amount: str,
        store_name: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"{kind} of {amount} added to {store_name}",
            details={"kind": kind, "amount": amount, "store_name": store_name},
            is_user_action=True,
        )

    @staticmethod
    def transaction_updated(
        transaction_id: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction {transaction_id[:8]} updated",
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction {transaction_id[:8]} deleted",
            is_user_action=True,
        )

    @staticmethod
    def store_renamed(
        old_name: str,
        new_name: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_RENAMED,
            entity_type="store",
            entity_id=old_name,
            correlation_id=correlation_id,
            description=f"Store renamed: {old_name} -> {new_name}",
            details={"old_name": old_name, "new_name": new_name},
            is_user_action=True,
        )

    @staticmethod
    def store_deleted(
        store_name: str,
        removed_locally: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            entity_id=store_name,
            correlation_id=correlation_id,
            description=f"Store deleted with its transactions: {store_name}",
            details={"removed_from_cache": removed_locally},
            is_user_action=True,
        )

    @staticmethod
    def validation_rejected(
        operation: str,
        reason: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"{operation} rejected before reaching the backend",
            error_message=reason,
            details={"operation": operation},
            is_user_action=True,
        )

    @staticmethod
    def mutation_failed(
        operation: str,
        error_message: str,
        correlation_id: UUID,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_FAILED,
            severity=AuditSeverity.ERROR,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Backend rejected {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def sync_failed(
        data_set: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Could not refresh {data_set}",
            error_message=error_message,
            details={"data_set": data_set},
        )

    @staticmethod
    def startup_ready() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STARTUP_READY,
            description="Backend transport ready, initial sync issued",
        )

    @staticmethod
    def startup_failed(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STARTUP_FAILED,
            severity=AuditSeverity.CRITICAL,
            description="Backend transport never became available",
            error_message=reason,
        )

    @staticmethod
    def ai_summary_requested(
        prompt_kind: str,
        prompt_length: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AI_SUMMARY_REQUESTED,
            entity_type="ai",
            correlation_id=correlation_id,
            description=f"AI {prompt_kind} requested",
            details={"prompt_kind": prompt_kind, "prompt_length": prompt_length},
            is_user_action=True,
        )

    @staticmethod
    def ai_summary_failed(
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AI_SUMMARY_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ai",
            correlation_id=correlation_id,
            description="AI summarization service call failed",
            error_message=error_message,
        )
