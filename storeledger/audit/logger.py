"""
Audit trail for ledger activity.

Every mutation, rejected request, failed refresh, startup outcome and AI
call becomes one AuditEvent. Events related to one user action share a
correlation id, which is what ties a failed rename to the refresh that
followed it.

Writing to audit storage is best effort: a failed append is logged and
the flow carries on.
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from storeledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from storeledger.services.ledger.interface import AuditStorageInterface


# JSON lines through stdlib logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


_LOG_METHODS = {
    AuditSeverity.DEBUG: "debug",
    AuditSeverity.WARNING: "warning",
    AuditSeverity.ERROR: "error",
    AuditSeverity.CRITICAL: "critical",
}


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output to stderr at the given stdlib level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """Keeps every event in memory, logs it, and appends it to storage if one is set."""

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        self._storage = storage
        self._logger = structlog.get_logger("storeledger.audit")
        self.events: list[AuditEvent] = []

    async def log(self, event: AuditEvent) -> bool:
        """
        Record one event.

        Returns False only when a configured storage rejected the append.
        """
        self.events.append(event)
        log_dict = event.to_log_dict()

        emit = getattr(self._logger, _LOG_METHODS.get(event.severity, "info"))
        emit("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_transaction_added(
        self,
        transaction_id: str,
        kind: str,
        amount: str,
        store_name: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            kind=kind,
            amount=amount,
            store_name=store_name,
            correlation_id=correlation_id,
        ))

    async def log_transaction_updated(self, transaction_id: str, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.transaction_updated(transaction_id, correlation_id))

    async def log_transaction_deleted(self, transaction_id: str, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.transaction_deleted(transaction_id, correlation_id))

    async def log_store_renamed(
        self,
        old_name: str,
        new_name: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.store_renamed(old_name, new_name, correlation_id))

    async def log_store_deleted(
        self,
        store_name: str,
        removed_locally: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.store_deleted(store_name, removed_locally, correlation_id))

    async def log_validation_rejected(
        self,
        operation: str,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.validation_rejected(operation, reason, correlation_id))

    async def log_mutation_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: UUID,
        entity_id: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.mutation_failed(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
            entity_id=entity_id,
        ))

    async def log_sync_failed(self, data_set: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.sync_failed(data_set, error_message))

    async def log_startup_ready(self) -> None:
        await self.log(AuditEventBuilder.startup_ready())

    async def log_startup_failed(self, reason: str) -> None:
        await self.log(AuditEventBuilder.startup_failed(reason))

    async def log_ai_requested(
        self,
        prompt_kind: str,
        prompt_length: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.ai_summary_requested(
            prompt_kind, prompt_length, correlation_id,
        ))

    async def log_ai_failed(self, error_message: str, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.ai_summary_failed(error_message, correlation_id))


def create_correlation_id() -> UUID:
    """One id per user action; every event of that action carries it."""
    return uuid4()
