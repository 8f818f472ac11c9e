"""
Main Orchestrator for Store Ledger

This module ties together all the components and defines the flows for:
1. Synchronization (startup, navigation, post-mutation resync)
2. Mutations (add/update/delete transactions, rename/delete stores)
3. AI summaries (free question, generated report)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Local validation failures never reach the backend
- Backend and AI errors never escape a flow; they become status messages
- Every mutation that reached the backend ends with a resync, success or not

CONCURRENCY: Everything runs on one event loop. A remote call is a
suspend point; nothing is cancelled and nothing times out. The three
refresh fetches are independent and may complete in any order, so an
older response can overwrite newer state. Set `discard_stale_refreshes`
to drop responses older than the newest one already applied.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar, Union

import structlog

from storeledger.agents import AIServiceError, SummaryAgent, build_summary_prompt
from storeledger.audit import AuditLogger, configure_logging, create_correlation_id
from storeledger.config import get_settings
from storeledger.formatting import format_currency
from storeledger.models.transaction import (
    LEDGER_VIEWS,
    MutationResult,
    PendingDeleteStore,
    PendingDeleteTransaction,
    PendingEditTransaction,
    PendingRenameStore,
    StartupState,
    Totals,
    Transaction,
    TransactionKind,
    View,
)
from storeledger.queries import compute_totals, display_order, filter_by_store
from storeledger.services.ledger import (
    BackendError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerGateway,
    InMemoryLedgerGateway,
    LedgerGatewayInterface,
)
from storeledger.state import LedgerState
from storeledger.validation import InvalidOperation, LedgerValidator, ValidationError
from storeledger.validation.validator import AmountInput


logger = structlog.get_logger(__name__)

T = TypeVar("T")

AI_FAILURE_NOTICE = "There was an error analyzing the transactions with the AI."


class SyncOrchestrator:
    """
    Decides when to pull authoritative state and fans out to the three
    read endpoints.

    Triggers:
    1. Startup, once the backend-ready signal arrives
    2. Navigation to a view that shows ledger state
    3. Completion of every mutation (called by the MutationCoordinator)
    """

    def __init__(
        self,
        state: LedgerState,
        gateway: LedgerGatewayInterface,
        audit_logger: Optional[AuditLogger] = None,
        discard_stale_refreshes: bool = False,
    ):
        self._state = state
        self._gateway = gateway
        self._audit_logger = audit_logger
        self._discard_stale = discard_stale_refreshes

        # Per data set: newest request issued, newest response applied
        self._issued = {"transactions": 0, "stores": 0, "store information": 0}
        self._applied = dict(self._issued)

    @property
    def is_ready(self) -> bool:
        return self._state.startup_state == StartupState.READY

    async def start(
        self,
        ready_signal: asyncio.Event,
        timeout: Optional[float] = None,
    ) -> StartupState:
        """
        Wait for the transport, then run the first resync.

        WaitingForTransport -> Ready, or -> Failed with a fatal status if
        the signal does not arrive within `timeout` seconds or the
        transport is not live once it does.
        """
        self._state.startup_state = StartupState.WAITING_FOR_TRANSPORT
        logger.info("waiting_for_transport", timeout=timeout)

        try:
            await asyncio.wait_for(ready_signal.wait(), timeout)
        except asyncio.TimeoutError:
            return await self._fail_startup(
                "Critical error: the backend never signalled that it is ready."
            )

        try:
            available = await self._gateway.is_available()
        except BackendError as e:
            logger.error("transport_check_failed", error=str(e))
            available = False

        if not available:
            return await self._fail_startup(
                "Critical error: the backend communication bridge is not available."
            )

        self._state.startup_state = StartupState.READY
        logger.info("transport_ready")
        if self._audit_logger:
            await self._audit_logger.log_startup_ready()

        await self.resync()
        return self._state.startup_state

    async def _fail_startup(self, message: str) -> StartupState:
        self._state.startup_state = StartupState.FAILED
        self._state.status_message = message
        logger.critical("startup_failed", reason=message)
        if self._audit_logger:
            await self._audit_logger.log_startup_failed(message)
        return StartupState.FAILED

    async def set_view(self, view: Union[View, str]) -> None:
        """Record navigation; resync when the new view shows ledger state."""
        view = View(view)
        self._state.current_view = view
        if view in LEDGER_VIEWS:
            logger.debug("view_changed_resync", view=view.value)
            await self.resync()

    async def resync(self) -> None:
        """
        Pull transactions, unique stores and store counts.

        The single entry point for every refresh. Does nothing until
        startup reached Ready.
        """
        if not self.is_ready:
            logger.debug("resync_skipped", startup_state=self._state.startup_state.value)
            return

        await asyncio.gather(
            self.fetch_transactions(),
            self.fetch_unique_stores(),
            self.fetch_store_info(),
        )

    async def fetch_transactions(self) -> None:
        await self._fetch(
            "transactions",
            self._gateway.list_transactions,
            self._state.cache.replace_all,
        )

    async def fetch_unique_stores(self) -> None:
        await self._fetch(
            "stores",
            self._gateway.list_unique_stores,
            self._state.directory.replace_names,
        )

    async def fetch_store_info(self) -> None:
        await self._fetch(
            "store information",
            self._gateway.get_store_info,
            self._state.directory.replace_counts,
        )

    async def _fetch(
        self,
        data_set: str,
        call: Callable[[], Awaitable[T]],
        apply: Callable[[T], None],
    ) -> None:
        self._issued[data_set] += 1
        token = self._issued[data_set]

        try:
            result = await call()
        except BackendError as e:
            logger.error("fetch_failed", data_set=data_set, error=str(e))
            self._state.status_message = f"Error loading {data_set}: {e}"
            if self._audit_logger:
                await self._audit_logger.log_sync_failed(data_set, str(e))
            return

        if self._discard_stale and token < self._applied[data_set]:
            logger.warning(
                "stale_refresh_discarded",
                data_set=data_set,
                token=token,
                applied=self._applied[data_set],
            )
            return

        apply(result)
        self._applied[data_set] = max(self._applied[data_set], token)
        logger.debug("fetch_applied", data_set=data_set, token=token)


class MutationCoordinator:
    """
    Orchestrates every ledger mutation.

    Flow for each operation:
    1. Validate locally (failure -> status message, no backend call)
    2. Call the backend once
    3. On success, apply the optimistic local edit
    4. Always resync afterwards, success or failure

    Destructive and editing actions are two-phase: a request_* method
    records the pending action, a confirm_* method performs it.
    """

    def __init__(
        self,
        state: LedgerState,
        gateway: LedgerGatewayInterface,
        sync: SyncOrchestrator,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._gateway = gateway
        self._sync = sync
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger

    def _publish(self, result: MutationResult) -> MutationResult:
        self._state.status_message = result.message
        return result

    async def _reject(
        self,
        operation: str,
        error: Exception,
        correlation_id,
    ) -> MutationResult:
        logger.warning("mutation_rejected", operation=operation, reason=str(error))
        if self._audit_logger:
            await self._audit_logger.log_validation_rejected(operation, str(error), correlation_id)
        return self._publish(MutationResult.failed(str(error), error))

    async def _backend_failed(
        self,
        operation: str,
        prefix: str,
        error: BackendError,
        correlation_id,
        entity_id: Optional[str] = None,
    ) -> MutationResult:
        logger.error("mutation_failed", operation=operation, error=str(error))
        if self._audit_logger:
            await self._audit_logger.log_mutation_failed(
                operation, str(error), correlation_id, entity_id=entity_id,
            )
        return self._publish(MutationResult.failed(f"{prefix}: {error}", error))

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def add(
        self,
        kind: Union[TransactionKind, str],
        amount: AmountInput,
        description: str,
        store_name: str,
    ) -> MutationResult:
        """Create a transaction and append the canonical record to the cache."""
        correlation_id = create_correlation_id()
        try:
            draft = self._validator.validate_transaction(kind, amount, description, store_name)
        except ValidationError as e:
            return await self._reject("add transaction", e, correlation_id)

        try:
            created = await self._gateway.add_transaction(
                draft.kind, draft.amount, draft.description, draft.store_name,
            )
            self._state.cache.append(created)
            result = self._publish(MutationResult.ok(
                f"Transaction recorded: {created.kind.value} {format_currency(created.amount)}",
                created,
            ))
            if self._audit_logger:
                await self._audit_logger.log_transaction_added(
                    created.id, created.kind.value, str(created.amount),
                    created.store_name, correlation_id,
                )
        except BackendError as e:
            result = await self._backend_failed(
                "add transaction", "Error adding transaction", e, correlation_id,
            )
        finally:
            await self._sync.resync()
        return result

    async def update(
        self,
        transaction_id: str,
        kind: Union[TransactionKind, str],
        amount: AmountInput,
        description: str,
        store_name: str,
    ) -> MutationResult:
        """
        Replace every field of a transaction.

        The id is not checked against the cache; a stale id fails in the
        backend with NotFoundError.
        """
        correlation_id = create_correlation_id()
        try:
            draft = self._validator.validate_transaction(kind, amount, description, store_name)
        except ValidationError as e:
            return await self._reject("update transaction", e, correlation_id)

        try:
            updated = await self._gateway.update_transaction(
                transaction_id,
                draft.kind, draft.amount, draft.description, draft.store_name,
            )
            self._state.cache.replace(updated)
            if (
                isinstance(self._state.pending, PendingEditTransaction)
                and self._state.pending.transaction_id == transaction_id
            ):
                self._state.pending = None
            result = self._publish(MutationResult.ok(
                f"Transaction {updated.short_id} updated.", updated,
            ))
            if self._audit_logger:
                await self._audit_logger.log_transaction_updated(updated.id, correlation_id)
        except BackendError as e:
            result = await self._backend_failed(
                "update transaction", "Error updating transaction", e,
                correlation_id, entity_id=transaction_id,
            )
        finally:
            await self._sync.resync()
        return result

    def request_edit(self, transaction: Transaction) -> None:
        """Open the editor for a transaction held by the caller."""
        self._state.pending = PendingEditTransaction(transaction=transaction)

    async def confirm_edit(
        self,
        kind: Union[TransactionKind, str],
        amount: AmountInput,
        description: str,
        store_name: str,
    ) -> MutationResult:
        pending = self._state.pending
        if not isinstance(pending, PendingEditTransaction):
            return self._publish(MutationResult.failed(
                "No transaction is being edited.",
                InvalidOperation("No transaction is being edited."),
            ))
        return await self.update(pending.transaction_id, kind, amount, description, store_name)

    def request_delete(self, transaction_id: str) -> None:
        """Record the intent to delete; nothing changes until confirm_delete."""
        self._state.pending = PendingDeleteTransaction(transaction_id=transaction_id)

    async def confirm_delete(self) -> MutationResult:
        """Delete the transaction recorded by request_delete."""
        pending = self._state.pending
        if not isinstance(pending, PendingDeleteTransaction):
            return self._publish(MutationResult.failed(
                "No transaction is pending deletion.",
                InvalidOperation("No transaction is pending deletion."),
            ))

        transaction_id = pending.transaction_id
        correlation_id = create_correlation_id()
        try:
            await self._gateway.delete_transaction(transaction_id)
            self._state.cache.remove(transaction_id)
            self._state.pending = None
            result = self._publish(MutationResult.ok(
                f"Transaction {transaction_id[:8]} deleted.",
            ))
            if self._audit_logger:
                await self._audit_logger.log_transaction_deleted(transaction_id, correlation_id)
        except BackendError as e:
            result = await self._backend_failed(
                "delete transaction", "Error deleting transaction", e,
                correlation_id, entity_id=transaction_id,
            )
        finally:
            await self._sync.resync()
        return result

    # -------------------------------------------------------------------------
    # Stores
    # -------------------------------------------------------------------------

    async def rename_store(self, old_name: str, new_name: str) -> MutationResult:
        """
        Rename a store in the backend, then rewrite cached transactions.

        The local rewrite avoids showing the old name until the resync
        lands.
        """
        correlation_id = create_correlation_id()
        try:
            new_name = self._validator.validate_rename(old_name, new_name)
        except (ValidationError, InvalidOperation) as e:
            return await self._reject("rename store", e, correlation_id)

        try:
            await self._gateway.rename_store(old_name, new_name)
            self._state.cache.rename_store(old_name, new_name)
            if (
                isinstance(self._state.pending, PendingRenameStore)
                and self._state.pending.store_name == old_name
            ):
                self._state.pending = None
            result = self._publish(MutationResult.ok(f"Store renamed to: {new_name}"))
            if self._audit_logger:
                await self._audit_logger.log_store_renamed(old_name, new_name, correlation_id)
        except BackendError as e:
            result = await self._backend_failed(
                "rename store", "Error renaming store", e,
                correlation_id, entity_id=old_name,
            )
        finally:
            await self._sync.resync()
        return result

    def request_rename_store(self, store_name: str) -> None:
        self._state.pending = PendingRenameStore(store_name=store_name)

    async def confirm_rename_store(self, new_name: str) -> MutationResult:
        pending = self._state.pending
        if not isinstance(pending, PendingRenameStore):
            return self._publish(MutationResult.failed(
                "No store is being renamed.",
                InvalidOperation("No store is being renamed."),
            ))
        return await self.rename_store(pending.store_name, new_name)

    async def delete_store(self, store_name: str) -> MutationResult:
        """Delete a store and its transactions in the backend, then in the cache."""
        correlation_id = create_correlation_id()
        try:
            self._validator.validate_store_deletion(store_name)
        except (ValidationError, InvalidOperation) as e:
            if (
                isinstance(self._state.pending, PendingDeleteStore)
                and self._state.pending.store_name == store_name
            ):
                self._state.pending = None
            return await self._reject("delete store", e, correlation_id)

        try:
            await self._gateway.delete_store(store_name)
            removed = self._state.cache.remove_store(store_name)
            if (
                isinstance(self._state.pending, PendingDeleteStore)
                and self._state.pending.store_name == store_name
            ):
                self._state.pending = None
            result = self._publish(MutationResult.ok(f"Store deleted: {store_name}"))
            if self._audit_logger:
                await self._audit_logger.log_store_deleted(store_name, removed, correlation_id)
        except BackendError as e:
            result = await self._backend_failed(
                "delete store", "Error deleting store", e,
                correlation_id, entity_id=store_name,
            )
        finally:
            await self._sync.resync()
        return result

    def request_delete_store(self, store_name: str) -> None:
        self._state.pending = PendingDeleteStore(store_name=store_name)

    async def confirm_delete_store(self) -> MutationResult:
        pending = self._state.pending
        if not isinstance(pending, PendingDeleteStore):
            return self._publish(MutationResult.failed(
                "No store is pending deletion.",
                InvalidOperation("No store is pending deletion."),
            ))
        return await self.delete_store(pending.store_name)

    def cancel_pending(self) -> None:
        self._state.pending = None


class SummaryFlow:
    """
    Sends prompts to the AI summarization service.

    The AI view has no dependency on ledger state: these calls never
    trigger a resync. The report prompt uses whatever the cache holds.
    """

    def __init__(
        self,
        state: LedgerState,
        agent: Optional[SummaryAgent] = None,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._agent = agent or SummaryAgent()
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger

    async def ask(self, question: str) -> tuple[bool, str]:
        """
        Send a user question.

        Returns:
            (success, response text or error status)
        """
        try:
            prompt = self._validator.validate_question(question)
        except ValidationError as e:
            self._state.status_message = str(e)
            return False, str(e)

        correlation_id = create_correlation_id()
        self._state.ai_response = ""
        self._state.status_message = "Querying the AI... please wait."
        if self._audit_logger:
            await self._audit_logger.log_ai_requested("question", len(prompt), correlation_id)

        try:
            response = await self._agent.generate(prompt)
        except AIServiceError as e:
            message = f"Error querying AI: {e}"
            logger.error("ai_question_failed", error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_ai_failed(str(e), correlation_id)
            self._state.status_message = message
            return False, message

        self._state.ai_response = response
        self._state.status_message = "AI query completed."
        return True, response

    async def analyze(self) -> tuple[bool, str]:
        """
        Ask for the five-part report over every cached transaction.

        Returns:
            (success, report text or a fixed failure notice)
        """
        prompt = build_summary_prompt(self._state.cache.all())
        correlation_id = create_correlation_id()
        self._state.ai_summary = None
        if self._audit_logger:
            await self._audit_logger.log_ai_requested("report", len(prompt), correlation_id)

        try:
            summary = await self._agent.generate(prompt)
        except AIServiceError as e:
            logger.error("ai_report_failed", error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_ai_failed(str(e), correlation_id)
            self._state.ai_summary = AI_FAILURE_NOTICE
            self._state.status_message = f"Error querying AI: {e}"
            return False, AI_FAILURE_NOTICE

        self._state.ai_summary = summary
        return True, summary


class LedgerApp:
    """
    The assembled client: shared state plus the three flows, and the
    derived view data a display layer reads.
    """

    def __init__(
        self,
        state: LedgerState,
        sync: SyncOrchestrator,
        mutations: MutationCoordinator,
        summaries: SummaryFlow,
        ready_timeout: Optional[float] = None,
    ):
        self.state = state
        self.sync = sync
        self.mutations = mutations
        self.summaries = summaries
        self.ready_timeout = ready_timeout

    async def start(self, ready_signal: asyncio.Event) -> StartupState:
        """Run the startup sequence with the configured transport timeout."""
        return await self.sync.start(ready_signal, self.ready_timeout)

    def visible_transactions(self) -> list[Transaction]:
        """Transactions under the current selection, most recent first."""
        return display_order(
            filter_by_store(self.state.cache.all(), self.state.directory.selected_name)
        )

    def totals(self) -> Totals:
        return compute_totals(
            filter_by_store(self.state.cache.all(), self.state.directory.selected_name)
        )

    def formatted_totals(self) -> dict[str, str]:
        totals = self.totals()
        return {
            "income": format_currency(totals.income),
            "expense": format_currency(totals.expense),
            "balance": format_currency(totals.balance),
        }


def create_app_components(
    gateway: Optional[LedgerGatewayInterface] = None,
    agent: Optional[SummaryAgent] = None,
) -> LedgerApp:
    """
    Factory function to create all application components.

    Args:
        gateway: Ledger backend to use. If None, Google Sheets is used
                 when enabled in settings, otherwise an in-memory backend.
        agent: AI summarization agent. If None, a Gemini agent is built
               lazily on first call.

    Returns:
        The assembled LedgerApp (not started; await app.start(ready_signal)).
    """
    client_settings = get_settings().client
    configure_logging(client_settings.log_level)

    audit_logger = AuditLogger()  # Local-only logging

    if gateway is None and client_settings.use_sheets_backend:
        try:
            sheets_client = GoogleSheetsClient()
            gateway = GoogleSheetsLedgerGateway(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Backend not configured - continue without it
            logger.warning("sheets_backend_unavailable", error=str(e))
            gateway = None

    if gateway is None:
        gateway = InMemoryLedgerGateway()

    state = LedgerState()
    sync = SyncOrchestrator(
        state,
        gateway,
        audit_logger=audit_logger,
        discard_stale_refreshes=client_settings.discard_stale_refreshes,
    )
    mutations = MutationCoordinator(state, gateway, sync, audit_logger=audit_logger)
    summaries = SummaryFlow(state, agent=agent, audit_logger=audit_logger)

    return LedgerApp(
        state, sync, mutations, summaries,
        ready_timeout=client_settings.transport_ready_timeout_seconds,
    )
