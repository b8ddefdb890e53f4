"""NEAR block poller - scans finalized blocks for EVENT_JSON contract logs."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from near_event_agent.errors import ConfigurationError, NearRpcError
from near_event_agent.interfaces.account import NearAccount
from near_event_agent.interfaces.explorer import ReceiptExplorer
from near_event_agent.models.events import AgentEvent
from near_event_agent.models.notifications import (
    BlockError,
    BlockProcessed,
    EventFound,
    PollingCompleted,
)
from near_event_agent.models.records import BlockProcessingState, PollResult, Subscription
from near_event_agent.models.snapshots import PollerStateSnapshot, PollerStats
from near_event_agent.signals import Signal, clear_signals

log = logging.getLogger(__name__)

EVENT_LOG_PREFIX = "EVENT_JSON:"


def parse_event_log(line: str, event_name: str, sender: str) -> AgentEvent | None:
    """Parse one receipt-outcome log line into an AgentEvent.

    Returns None unless the line is `EVENT_JSON:{...}` with a matching
    `event` and a non-empty `data` array whose first entry has a `request_id`.
    Never raises on malformed input.
    """
    if not line.startswith(EVENT_LOG_PREFIX):
        return None

    try:
        body = json.loads(line[len(EVENT_LOG_PREFIX):])
    except ValueError:
        log.debug("Malformed EVENT_JSON log: %s", line[:120])
        return None

    if not isinstance(body, dict) or body.get("event") != event_name:
        return None

    entries = body.get("data")
    if not isinstance(entries, list) or not entries or not isinstance(entries[0], dict):
        return None

    payload = entries[0]
    request_id = payload.get("request_id")
    if request_id is None:
        log.warning("'%s' event from %s has no request_id, ignoring", event_name, sender)
        return None

    return AgentEvent(
        event_type=body["event"],
        request_id=str(request_id),
        payload=payload,
        sender=sender,
    )


class BlockPoller:
    """Advances per-subscription block cursors and reports matching events.

    Each poll walks [cursor + 1, final height] in batches. Heights within a
    batch are fetched concurrently; the cursor moves to the end of a batch
    once all of its heights are done. A block, chunk or receipt that fails is
    reported on `block_error` and skipped, never aborting the poll.
    """

    BATCH_SIZE = 5
    BATCH_DELAY = 0.5  # seconds between batches

    def __init__(
        self,
        explorer: ReceiptExplorer,
        account: NearAccount | None = None,
        batch_size: int = BATCH_SIZE,
        batch_delay: float = BATCH_DELAY,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._explorer = explorer
        self._account = account
        self._batch_size = batch_size
        self._batch_delay = batch_delay
        self._states: dict[str, BlockProcessingState] = {}

        self.event_found: Signal[EventFound] = Signal("event_found")
        self.block_processed: Signal[BlockProcessed] = Signal("block_processed")
        self.block_error: Signal[BlockError] = Signal("block_error")
        self.polling_started: Signal[str] = Signal("polling_started")
        self.polling_completed: Signal[PollingCompleted] = Signal("polling_completed")

    def set_account(self, account: NearAccount) -> None:
        self._account = account

    # ── Subscription state ────────────────────────────────

    def initialize_subscription(self, subscription_id: str) -> None:
        if subscription_id not in self._states:
            self._states[subscription_id] = BlockProcessingState()
            log.info("Initialized processing state for %s", subscription_id)

    def remove_subscription(self, subscription_id: str) -> None:
        if self._states.pop(subscription_id, None) is not None:
            log.info("Removed processing state for %s", subscription_id)

    def get_state(self, subscription_id: str) -> BlockProcessingState | None:
        return self._states.get(subscription_id)

    def is_processing(self, subscription_id: str) -> bool:
        state = self._states.get(subscription_id)
        return state.is_processing if state else False

    def get_stats(self) -> PollerStats:
        return PollerStats(
            active_subscriptions=len(self._states),
            processing_states=[
                PollerStateSnapshot(
                    subscription_id=sub_id,
                    last_block_height=state.last_block_height,
                    is_processing=state.is_processing,
                    processed_transaction_count=len(state.processed_transaction_ids),
                )
                for sub_id, state in self._states.items()
            ],
        )

    def cleanup(self) -> None:
        self._states.clear()
        clear_signals(self)
        self._account = None
        log.info("BlockPoller cleaned up")

    # ── Polling ───────────────────────────────────────────

    async def poll_for_events(self, subscription: Subscription) -> PollResult:
        """Scan every block between the cursor and the current final block."""
        account = self._account
        if account is None:
            raise ConfigurationError("BlockPoller account not set. Call set_account() first.")

        state = self._states.get(subscription.id)
        if state is None:
            raise ConfigurationError(
                f"Subscription {subscription.id} not initialized. "
                "Call initialize_subscription() first."
            )

        if state.is_processing:
            log.debug("Subscription %s already processing, skipping", subscription.id)
            return PollResult()

        state.is_processing = True
        result = PollResult()
        try:
            await self.polling_started.emit(subscription.id)

            final_block = await account.view_block(finality="final")
            current_height = int(final_block["header"]["height"])

            if state.last_block_height == 0:
                state.last_block_height = current_height - 1
                log.info("Anchored %s at block %d", subscription.id, state.last_block_height)

            start_height = state.last_block_height + 1
            if start_height > current_height:
                await self._complete(subscription, result)
                return result

            log.info(
                "Processing blocks %d to %d for '%s'",
                start_height, current_height, subscription.event_name,
            )

            for batch_start in range(start_height, current_height + 1, self._batch_size):
                batch_end = min(batch_start + self._batch_size - 1, current_height)
                counts = await asyncio.gather(*(
                    self._process_block(account, height, subscription, state)
                    for height in range(batch_start, batch_end + 1)
                ))

                result.blocks_processed += batch_end - batch_start + 1
                result.events_found += sum(counts)
                state.last_block_height = max(state.last_block_height, batch_end)

                if batch_end < current_height and self._batch_delay > 0:
                    await asyncio.sleep(self._batch_delay)

            await self._complete(subscription, result)
            return result
        finally:
            state.is_processing = False

    async def _complete(self, subscription: Subscription, result: PollResult) -> None:
        await self.polling_completed.emit(PollingCompleted(
            subscription_id=subscription.id,
            blocks_processed=result.blocks_processed,
            events_found=result.events_found,
        ))

    async def _process_block(
        self,
        account: NearAccount,
        height: int,
        subscription: Subscription,
        state: BlockProcessingState,
    ) -> int:
        """Scan one block. Returns the number of events emitted."""
        try:
            block = await account.view_block(block_id=height)
            if not isinstance(block, dict):
                raise NearRpcError("block", f"unexpected result {block!r}")
        except Exception as exc:
            log.error("Error fetching block %d: %s", height, exc)
            await self._report(height, subscription, "block", exc)
            return 0

        receipts = await self._relevant_receipts(account, block, height, subscription)

        found = 0
        for receipt in receipts:
            found += await self._process_receipt(account, receipt, height, subscription, state)

        await self.block_processed.emit(BlockProcessed(
            block_height=height, subscription_id=subscription.id, events_found=found,
        ))
        return found

    async def _relevant_receipts(
        self,
        account: NearAccount,
        block: dict[str, Any],
        height: int,
        subscription: Subscription,
    ) -> list[dict[str, Any]]:
        """Receipts in any chunk of `block` addressed to the watched contract."""
        relevant: list[dict[str, Any]] = []
        for chunk in block.get("chunks", []):
            chunk_hash = chunk.get("chunk_hash", "?")
            try:
                details = await account.view_chunk(chunk_hash)
                if not isinstance(details, dict):
                    raise NearRpcError("chunk", f"unexpected result {details!r}")
            except Exception as exc:
                log.warning("Error fetching chunk %s: %s", chunk_hash, exc)
                await self._report(height, subscription, f"chunk:{chunk_hash}", exc)
                continue

            for receipt in details.get("receipts", []):
                if receipt.get("receiver_id") == subscription.contract_id:
                    relevant.append(receipt)
        return relevant

    async def _process_receipt(
        self,
        account: NearAccount,
        receipt: dict[str, Any],
        height: int,
        subscription: Subscription,
        state: BlockProcessingState,
    ) -> int:
        receipt_id = receipt.get("receipt_id", "?")
        try:
            events = await self._extract_events(account, receipt, subscription, state)
        except Exception as exc:
            log.error("Error processing receipt %s: %s", receipt_id, exc)
            await self._report(height, subscription, f"receipt:{receipt_id}", exc)
            return 0

        for event in events:
            log.info(
                "Found event '%s' (request %s) for %s",
                event.event_type, event.request_id, subscription.id,
            )
            await self.event_found.emit(EventFound(event=event, subscription=subscription))
        return len(events)

    async def _extract_events(
        self,
        account: NearAccount,
        receipt: dict[str, Any],
        subscription: Subscription,
        state: BlockProcessingState,
    ) -> list[AgentEvent]:
        """Resolve the receipt's transaction and parse its logs, once per transaction."""
        tx_hash = await self._explorer.get_transaction_hash(receipt["receipt_id"])
        if not tx_hash or state.has_seen(tx_hash):
            return []

        # Marked before the next await so concurrent blocks sharing a tx scan it once
        state.mark_seen(tx_hash)

        status = await account.view_transaction_status(
            tx_hash, subscription.contract_id, "INCLUDED",
        )

        sender = receipt.get("predecessor_id", "")
        events: list[AgentEvent] = []
        for receipt_outcome in status.get("receipts_outcome", []):
            for line in receipt_outcome.get("outcome", {}).get("logs", []):
                event = parse_event_log(line, subscription.event_name, sender)
                if event is not None:
                    events.append(event)
        return events

    async def _report(
        self, height: int, subscription: Subscription, unit: str, exc: Exception,
    ) -> None:
        await self.block_error.emit(BlockError(
            block_height=height, subscription_id=subscription.id, unit=unit, error=exc,
        ))
