"""Internal record types: subscriptions, polling state, and operation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from near_event_agent.models.events import AgentEvent

if TYPE_CHECKING:
    from near_event_agent.interfaces.sampling import SamplingChannel

# Seen-transaction cache bounds: past the high-water mark keep the newest ids only
SEEN_TX_HIGH_WATER = 10_000
SEEN_TX_RETAIN = 5_000


def subscription_key(contract_id: str, event_name: str) -> str:
    """Registry key for a (contract, event) pair."""
    return f"{contract_id}:{event_name}"


@dataclass
class WatchEventRequest:
    """Input to EventWatcher.watch_event()."""

    contract_id: str
    event_name: str
    channel: SamplingChannel
    response_method_name: str | None = None  # None = configured default
    cron_expression: str | None = None  # None = configured default


@dataclass
class Subscription:
    """A registered (contract, event) watch with its schedule and response target."""

    contract_id: str
    event_name: str
    response_method_name: str
    cron_expression: str
    channel: SamplingChannel
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_event_at: datetime | None = None
    job: Any = None  # scheduler handle, None until the schedule starts

    @property
    def id(self) -> str:
        return subscription_key(self.contract_id, self.event_name)


@dataclass
class BlockProcessingState:
    """Per-subscription polling cursor, owned by the BlockPoller."""

    last_block_height: int = 0  # 0 = anchor to final height - 1 on first poll
    is_processing: bool = False
    # dict as an insertion-ordered set
    processed_transaction_ids: dict[str, None] = field(default_factory=dict)

    def has_seen(self, tx_hash: str) -> bool:
        return tx_hash in self.processed_transaction_ids

    def mark_seen(self, tx_hash: str) -> None:
        """Record a transaction hash, trimming to the newest ids past the cap."""
        self.processed_transaction_ids[tx_hash] = None
        if len(self.processed_transaction_ids) > SEEN_TX_HIGH_WATER:
            keep = list(self.processed_transaction_ids)[-SEEN_TX_RETAIN:]
            self.processed_transaction_ids = dict.fromkeys(keep)


@dataclass
class PollResult:
    """Outcome of one BlockPoller.poll_for_events() call."""

    blocks_processed: int = 0
    events_found: int = 0


@dataclass
class ProcessingResult:
    """Outcome of processing one AgentEvent."""

    success: bool
    request_id: str
    subscription: Subscription
    event: AgentEvent
    processing_time_ms: int = 0
    response: str | None = None
    error: str | None = None
    tx_hash: str | None = None


@dataclass
class ProcessingStats:
    """Running counters kept by the EventProcessor."""

    total_processed: int = 0
    successful: int = 0
    failed: int = 0
    total_processing_time_ms: int = 0
    current_queue_size: int = 0

    @property
    def success_rate(self) -> float:
        if self.total_processed == 0:
            return 0.0
        return self.successful / self.total_processed * 100

    @property
    def average_processing_time_ms(self) -> float:
        if self.total_processed == 0:
            return 0.0
        return self.total_processing_time_ms / self.total_processed


@dataclass
class WatcherStats:
    """Process-wide statistics derived from the registry and running counters."""

    total_subscriptions: int = 0
    active_subscriptions: int = 0
    total_events_detected: int = 0
    total_events_processed: int = 0
    total_events_successful: int = 0
    total_events_failed: int = 0
    total_processing_time_ms: int = 0
    uptime_seconds: float = 0.0

    @property
    def success_rate(self) -> float:
        if self.total_events_processed == 0:
            return 0.0
        return self.total_events_successful / self.total_events_processed * 100

    @property
    def average_processing_time_ms(self) -> float:
        if self.total_events_processed == 0:
            return 0.0
        return self.total_processing_time_ms / self.total_events_processed
