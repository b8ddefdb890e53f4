"""Read-only views returned by the status accessors."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from near_event_agent.models.records import ProcessingStats, Subscription


@dataclass
class SubscriptionSnapshot:
    id: str
    contract_id: str
    event_name: str
    response_method_name: str
    cron_expression: str
    is_active: bool
    created_at: datetime
    last_event_at: datetime | None = None

    @classmethod
    def of(cls, sub: Subscription) -> SubscriptionSnapshot:
        return cls(
            id=sub.id,
            contract_id=sub.contract_id,
            event_name=sub.event_name,
            response_method_name=sub.response_method_name,
            cron_expression=sub.cron_expression,
            is_active=sub.is_active,
            created_at=sub.created_at,
            last_event_at=sub.last_event_at,
        )


@dataclass
class PollerStateSnapshot:
    subscription_id: str
    last_block_height: int
    is_processing: bool
    processed_transaction_count: int


@dataclass
class PollerStats:
    active_subscriptions: int = 0
    processing_states: list[PollerStateSnapshot] = field(default_factory=list)


@dataclass
class QueueItem:
    request_id: str
    event_type: str
    contract_id: str
    detected_at: datetime


@dataclass
class QueueStatus:
    queue_size: int = 0
    processing_items: list[QueueItem] = field(default_factory=list)


@dataclass
class AccountStatus:
    is_initialized: bool
    has_account: bool
    account_id: str | None
    network_id: str


@dataclass
class WatchedEvent:
    contract_id: str
    event_name: str
    subscription_id: str


@dataclass
class WatchingStatus:
    """Everything list_watched_near_events needs to render."""

    is_initialized: bool
    total_subscriptions: int
    subscriptions: list[SubscriptionSnapshot]
    account: AccountStatus
    poller: PollerStats
    processor: ProcessingStats
