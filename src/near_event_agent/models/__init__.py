"""Data models for the near_event_agent pipeline."""

from near_event_agent.models.config import AgentConfig, explorer_url_for
from near_event_agent.models.events import AgentEvent
from near_event_agent.models.notifications import (
    BlockError,
    BlockProcessed,
    EventContext,
    EventFound,
    EventOutcome,
    PollingCompleted,
    ResponseReceived,
    ResponseSubmitted,
    WatcherErrorNotice,
)
from near_event_agent.models.records import (
    BlockProcessingState,
    PollResult,
    ProcessingResult,
    ProcessingStats,
    Subscription,
    WatchEventRequest,
    WatcherStats,
    subscription_key,
)
from near_event_agent.models.sampling import (
    SamplingMessage,
    SamplingRequest,
    SamplingResponse,
)
from near_event_agent.models.snapshots import (
    AccountStatus,
    PollerStateSnapshot,
    PollerStats,
    QueueItem,
    QueueStatus,
    SubscriptionSnapshot,
    WatchedEvent,
    WatchingStatus,
)

__all__ = [
    "AgentConfig", "explorer_url_for",
    "AgentEvent",
    "BlockError", "BlockProcessed", "EventContext", "EventFound", "EventOutcome",
    "PollingCompleted", "ResponseReceived", "ResponseSubmitted", "WatcherErrorNotice",
    "BlockProcessingState", "PollResult", "ProcessingResult", "ProcessingStats",
    "Subscription", "WatchEventRequest", "WatcherStats", "subscription_key",
    "SamplingMessage", "SamplingRequest", "SamplingResponse",
    "AccountStatus", "PollerStateSnapshot", "PollerStats", "QueueItem",
    "QueueStatus", "SubscriptionSnapshot", "WatchedEvent", "WatchingStatus",
]
