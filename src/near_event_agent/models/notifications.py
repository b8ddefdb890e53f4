"""Payloads carried by the component signals."""

from __future__ import annotations

from dataclasses import dataclass

from near_event_agent.models.events import AgentEvent
from near_event_agent.models.records import ProcessingResult, Subscription
from near_event_agent.models.sampling import SamplingResponse


# ── BlockPoller ────────────────────────────────────────


@dataclass(frozen=True)
class EventFound:
    event: AgentEvent
    subscription: Subscription


@dataclass(frozen=True)
class BlockProcessed:
    block_height: int
    subscription_id: str
    events_found: int


@dataclass(frozen=True)
class BlockError:
    """A single block, chunk, or receipt failed. `unit` names which one."""

    block_height: int
    subscription_id: str
    unit: str  # "block", "chunk:<hash>" or "receipt:<id>"
    error: Exception


@dataclass(frozen=True)
class PollingCompleted:
    subscription_id: str
    blocks_processed: int
    events_found: int


# ── EventProcessor ─────────────────────────────────────


@dataclass(frozen=True)
class EventContext:
    event: AgentEvent
    subscription: Subscription


@dataclass(frozen=True)
class ResponseReceived:
    context: EventContext
    response: SamplingResponse


@dataclass(frozen=True)
class ResponseSubmitted:
    context: EventContext
    tx_hash: str


# ── EventWatcher ───────────────────────────────────────


@dataclass(frozen=True)
class WatcherErrorNotice:
    subscription_id: str
    error: Exception


@dataclass(frozen=True)
class EventOutcome:
    """Re-emitted to external listeners once an event finished processing."""

    request_id: str
    subscription_id: str
    processing_time_ms: int
    response: str | None = None
    error: str | None = None

    @classmethod
    def from_result(cls, result: ProcessingResult) -> EventOutcome:
        return cls(
            request_id=result.request_id,
            subscription_id=result.subscription.id,
            processing_time_ms=result.processing_time_ms,
            response=result.response,
            error=result.error,
        )
