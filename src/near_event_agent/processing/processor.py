"""Event processor - AI sampling for one event, then the on-chain response."""

from __future__ import annotations

import asyncio
import json
import logging
import textwrap
import time

from near_event_agent.errors import ConfigurationError, SamplingError, SubmissionError
from near_event_agent.interfaces.account import NearAccount
from near_event_agent.models.config import DEFAULT_GAS_LIMIT
from near_event_agent.models.events import AgentEvent
from near_event_agent.models.notifications import (
    EventContext,
    ResponseReceived,
    ResponseSubmitted,
)
from near_event_agent.models.records import ProcessingResult, ProcessingStats, Subscription
from near_event_agent.models.sampling import SamplingMessage, SamplingRequest, SamplingResponse
from near_event_agent.models.snapshots import QueueItem, QueueStatus
from near_event_agent.signals import Signal, clear_signals

log = logging.getLogger(__name__)


def format_event_prompt(event: AgentEvent) -> str:
    """Render an event as the user message sent for sampling."""
    payload = json.dumps(event.payload, indent=2, default=str)
    header = textwrap.dedent(f"""\
        Please process the following NEAR blockchain event:

        Event Type: {event.event_type}
        Request ID: {event.request_id}
        Sender: {event.sender}
        Timestamp: {event.timestamp.isoformat()}

        Event Data:
        """)
    return (
        header
        + payload
        + "\n\nPlease analyze this event and provide a concise response "
        "that can be sent back to the blockchain contract."
    )


class EventProcessor:
    """Turns one AgentEvent into a sampled response and a response transaction.

    `process_event` never raises for pipeline failures: sampling timeouts,
    empty responses and submission errors all come back as a failed
    ProcessingResult. A missing account is a precondition error and does raise.
    """

    DEFAULT_MAX_TOKENS = 1000
    DEFAULT_TIMEOUT = 120.0  # seconds

    def __init__(
        self,
        account: NearAccount | None = None,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        sampling_timeout: float = DEFAULT_TIMEOUT,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        self._account = account
        self._gas_limit = gas_limit
        self._sampling_timeout = sampling_timeout
        self._max_tokens = max_tokens
        self._in_flight: dict[str, EventContext] = {}
        self._stats = ProcessingStats()

        self.request_issued: Signal[EventContext] = Signal("request_issued")
        self.response_received: Signal[ResponseReceived] = Signal("response_received")
        self.response_submitted: Signal[ResponseSubmitted] = Signal("response_submitted")
        self.processed: Signal[ProcessingResult] = Signal("processed")
        self.failed: Signal[ProcessingResult] = Signal("failed")
        self.stats_updated: Signal[ProcessingStats] = Signal("stats_updated")

    def set_account(self, account: NearAccount) -> None:
        self._account = account

    async def process_event(
        self,
        event: AgentEvent,
        subscription: Subscription,
        account: NearAccount | None = None,
    ) -> ProcessingResult:
        account = account or self._account
        if account is None:
            raise ConfigurationError("NEAR account not set. Call set_account() first.")

        start = time.monotonic()
        context = EventContext(event=event, subscription=subscription)
        log.info("Processing '%s' event, request %s", event.event_type, event.request_id)

        self._in_flight[event.request_id] = context
        try:
            await self.request_issued.emit(context)
            response = await self._request_sample(event, subscription)
            await self.response_received.emit(ResponseReceived(context=context, response=response))

            if response is None or not response.text:
                raise SamplingError("No valid response from sampling channel")

            tx_hash = await self._submit_response(account, event.request_id, response.text, subscription)
            await self.response_submitted.emit(ResponseSubmitted(context=context, tx_hash=tx_hash))

            result = ProcessingResult(
                success=True,
                request_id=event.request_id,
                subscription=subscription,
                event=event,
                processing_time_ms=_elapsed_ms(start),
                response=response.text,
                tx_hash=tx_hash,
            )
            log.info(
                "Processed request %s in %dms (tx=%s)",
                event.request_id, result.processing_time_ms, tx_hash[:16],
            )
        except Exception as exc:
            result = ProcessingResult(
                success=False,
                request_id=event.request_id,
                subscription=subscription,
                event=event,
                processing_time_ms=_elapsed_ms(start),
                error=str(exc) or type(exc).__name__,
            )
            log.error("Failed to process request %s: %s", event.request_id, result.error)
        finally:
            self._in_flight.pop(event.request_id, None)

        await self._record(result)
        return result

    async def _request_sample(
        self, event: AgentEvent, subscription: Subscription,
    ) -> SamplingResponse:
        request = SamplingRequest(
            messages=[SamplingMessage(role="user", text=format_event_prompt(event))],
            max_tokens=self._max_tokens,
            include_context="thisServer",
        )
        log.debug("Requesting sample for '%s' event", event.event_type)
        try:
            return await asyncio.wait_for(
                subscription.channel.request_sample(request),
                timeout=self._sampling_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise SamplingError(
                f"Sampling timeout after {self._sampling_timeout:g}s"
            ) from exc
        except Exception as exc:
            raise SamplingError(f"Sampling failed: {exc}") from exc

    async def _submit_response(
        self,
        account: NearAccount,
        request_id: str,
        text: str,
        subscription: Subscription,
    ) -> str:
        log.info(
            "Sending response for request %s to %s.%s",
            request_id, subscription.contract_id, subscription.response_method_name,
        )
        try:
            return await account.function_call(
                subscription.contract_id,
                subscription.response_method_name,
                {
                    "data_id": request_id,
                    "response": text,
                    "timestamp": int(time.time() * 1000),
                },
                gas=self._gas_limit,
            )
        except Exception as exc:
            raise SubmissionError(f"Blockchain response failed: {exc}") from exc

    async def _record(self, result: ProcessingResult) -> None:
        self._stats.total_processed += 1
        self._stats.total_processing_time_ms += result.processing_time_ms
        if result.success:
            self._stats.successful += 1
            await self.processed.emit(result)
        else:
            self._stats.failed += 1
            await self.failed.emit(result)
        await self.stats_updated.emit(self.get_stats())

    # ── Accessors ─────────────────────────────────────────

    def get_stats(self) -> ProcessingStats:
        return ProcessingStats(
            total_processed=self._stats.total_processed,
            successful=self._stats.successful,
            failed=self._stats.failed,
            total_processing_time_ms=self._stats.total_processing_time_ms,
            current_queue_size=len(self._in_flight),
        )

    def get_queue_status(self) -> QueueStatus:
        return QueueStatus(
            queue_size=len(self._in_flight),
            processing_items=[
                QueueItem(
                    request_id=request_id,
                    event_type=ctx.event.event_type,
                    contract_id=ctx.subscription.contract_id,
                    detected_at=ctx.event.timestamp,
                )
                for request_id, ctx in self._in_flight.items()
            ],
        )

    def is_processing(self, request_id: str) -> bool:
        return request_id in self._in_flight

    def get_processing_request_ids(self) -> list[str]:
        return list(self._in_flight)

    def reset_stats(self) -> None:
        self._stats = ProcessingStats()
        log.info("Processing statistics reset")

    def cleanup(self) -> None:
        self._in_flight.clear()
        clear_signals(self)
        self._account = None
        log.info("EventProcessor cleaned up")


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
