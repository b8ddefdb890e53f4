"""Event watcher - subscription registry, scheduling, and component wiring."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol, Sequence

from near_event_agent.errors import ConfigurationError, SubscriptionExistsError, WatcherError
from near_event_agent.interfaces.account import AccountProvider
from near_event_agent.interfaces.scheduler import JobCallback, JobScheduler
from near_event_agent.models.config import (
    DEFAULT_CRON_EXPRESSION,
    DEFAULT_RESPONSE_METHOD,
    AgentConfig,
)
from near_event_agent.models.notifications import (
    BlockError,
    EventFound,
    EventOutcome,
    WatcherErrorNotice,
)
from near_event_agent.models.records import (
    Subscription,
    WatchEventRequest,
    WatcherStats,
    subscription_key,
)
from near_event_agent.models.snapshots import (
    SubscriptionSnapshot,
    WatchedEvent,
    WatchingStatus,
)
from near_event_agent.near.poller import BlockPoller
from near_event_agent.processing.processor import EventProcessor
from near_event_agent.signals import Signal, clear_signals

log = logging.getLogger(__name__)


class Closeable(Protocol):
    async def close(self) -> None: ...


class EventWatcher:
    """Orchestrates event watching for any number of (contract, event) pairs.

    Owns the subscription registry and one scheduled job per subscription.
    Each tick polls blocks through the BlockPoller; events it finds are
    handed to the EventProcessor and the outcome is folded into the stats.

    Subscription states: active <-> paused -> removed. Pausing keeps the
    registry entry and the poller cursor; removal discards both.
    """

    def __init__(
        self,
        account_provider: AccountProvider,
        scheduler: JobScheduler,
        poller: BlockPoller,
        processor: EventProcessor,
        default_cron_expression: str = DEFAULT_CRON_EXPRESSION,
        default_response_method: str = DEFAULT_RESPONSE_METHOD,
        resources: Sequence[Closeable] = (),
    ) -> None:
        self._account_provider = account_provider
        self._scheduler = scheduler
        self.poller = poller
        self.processor = processor
        self._default_cron = default_cron_expression
        self._default_method = default_response_method
        self._resources = list(resources)

        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._wired = False
        self._start_time = time.monotonic()
        self._subscriptions: dict[str, Subscription] = {}
        self._stats = WatcherStats()

        # External notifications
        self.started: Signal[str] = Signal("started")
        self.stopped: Signal[str] = Signal("stopped")
        self.paused: Signal[str] = Signal("paused")
        self.resumed: Signal[str] = Signal("resumed")
        self.event_detected: Signal[EventFound] = Signal("event_detected")
        self.event_processed: Signal[EventOutcome] = Signal("event_processed")
        self.event_failed: Signal[EventOutcome] = Signal("event_failed")
        self.error: Signal[WatcherErrorNotice] = Signal("error")
        self.stats_updated: Signal[WatcherStats] = Signal("stats_updated")

        self._wire_components()

    @classmethod
    def from_config(cls, cfg: AgentConfig) -> EventWatcher:
        """Build a watcher with the production NEAR, NearBlocks and APScheduler components."""
        from near_event_agent.near.account import NearAccountProvider
        from near_event_agent.near.explorer import NearBlocksExplorer
        from near_event_agent.scheduler import APSchedulerJobScheduler

        explorer = NearBlocksExplorer(cfg.resolved_explorer_url(), timeout=cfg.explorer_timeout)
        provider = NearAccountProvider(cfg)
        return cls(
            account_provider=provider,
            scheduler=APSchedulerJobScheduler(),
            poller=BlockPoller(explorer, batch_size=cfg.batch_size, batch_delay=cfg.batch_delay),
            processor=EventProcessor(
                gas_limit=cfg.gas_limit,
                sampling_timeout=cfg.sampling_timeout,
                max_tokens=cfg.max_tokens,
            ),
            default_cron_expression=cfg.cron_expression,
            default_response_method=cfg.response_method,
            resources=[provider, explorer],
        )

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # ── Lifecycle ─────────────────────────────────────────

    async def _initialize(self) -> None:
        """Initialize the account once and hand it to the components."""
        if self._initialized:
            return

        async with self._init_lock:
            if not self._initialized:
                await self._initialize_locked()

    async def _initialize_locked(self) -> None:
        log.info("Initializing EventWatcher")
        if not self._account_provider.is_ready():
            await self._account_provider.initialize()

        if not await self._account_provider.validate_connection():
            raise ConfigurationError("NEAR account connection is not valid")

        account = self._account_provider.get_account()
        if account is None:
            raise ConfigurationError("Account provider returned no NEAR account")

        self._wire_components()
        self.poller.set_account(account)
        self.processor.set_account(account)
        self._initialized = True
        log.info("EventWatcher initialized")

    def _wire_components(self) -> None:
        if self._wired:
            return
        self.poller.event_found.connect(self._on_event_found)
        self.poller.block_error.connect(self._on_block_error)
        self._wired = True

    async def cleanup(self) -> None:
        """Stop everything and reset. Safe to call repeatedly."""
        log.info("Cleaning up EventWatcher")
        await self.stop_all_watching()

        # Paused subscriptions are not covered by stop_all_watching
        for sub in list(self._subscriptions.values()):
            try:
                self._discard(sub.id)
            except Exception as exc:
                log.error("Error discarding subscription %s: %s", sub.id, exc)

        self.poller.cleanup()
        self.processor.cleanup()
        self._subscriptions.clear()
        self._initialized = False
        self._wired = False
        clear_signals(self)
        log.info("EventWatcher cleaned up")

    async def close(self) -> None:
        """Final shutdown: cleanup, stop the scheduler, close network clients."""
        await self.cleanup()
        self._scheduler.shutdown()
        for resource in self._resources:
            try:
                await resource.close()
            except Exception as exc:
                log.warning("Error closing %s: %s", type(resource).__name__, exc)
        self._resources.clear()

    # ── Public API ────────────────────────────────────────

    async def watch_event(self, request: WatchEventRequest) -> str:
        """Register a subscription and start polling for it. Returns its id."""
        await self._initialize()

        if self.is_watching(request.contract_id, request.event_name):
            raise SubscriptionExistsError(request.contract_id, request.event_name)

        log.info(
            "Starting to watch '%s' on %s", request.event_name, request.contract_id,
        )
        subscription = Subscription(
            contract_id=request.contract_id,
            event_name=request.event_name,
            response_method_name=request.response_method_name or self._default_method,
            cron_expression=request.cron_expression or self._default_cron,
            channel=request.channel,
        )
        self._subscriptions[subscription.id] = subscription

        try:
            self.poller.initialize_subscription(subscription.id)
            subscription.job = self._scheduler.start(
                subscription.cron_expression,
                self._make_tick(subscription),
                subscription.id,
            )
        except Exception as exc:
            log.error("Failed to start watching %s: %s", subscription.id, exc)
            self._discard(subscription.id)
            raise WatcherError(f"Failed to watch event: {exc}") from exc

        await self.started.emit(subscription.id)
        await self._emit_stats()
        return subscription.id

    async def stop_watching(self, contract_id: str, event_name: str) -> bool:
        """Remove a subscription. False when nothing was registered for the pair.

        Raises WatcherError if teardown fails.
        """
        subscription = self._subscriptions.get(subscription_key(contract_id, event_name))
        if subscription is None:
            log.warning("No subscription for '%s' on %s", event_name, contract_id)
            return False

        log.info("Stopping watch for '%s' on %s", event_name, contract_id)
        try:
            self._discard(subscription.id)
        except Exception as exc:
            log.error("Error stopping %s: %s", subscription.id, exc)
            await self.error.emit(WatcherErrorNotice(subscription_id=subscription.id, error=exc))
            raise WatcherError(f"Failed to stop watching {subscription.id}: {exc}") from exc

        await self.stopped.emit(subscription.id)
        await self._emit_stats()
        return True

    async def stop_all_watching(self) -> None:
        """Stop every active subscription; one failure does not stop the rest."""
        for subscription in self._active_subscriptions():
            try:
                await self.stop_watching(subscription.contract_id, subscription.event_name)
            except Exception as exc:
                log.error("Error stopping subscription %s: %s", subscription.id, exc)

    async def pause_watching(self, contract_id: str, event_name: str) -> bool:
        subscription = self._subscriptions.get(subscription_key(contract_id, event_name))
        if subscription is None:
            return False
        if not subscription.is_active:
            return True

        if subscription.job is not None:
            self._scheduler.pause(subscription.job)
        subscription.is_active = False
        log.info("Paused %s", subscription.id)
        await self.paused.emit(subscription.id)
        return True

    async def resume_watching(self, contract_id: str, event_name: str) -> bool:
        subscription = self._subscriptions.get(subscription_key(contract_id, event_name))
        if subscription is None:
            return False
        if subscription.is_active:
            return True

        if subscription.job is not None:
            self._scheduler.resume(subscription.job)
        subscription.is_active = True
        log.info("Resumed %s", subscription.id)
        await self.resumed.emit(subscription.id)
        return True

    def is_watching(self, contract_id: str, event_name: str) -> bool:
        return subscription_key(contract_id, event_name) in self._subscriptions

    def get_subscription(self, contract_id: str, event_name: str) -> Subscription | None:
        return self._subscriptions.get(subscription_key(contract_id, event_name))

    def get_watched_events(self) -> list[WatchedEvent]:
        return [
            WatchedEvent(
                contract_id=sub.contract_id,
                event_name=sub.event_name,
                subscription_id=sub.id,
            )
            for sub in self._active_subscriptions()
        ]

    def get_stats(self) -> WatcherStats:
        return WatcherStats(
            total_subscriptions=len(self._subscriptions),
            active_subscriptions=len(self._active_subscriptions()),
            total_events_detected=self._stats.total_events_detected,
            total_events_processed=self._stats.total_events_processed,
            total_events_successful=self._stats.total_events_successful,
            total_events_failed=self._stats.total_events_failed,
            total_processing_time_ms=self._stats.total_processing_time_ms,
            uptime_seconds=time.monotonic() - self._start_time,
        )

    def get_watching_status(self) -> WatchingStatus:
        return WatchingStatus(
            is_initialized=self._initialized,
            total_subscriptions=len(self._subscriptions),
            subscriptions=[SubscriptionSnapshot.of(sub) for sub in self._subscriptions.values()],
            account=self._account_provider.get_status(),
            poller=self.poller.get_stats(),
            processor=self.processor.get_stats(),
        )

    # ── Internals ─────────────────────────────────────────

    def _active_subscriptions(self) -> list[Subscription]:
        return [sub for sub in self._subscriptions.values() if sub.is_active]

    def _discard(self, subscription_id: str) -> None:
        """Stop the job, drop poller state and the registry entry."""
        subscription = self._subscriptions.get(subscription_id)
        if subscription is not None and subscription.job is not None:
            self._scheduler.stop(subscription.job)
            subscription.job = None
        self.poller.remove_subscription(subscription_id)
        self._subscriptions.pop(subscription_id, None)

    def _make_tick(self, subscription: Subscription) -> JobCallback:
        async def _tick() -> None:
            await self._on_tick(subscription)
        return _tick

    async def _on_tick(self, subscription: Subscription) -> None:
        if self.poller.is_processing(subscription.id):
            log.debug("Subscription %s still polling, skipping tick", subscription.id)
            return

        try:
            result = await self.poller.poll_for_events(subscription)
        except Exception as exc:
            log.error("Polling failed for %s: %s", subscription.id, exc)
            await self.error.emit(WatcherErrorNotice(subscription_id=subscription.id, error=exc))
            return

        if result.blocks_processed:
            log.debug(
                "Polled %d blocks for %s, %d events",
                result.blocks_processed, subscription.id, result.events_found,
            )

    async def _on_event_found(self, found: EventFound) -> None:
        event, subscription = found.event, found.subscription
        log.info("Event detected: %s from %s", event.event_type, subscription.contract_id)

        self._stats.total_events_detected += 1
        subscription.last_event_at = event.timestamp
        await self.event_detected.emit(found)

        account = self._account_provider.get_account()
        if account is None:
            self._stats.total_events_failed += 1
            await self.event_failed.emit(EventOutcome(
                request_id=event.request_id,
                subscription_id=subscription.id,
                processing_time_ms=0,
                error="NEAR account not available",
            ))
            await self._emit_stats()
            return

        result = await self.processor.process_event(event, subscription, account)

        self._stats.total_events_processed += 1
        self._stats.total_processing_time_ms += result.processing_time_ms
        if result.success:
            self._stats.total_events_successful += 1
            await self.event_processed.emit(EventOutcome.from_result(result))
        else:
            self._stats.total_events_failed += 1
            await self.event_failed.emit(EventOutcome.from_result(result))
        await self._emit_stats()

    async def _on_block_error(self, err: BlockError) -> None:
        await self.error.emit(WatcherErrorNotice(subscription_id=err.subscription_id, error=err.error))

    async def _emit_stats(self) -> None:
        await self.stats_updated.emit(self.get_stats())
