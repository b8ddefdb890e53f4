"""Tool handlers - watcher operations rendered as human-readable text.

Handlers never raise: every failure is reported in the returned text.
"""

from __future__ import annotations

import logging

from near_event_agent.errors import SubscriptionExistsError
from near_event_agent.interfaces.sampling import SamplingChannel
from near_event_agent.models.records import WatchEventRequest
from near_event_agent.watcher import EventWatcher

log = logging.getLogger(__name__)


async def watch_near_event(
    watcher: EventWatcher,
    channel: SamplingChannel,
    contract_id: str,
    event_name: str,
    response_method_name: str,
    cron_expression: str | None = None,
) -> str:
    log.info("Tool watch_near_event: '%s' on %s", event_name, contract_id)

    if watcher.is_watching(contract_id, event_name):
        return (
            f"Already watching event '{event_name}' on contract '{contract_id}'. "
            "Use list_watched_near_events to see all subscriptions."
        )

    try:
        subscription_id = await watcher.watch_event(WatchEventRequest(
            contract_id=contract_id,
            event_name=event_name,
            channel=channel,
            response_method_name=response_method_name,
            cron_expression=cron_expression,
        ))
    except SubscriptionExistsError as exc:
        return f"{exc}. Use list_watched_near_events to see all subscriptions."
    except Exception as exc:
        log.error("watch_near_event failed: %s", exc)
        return "\n".join([
            f"Failed to start watching events: {exc}",
            "",
            "Troubleshooting tips:",
            "  - Check that the contract ID is valid",
            "  - Ensure the event name matches the contract's events",
            "  - Verify the NEAR account has enough balance for gas fees",
            "  - Check network connectivity to the NEAR RPC node",
        ])

    subscription = watcher.get_subscription(contract_id, event_name)
    method = subscription.response_method_name if subscription else response_method_name
    cron = subscription.cron_expression if subscription else cron_expression
    return "\n".join([
        f"Started watching for '{event_name}' events.",
        "",
        "Subscription details:",
        f"  Contract:         {contract_id}",
        f"  Event:            {event_name}",
        f"  Response method:  {method}",
        f"  Polling:          {cron}",
        f"  Subscription ID:  {subscription_id}",
        "  Status:           active",
        "",
        "Matching events will be answered automatically with AI responses.",
    ])


async def stop_watching_near_event(
    watcher: EventWatcher, contract_id: str, event_name: str,
) -> str:
    log.info("Tool stop_watching_near_event: '%s' on %s", event_name, contract_id)
    try:
        stopped = await watcher.stop_watching(contract_id, event_name)
    except Exception as exc:
        log.error("stop_watching_near_event failed: %s", exc)
        return (
            f"Failed to stop watching events: {exc}\n\n"
            "Please try again or check the logs for details."
        )

    if stopped:
        return "\n".join([
            f"Stopped watching '{event_name}' events on contract '{contract_id}'.",
            "No more events will be processed for this subscription.",
            "Use list_watched_near_events to see remaining subscriptions.",
        ])

    return "\n".join([
        f"Not currently watching '{event_name}' on contract '{contract_id}'.",
        "",
        "This could mean:",
        "  - The event was never being watched",
        "  - The subscription was already stopped",
        "  - There is a typo in the contract ID or event name",
        "",
        "Use list_watched_near_events to see all subscriptions.",
    ])


async def list_watched_near_events(
    watcher: EventWatcher, include_stats: bool = False,
) -> str:
    try:
        return _render_status(watcher, include_stats)
    except Exception as exc:
        log.error("list_watched_near_events failed: %s", exc)
        return f"Failed to list watched events: {exc}\n\nPlease try again."


def _render_status(watcher: EventWatcher, include_stats: bool) -> str:
    status = watcher.get_watching_status()

    if not status.is_initialized:
        return (
            "Event watcher not initialized yet. "
            "Start watching an event first using watch_near_event."
        )

    if status.total_subscriptions == 0:
        return "\n".join([
            "No events are currently being watched.",
            "",
            "To start watching events, call watch_near_event with:",
            "  - contract_id: the NEAR contract to monitor",
            "  - event_name: the event to watch for",
            "  - response_method_name: the contract method to call with responses",
        ])

    lines = [
        "NEAR event watching status",
        "",
        f"Account:             {status.account.account_id or '(none)'} ({status.account.network_id})",
        f"Total subscriptions: {status.total_subscriptions}",
        "",
        "Subscriptions:",
    ]
    for index, sub in enumerate(status.subscriptions, start=1):
        state = "active" if sub.is_active else "paused"
        last_event = sub.last_event_at.isoformat(timespec="seconds") if sub.last_event_at else "never"
        lines += [
            "",
            f"{index}. [{state}] {sub.event_name} on {sub.contract_id}",
            f"   Response method: {sub.response_method_name}",
            f"   Polling:         {sub.cron_expression}",
            f"   Created:         {sub.created_at.isoformat(timespec='seconds')}",
            f"   Last event:      {last_event}",
            f"   ID:              {sub.id}",
        ]

    if include_stats:
        stats = watcher.get_stats()
        lines += [
            "",
            "Statistics:",
            f"  Events detected:      {stats.total_events_detected}",
            f"  Events processed:     {stats.total_events_processed}",
            f"  Success rate:         {stats.success_rate:.1f}%",
            f"  Avg processing time:  {stats.average_processing_time_ms:.0f}ms",
            f"  Uptime:               {int(stats.uptime_seconds // 60)} minutes",
        ]

    lines += [
        "",
        "Use stop_watching_near_event to stop a subscription,",
        "or watch_near_event to add a new one.",
    ]
    return "\n".join(lines)
