"""Tests 49-55: MCP tool handlers and server registration."""

from __future__ import annotations

from near_event_agent.tools import handlers
from near_event_agent.tools.server import build_server

from tests.factories import CONTRACT_ID
from tests.mocks import MockSamplingChannel


# ── Test 49: Watch reports the subscription ───────────────────────


async def test_watch_tool_success_text(watcher):
    text = await handlers.watch_near_event(
        watcher, MockSamplingChannel(), CONTRACT_ID, "ping", "pong",
    )

    assert "Started watching for 'ping' events" in text
    assert f"Subscription ID:  {CONTRACT_ID}:ping" in text
    assert "Response method:  pong" in text
    assert "Polling:          */10 * * * * *" in text
    assert watcher.is_watching(CONTRACT_ID, "ping")


# ── Test 50: Duplicate watch explained ────────────────────────────


async def test_watch_tool_duplicate_text(watcher):
    await handlers.watch_near_event(watcher, MockSamplingChannel(), CONTRACT_ID, "ping", "pong")

    text = await handlers.watch_near_event(
        watcher, MockSamplingChannel(), CONTRACT_ID, "ping", "pong",
    )

    assert text.startswith("Already watching event 'ping'")
    assert "list_watched_near_events" in text


# ── Test 51: Failed watch lists hints ─────────────────────────────


async def test_watch_tool_failure_lists_hints(watcher, scheduler):
    scheduler.fail_start = ValueError("Invalid cron expression 'soon'")

    text = await handlers.watch_near_event(
        watcher, MockSamplingChannel(), CONTRACT_ID, "ping", "pong", "soon",
    )

    assert text.startswith("Failed to start watching events")
    assert "Invalid cron expression" in text
    assert "contract ID" in text
    assert "gas fees" in text
    assert "connectivity" in text


# ── Test 52: Stop distinguishes outcomes ──────────────────────────


async def test_stop_tool_outcomes(watcher, scheduler):
    not_watching = await handlers.stop_watching_near_event(watcher, CONTRACT_ID, "ping")
    assert not_watching.startswith("Not currently watching 'ping'")

    await handlers.watch_near_event(watcher, MockSamplingChannel(), CONTRACT_ID, "ping", "pong")
    stopped = await handlers.stop_watching_near_event(watcher, CONTRACT_ID, "ping")
    assert stopped.startswith("Stopped watching 'ping'")

    await handlers.watch_near_event(watcher, MockSamplingChannel(), CONTRACT_ID, "ping", "pong")
    scheduler.fail_stop = RuntimeError("scheduler gone")
    failed = await handlers.stop_watching_near_event(watcher, CONTRACT_ID, "ping")
    assert failed.startswith("Failed to stop watching events")
    assert "scheduler gone" in failed


# ── Test 53: List before and after initialization ─────────────────


async def test_list_tool_states(watcher):
    text = await handlers.list_watched_near_events(watcher)
    assert "not initialized" in text

    await handlers.watch_near_event(watcher, MockSamplingChannel(), CONTRACT_ID, "ping", "pong")
    await watcher.stop_watching(CONTRACT_ID, "ping")
    text = await handlers.list_watched_near_events(watcher)
    assert text.startswith("No events are currently being watched")


# ── Test 54: List with statistics ─────────────────────────────────


async def test_list_tool_with_stats(watcher):
    await handlers.watch_near_event(watcher, MockSamplingChannel(), CONTRACT_ID, "ping", "pong")
    await handlers.watch_near_event(watcher, MockSamplingChannel(), CONTRACT_ID, "transfer", "ack")
    await watcher.pause_watching(CONTRACT_ID, "transfer")

    plain = await handlers.list_watched_near_events(watcher)
    detailed = await handlers.list_watched_near_events(watcher, include_stats=True)

    assert "Total subscriptions: 2" in plain
    assert f"1. [active] ping on {CONTRACT_ID}" in plain
    assert f"2. [paused] transfer on {CONTRACT_ID}" in plain
    assert "Last event:      never" in plain
    assert "Statistics:" not in plain
    assert "Success rate:         0.0%" in detailed
    assert "Events detected:      0" in detailed


# ── Test 55: Server exposes the three tools ───────────────────────


async def test_server_registers_tools(watcher):
    server = build_server(watcher)

    tools = {tool.name: tool for tool in await server.list_tools()}

    assert set(tools) == {
        "watch_near_event", "stop_watching_near_event", "list_watched_near_events",
    }
    watch_params = tools["watch_near_event"].inputSchema["properties"]
    assert {"contract_id", "event_name", "response_method_name", "cron_expression"} <= set(watch_params)
    assert "ctx" not in watch_params
    assert set(tools["watch_near_event"].inputSchema["required"]) == {
        "contract_id", "event_name", "response_method_name",
    }
