"""Tests 62-63: Signal delivery."""

from __future__ import annotations

from near_event_agent.signals import Signal, clear_signals


# ── Test 62: Sync and async handlers, failures isolated ───────────


async def test_emit_runs_every_handler_in_order():
    signal: Signal[int] = Signal("numbers")
    seen: list[str] = []

    def sync_handler(value):
        seen.append(f"sync:{value}")

    def broken(value):
        raise RuntimeError("listener bug")

    async def async_handler(value):
        seen.append(f"async:{value}")

    signal.connect(sync_handler)
    signal.connect(broken)
    signal.connect(async_handler)

    delivered = await signal.emit(7)

    assert delivered == 2
    assert seen == ["sync:7", "async:7"]


# ── Test 63: Disconnect and clear ─────────────────────────────────


async def test_disconnect_and_clear_signals():
    class Owner:
        def __init__(self):
            self.a: Signal[str] = Signal("a")
            self.b: Signal[str] = Signal("b")

    owner = Owner()
    seen: list[str] = []
    handler = owner.a.connect(seen.append)
    owner.b.connect(seen.append)

    assert owner.a.disconnect(handler)
    assert not owner.a.disconnect(handler)
    assert await owner.a.emit("x") == 0

    clear_signals(owner)
    assert len(owner.b) == 0
    assert seen == []
