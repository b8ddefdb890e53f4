"""Shared fixtures for near_event_agent tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from near_event_agent.near.poller import BlockPoller
from near_event_agent.processing.processor import EventProcessor
from near_event_agent.watcher import EventWatcher

from tests.factories import CONTRACT_ID, TEST_ACCOUNT_ID
from tests.mocks import (
    ManualScheduler,
    MockAccount,
    MockAccountProvider,
    MockExplorer,
    MockSamplingChannel,
)

EXPLORER_BASE = "https://testnet.nearblocks.io"


def nearblocks_link(kind: str, id: str) -> str:
    """Build an HTML anchor to nearblocks.io for the report."""
    return f'<a href="{EXPLORER_BASE}/{kind}/{id}" target="_blank">{id}</a>'


# ── Report metadata & explorer links ─────────────────────────────


def pytest_configure(config):
    """Add network info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "NEAR Testnet (mocked)"
    meta["Watched Contract"] = CONTRACT_ID
    meta["Agent Account"] = TEST_ACCOUNT_ID


def pytest_html_results_summary(prefix, summary, postfix):
    """Inject NearBlocks links into the report summary."""
    prefix.append(
        '<div style="margin:8px 0;padding:10px;background:#f8f9fa;border:1px solid #dee2e6;'
        'border-radius:4px;font-family:monospace;font-size:13px;">'
        "<strong>NEAR Testnet Explorer Links</strong><br/>"
        f'Contract: {nearblocks_link("address", CONTRACT_ID)}<br/>'
        f'Agent Account: {nearblocks_link("address", TEST_ACCOUNT_ID)}'
        "</div>"
    )


@pytest.fixture
def mock_account():
    return MockAccount(account_id=TEST_ACCOUNT_ID, final_height=1000)


@pytest.fixture
def mock_explorer():
    return MockExplorer()


@pytest.fixture
def mock_provider(mock_account):
    return MockAccountProvider(mock_account)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def channel():
    return MockSamplingChannel(text="pong")


@pytest.fixture
def poller(mock_explorer, mock_account):
    """BlockPoller wired to the mock chain, no delay between batches."""
    return BlockPoller(mock_explorer, account=mock_account, batch_size=5, batch_delay=0.0)


@pytest.fixture
def processor(mock_account):
    return EventProcessor(account=mock_account, gas_limit=300_000_000_000_000, sampling_timeout=2.0)


@pytest.fixture
async def watcher(mock_provider, scheduler, mock_explorer):
    """Fully wired EventWatcher with mocked components."""
    w = EventWatcher(
        account_provider=mock_provider,
        scheduler=scheduler,
        poller=BlockPoller(mock_explorer, batch_size=5, batch_delay=0.0),
        processor=EventProcessor(sampling_timeout=2.0),
        resources=[mock_provider],
    )
    yield w
    await w.cleanup()
