"""Tests 74-75: CLI status output and run preconditions."""

from __future__ import annotations

from click.testing import CliRunner

from near_event_agent.cli import cli

from tests.test_config import _clear_env


# ── Test 74: Status masks the key ─────────────────────────────────


def test_status_masks_account_key(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("NEAR_AGENT_ACCOUNT_ID", "agent.testnet")
    monkeypatch.setenv("NEAR_AGENT_ACCOUNT_KEY", "ed25519:supersecret")
    monkeypatch.setenv("NEAR_AGENT_NETWORK", "testnet")

    result = CliRunner().invoke(cli, ["status"])

    assert result.exit_code == 0
    assert "agent.testnet" in result.output
    assert "ed25519:***configured***" in result.output
    assert "supersecret" not in result.output
    assert "https://api-testnet.nearblocks.io/v1" in result.output
    assert "Warning" not in result.output


# ── Test 75: Run refuses an incomplete configuration ──────────────


def test_run_exits_without_credentials(monkeypatch):
    _clear_env(monkeypatch)

    result = CliRunner().invoke(cli, ["run"])

    assert result.exit_code == 1
    assert "account id is not set" in result.output
