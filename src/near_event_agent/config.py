"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from near_event_agent.models.config import AgentConfig

KEY_PREFIXES = ("ed25519:", "secp256k1:")


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "NEAR_AGENT_",
) -> AgentConfig:
    """Load agent configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (NEAR_AGENT_ACCOUNT_KEY, etc.)
        2. TOML config file
        3. Defaults from AgentConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = AgentConfig()

    # ── Agent section ──────────────────────────────────────
    agent = raw.get("agent", {})
    if v := agent.get("log_level"):
        cfg.log_level = str(v)
    if "debug" in agent:
        cfg.debug = bool(agent["debug"])
    if v := agent.get("cron_expression"):
        cfg.cron_expression = str(v)
    if v := agent.get("response_method"):
        cfg.response_method = str(v)
    if v := agent.get("sampling_timeout"):
        cfg.sampling_timeout = float(v)
    if v := agent.get("max_tokens"):
        cfg.max_tokens = int(v)

    # ── NEAR section ───────────────────────────────────────
    near = raw.get("near", {})
    if v := near.get("network"):
        cfg.network = str(v)
    if v := near.get("rpc_url"):
        cfg.rpc_url = str(v)
    if v := near.get("account_id"):
        cfg.account_id = str(v)
    if v := near.get("account_key"):
        cfg.account_key = str(v)
    if v := near.get("gas_limit"):
        cfg.gas_limit = int(v)
    if v := near.get("rpc_timeout"):
        cfg.rpc_timeout = float(v)

    # ── Explorer section ───────────────────────────────────
    explorer = raw.get("explorer", {})
    if v := explorer.get("url"):
        cfg.explorer_url = str(v)
    if v := explorer.get("timeout"):
        cfg.explorer_timeout = float(v)

    # ── Poller section ─────────────────────────────────────
    poller = raw.get("poller", {})
    if "batch_size" in poller:
        cfg.batch_size = int(poller["batch_size"])
    if "batch_delay" in poller:
        cfg.batch_delay = float(poller["batch_delay"])

    # ── Environment variable overrides (highest priority) ──
    if account_id := os.environ.get(f"{env_prefix}ACCOUNT_ID"):
        cfg.account_id = account_id
    if key := os.environ.get(f"{env_prefix}ACCOUNT_KEY"):
        cfg.account_key = key
    if net := os.environ.get(f"{env_prefix}NETWORK"):
        cfg.network = net
    if rpc := os.environ.get(f"{env_prefix}RPC_URL"):
        cfg.rpc_url = rpc
    if gas := os.environ.get(f"{env_prefix}GAS_LIMIT"):
        cfg.gas_limit = int(gas)
    if cron := os.environ.get(f"{env_prefix}CRON"):
        cfg.cron_expression = cron
    if method := os.environ.get(f"{env_prefix}RESPONSE_METHOD"):
        cfg.response_method = method
    if url := os.environ.get(f"{env_prefix}EXPLORER_URL"):
        cfg.explorer_url = url
    if debug := os.environ.get(f"{env_prefix}DEBUG"):
        cfg.debug = debug.strip().lower() in ("1", "true", "yes", "on")

    if cfg.debug:
        cfg.log_level = "debug"

    return cfg


def validate_config(cfg: AgentConfig) -> list[str]:
    """Return human-readable problems with `cfg`. Empty means usable."""
    problems: list[str] = []
    if not cfg.account_id:
        problems.append("NEAR account id is not set (NEAR_AGENT_ACCOUNT_ID)")
    if not cfg.account_key:
        problems.append("NEAR account key is not set (NEAR_AGENT_ACCOUNT_KEY)")
    elif not cfg.account_key.startswith(KEY_PREFIXES):
        problems.append("NEAR account key must start with 'ed25519:' or 'secp256k1:'")
    if cfg.gas_limit <= 0:
        problems.append("gas_limit must be positive")
    if cfg.batch_size <= 0:
        problems.append("batch_size must be positive")
    return problems
