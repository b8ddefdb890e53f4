"""Configuration models for the event agent."""

from __future__ import annotations

from dataclasses import dataclass

EXPLORER_URLS = {
    "mainnet": "https://api.nearblocks.io/v1",
    "testnet": "https://api-testnet.nearblocks.io/v1",
}

DEFAULT_GAS_LIMIT = 300_000_000_000_000  # 300 TGas
DEFAULT_CRON_EXPRESSION = "*/10 * * * * *"  # every 10 seconds
DEFAULT_RESPONSE_METHOD = "agent_response"


def explorer_url_for(network: str) -> str:
    """NearBlocks API base for a network. Anything but mainnet uses the test tier."""
    if network == "mainnet":
        return EXPLORER_URLS["mainnet"]
    return EXPLORER_URLS["testnet"]


@dataclass
class AgentConfig:
    """Complete agent configuration."""

    # Agent
    log_level: str = "info"
    debug: bool = False
    cron_expression: str = DEFAULT_CRON_EXPRESSION
    response_method: str = DEFAULT_RESPONSE_METHOD
    sampling_timeout: float = 120.0  # seconds
    max_tokens: int = 1000

    # NEAR
    network: str = "mainnet"
    rpc_url: str = "https://1rpc.io/near"
    account_id: str = ""
    account_key: str = ""  # loaded from env var NEAR_AGENT_ACCOUNT_KEY
    gas_limit: int = DEFAULT_GAS_LIMIT
    rpc_timeout: float = 30.0  # seconds

    # Explorer
    explorer_url: str = ""  # empty = derive from network
    explorer_timeout: float = 15.0

    # Poller
    batch_size: int = 5
    batch_delay: float = 0.5  # seconds between block batches

    def resolved_explorer_url(self) -> str:
        return self.explorer_url or explorer_url_for(self.network)
