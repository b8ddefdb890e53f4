"""NEAR chain integration: RPC reads, account signing, explorer lookups, polling."""

from near_event_agent.near.explorer import NearBlocksExplorer
from near_event_agent.near.poller import BlockPoller, parse_event_log
from near_event_agent.near.rpc import NearRpcClient

__all__ = ["BlockPoller", "NearBlocksExplorer", "NearRpcClient", "parse_event_log"]
