"""MCP server exposing the watcher tools.

Annotations here stay evaluated (no postponed evaluation): FastMCP inspects
tool signatures at registration to find the Context parameter.
"""

import logging

from mcp.server.fastmcp import Context, FastMCP

from near_event_agent.models.config import AgentConfig
from near_event_agent.tools import handlers
from near_event_agent.tools.sampling import McpSamplingChannel
from near_event_agent.watcher import EventWatcher

log = logging.getLogger(__name__)

SERVER_NAME = "near-event-agent"


def build_server(watcher: EventWatcher) -> FastMCP:
    """Create a FastMCP server whose tools drive `watcher`."""
    server = FastMCP(SERVER_NAME)

    @server.tool(
        description=(
            "Start watching for specific events on a NEAR contract "
            "and process them with AI responses"
        )
    )
    async def watch_near_event(
        contract_id: str,
        event_name: str,
        response_method_name: str,
        ctx: Context,
        cron_expression: str | None = None,
    ) -> str:
        return await handlers.watch_near_event(
            watcher,
            McpSamplingChannel(ctx.session),
            contract_id,
            event_name,
            response_method_name,
            cron_expression,
        )

    @server.tool(description="Stop watching for specific events on a NEAR contract")
    async def stop_watching_near_event(contract_id: str, event_name: str) -> str:
        return await handlers.stop_watching_near_event(watcher, contract_id, event_name)

    @server.tool(description="List all currently watched NEAR events and their status")
    async def list_watched_near_events(include_stats: bool = False) -> str:
        return await handlers.list_watched_near_events(watcher, include_stats)

    return server


async def run_server(cfg: AgentConfig) -> None:
    """Serve the tools over stdio until the client disconnects."""
    watcher = EventWatcher.from_config(cfg)
    server = build_server(watcher)
    log.info("Serving %s over stdio (network: %s)", SERVER_NAME, cfg.network)
    try:
        await server.run_stdio_async()
    finally:
        await watcher.close()
        log.info("%s stopped", SERVER_NAME)
