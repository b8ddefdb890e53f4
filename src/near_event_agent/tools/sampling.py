"""MCP sampling channel - asks the connected client to generate text."""

from __future__ import annotations

import logging

from mcp import types
from mcp.server.session import ServerSession

from near_event_agent.models.sampling import SamplingRequest, SamplingResponse

log = logging.getLogger(__name__)


class McpSamplingChannel:
    """SamplingChannel over an MCP server session (sampling/createMessage)."""

    def __init__(self, session: ServerSession) -> None:
        self._session = session

    async def request_sample(self, request: SamplingRequest) -> SamplingResponse:
        messages = [
            types.SamplingMessage(
                role=msg.role,
                content=types.TextContent(type="text", text=msg.text),
            )
            for msg in request.messages
        ]
        result = await self._session.create_message(
            messages=messages,
            max_tokens=request.max_tokens,
            system_prompt=request.system_prompt,
            include_context=request.include_context,
        )

        content = result.content
        text = content.text if isinstance(content, types.TextContent) else None
        if text is None:
            log.warning("Sampling returned non-text content (%s)", getattr(content, "type", "?"))
        return SamplingResponse(text=text, model=result.model, stop_reason=result.stopReason)
