"""Tests 56-57: MCP sampling channel over a session."""

from __future__ import annotations

from mcp import types

from near_event_agent.models.sampling import SamplingMessage, SamplingRequest
from near_event_agent.processing.processor import EventProcessor
from near_event_agent.tools.sampling import McpSamplingChannel

from tests.factories import make_agent_event, make_subscription


class FakeSession:
    """Stands in for mcp ServerSession.create_message."""

    def __init__(self, content) -> None:
        self.content = content
        self.calls: list[dict] = []

    async def create_message(self, **kwargs) -> types.CreateMessageResult:
        self.calls.append(kwargs)
        return types.CreateMessageResult(
            role="assistant",
            content=self.content,
            model="claude-test",
            stopReason="endTurn",
        )


# ── Test 56: Text response mapped through ─────────────────────────


async def test_channel_maps_request_and_text_response():
    session = FakeSession(types.TextContent(type="text", text="pong"))
    channel = McpSamplingChannel(session)

    response = await channel.request_sample(SamplingRequest(
        messages=[SamplingMessage(role="user", text="ping?")],
        max_tokens=256,
    ))

    assert response.text == "pong"
    assert response.model == "claude-test"
    assert response.stop_reason == "endTurn"

    call = session.calls[0]
    assert call["max_tokens"] == 256
    assert call["include_context"] == "thisServer"
    assert call["system_prompt"] is None
    message = call["messages"][0]
    assert message.role == "user"
    assert message.content.text == "ping?"


# ── Test 57: Non-text content yields no response ──────────────────


async def test_non_text_content_fails_processing(mock_account):
    session = FakeSession(types.ImageContent(type="image", data="aGk=", mimeType="image/png"))
    channel = McpSamplingChannel(session)

    response = await channel.request_sample(SamplingRequest(
        messages=[SamplingMessage(role="user", text="draw")],
    ))
    assert response.text is None

    result = await EventProcessor(account=mock_account).process_event(
        make_agent_event(), make_subscription(channel=channel),
    )
    assert not result.success
    assert mock_account.function_calls == []
