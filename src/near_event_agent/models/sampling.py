"""Request/response shapes for the AI sampling capability."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SamplingMessage:
    role: str  # "user" or "assistant"
    text: str


@dataclass
class SamplingRequest:
    """A sampling request, mirroring the MCP sampling/createMessage params."""

    messages: list[SamplingMessage] = field(default_factory=list)
    max_tokens: int = 1000
    include_context: str = "thisServer"  # "none" | "thisServer" | "allServers"
    system_prompt: str | None = None


@dataclass
class SamplingResponse:
    """Text produced by the client. `text` is None for non-text content."""

    text: str | None
    model: str | None = None
    stop_reason: str | None = None
