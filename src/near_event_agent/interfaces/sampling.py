"""SamplingChannel protocol - requests generated text from an AI-capable client."""

from __future__ import annotations

from typing import Protocol

from near_event_agent.models.sampling import SamplingRequest, SamplingResponse


class SamplingChannel(Protocol):
    """One client session able to answer sampling requests."""

    async def request_sample(self, request: SamplingRequest) -> SamplingResponse:
        ...
