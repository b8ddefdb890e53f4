"""Event processing: sampling and on-chain responses."""

from near_event_agent.processing.processor import EventProcessor, format_event_prompt

__all__ = ["EventProcessor", "format_event_prompt"]
