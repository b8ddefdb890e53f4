"""Contract event models parsed from NEAR receipt-outcome logs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AgentEvent:
    """One `EVENT_JSON:` log entry matching a watched event name."""

    event_type: str
    request_id: str  # correlates the on-chain request with our response tx
    payload: dict[str, Any]
    sender: str  # predecessor account of the matching receipt
    timestamp: datetime = field(default_factory=_utcnow)  # detection time, not chain time
