"""Exception types raised across the watcher pipeline."""

from __future__ import annotations


class WatcherError(Exception):
    """Base class for all near_event_agent errors."""


class ConfigurationError(WatcherError):
    """A required dependency or setting is missing or invalid."""


class SubscriptionExistsError(WatcherError):
    """A subscription for the same (contract, event) pair is already registered."""

    def __init__(self, contract_id: str, event_name: str) -> None:
        super().__init__(
            f"Already watching event '{event_name}' on contract '{contract_id}'"
        )
        self.contract_id = contract_id
        self.event_name = event_name


class SamplingError(WatcherError):
    """The sampling channel timed out, failed, or returned no text."""


class SubmissionError(WatcherError):
    """The response function call could not be submitted on-chain."""


class NearRpcError(WatcherError):
    """A NEAR JSON-RPC call failed or returned an error object."""

    def __init__(self, method: str, detail: object) -> None:
        super().__init__(f"NEAR RPC '{method}' failed: {detail}")
        self.method = method
        self.detail = detail


class ExplorerError(WatcherError):
    """The NearBlocks explorer API returned an error."""
