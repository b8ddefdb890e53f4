"""Account protocols - chain reads, function calls, and the provider that owns them."""

from __future__ import annotations

from typing import Any, Protocol

from near_event_agent.models.snapshots import AccountStatus


class NearAccount(Protocol):
    """An authenticated NEAR account. Read calls return raw RPC result dicts."""

    account_id: str

    async def view_block(
        self, *, block_id: int | str | None = None, finality: str | None = None
    ) -> dict[str, Any]:
        """Fetch a block by height/hash, or by finality ("final", "optimistic")."""
        ...

    async def view_chunk(self, chunk_hash: str) -> dict[str, Any]:
        """Fetch a chunk, including its receipts."""
        ...

    async def view_transaction_status(
        self, tx_hash: str, sender_id: str, wait_until: str = "INCLUDED"
    ) -> dict[str, Any]:
        """Fetch a transaction with its receipt outcomes (and their logs)."""
        ...

    async def function_call(
        self, contract_id: str, method_name: str, args: dict[str, Any], gas: int
    ) -> str:
        """Sign and submit a function call. Returns the transaction hash."""
        ...


class AccountProvider(Protocol):
    """Owns account construction and connection health."""

    async def initialize(self) -> NearAccount:
        """Build the account. Idempotent."""
        ...

    def get_account(self) -> NearAccount | None:
        ...

    def is_ready(self) -> bool:
        ...

    async def validate_connection(self) -> bool:
        """True when the RPC node answers for our account."""
        ...

    async def reset(self) -> None:
        """Drop and shut down the account; the next initialize() rebuilds it."""
        ...

    def get_status(self) -> AccountStatus:
        ...
