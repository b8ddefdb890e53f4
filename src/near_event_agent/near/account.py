"""NEAR account and account provider.

Reads go through NearRpcClient; signing and function calls go through py-near.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from py_near.account import Account as PyNearAccount

from near_event_agent.errors import ConfigurationError, NearRpcError
from near_event_agent.models.config import AgentConfig
from near_event_agent.models.snapshots import AccountStatus
from near_event_agent.near.rpc import NearRpcClient

log = logging.getLogger(__name__)


class NearChainAccount:
    """Implements the NearAccount protocol on top of an RPC client and a signer."""

    def __init__(self, account_id: str, rpc: NearRpcClient, signer: Any) -> None:
        self.account_id = account_id
        self._rpc = rpc
        self._signer = signer

    async def view_block(
        self, *, block_id: int | str | None = None, finality: str | None = None
    ) -> dict[str, Any]:
        return await self._rpc.block(block_id=block_id, finality=finality)

    async def view_chunk(self, chunk_hash: str) -> dict[str, Any]:
        return await self._rpc.chunk(chunk_hash)

    async def view_transaction_status(
        self, tx_hash: str, sender_id: str, wait_until: str = "INCLUDED"
    ) -> dict[str, Any]:
        return await self._rpc.tx_status(tx_hash, sender_id, wait_until)

    async def function_call(
        self, contract_id: str, method_name: str, args: dict[str, Any], gas: int
    ) -> str:
        log.info("Calling %s.%s as %s", contract_id, method_name, self.account_id)
        result = await self._signer.function_call(
            contract_id, method_name, args, gas=gas,
        )
        return result.transaction.hash

    async def shutdown(self) -> None:
        """Close the signer's HTTP session. The RPC client is owned by the provider."""
        if self._signer is not None:
            await self._signer.shutdown()


class NearAccountProvider:
    """Builds and owns the agent's NEAR account.

    Constructed explicitly from config and injected into the EventWatcher.
    `initialize()` is idempotent; `reset()` drops the account so the next
    `initialize()` rebuilds it.
    """

    def __init__(self, cfg: AgentConfig, rpc: NearRpcClient | None = None) -> None:
        self._cfg = cfg
        self._rpc = rpc or NearRpcClient(cfg.rpc_url, timeout=cfg.rpc_timeout)
        self._account: NearChainAccount | None = None
        self._init_lock = asyncio.Lock()

    async def initialize(self) -> NearChainAccount:
        if self._account is not None:
            return self._account

        async with self._init_lock:
            if self._account is None:
                self._account = await self._build_account()
        return self._account

    async def _build_account(self) -> NearChainAccount:
        log.info("Initializing NEAR account %s on %s", self._cfg.account_id, self._cfg.network)
        if not self._cfg.account_id or not self._cfg.account_key:
            raise ConfigurationError("NEAR account id and key must be configured")

        try:
            signer = PyNearAccount(
                self._cfg.account_id, self._cfg.account_key, rpc_addr=self._cfg.rpc_url,
            )
            await signer.startup()
        except Exception as exc:
            raise ConfigurationError(f"NEAR account initialization failed: {exc}") from exc

        log.info("NEAR account initialized: %s", self._cfg.account_id)
        return NearChainAccount(self._cfg.account_id, self._rpc, signer)

    def get_account(self) -> NearChainAccount | None:
        return self._account

    def is_ready(self) -> bool:
        return self._account is not None

    async def validate_connection(self) -> bool:
        if self._account is None:
            return False
        try:
            await self._rpc.view_account(self._cfg.account_id)
        except NearRpcError as exc:
            log.warning("Connection check for %s failed: %s", self._cfg.account_id, exc)
            return False
        return True

    async def reset(self) -> None:
        account, self._account = self._account, None
        if account is not None:
            await account.shutdown()
        log.info("NEAR account provider reset")

    def get_status(self) -> AccountStatus:
        return AccountStatus(
            is_initialized=self._account is not None,
            has_account=self._account is not None,
            account_id=self._cfg.account_id if self._account is not None else None,
            network_id=self._cfg.network,
        )

    async def close(self) -> None:
        try:
            await self.reset()
        finally:
            await self._rpc.close()
