"""NEAR JSON-RPC read client over httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from near_event_agent.errors import NearRpcError

log = logging.getLogger(__name__)


class NearRpcClient:
    """Thin async JSON-RPC 2.0 client for the read endpoints the poller needs.

    Results are returned as the raw `result` dicts from the node. RPC-level
    `error` objects and HTTP failures raise NearRpcError.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=10))

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    async def close(self) -> None:
        await self._client.aclose()

    async def call(self, method: str, params: dict[str, Any] | list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": "dontcare", "method": method, "params": params}
        try:
            resp = await self._client.post(self._rpc_url, json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as exc:
            raise NearRpcError(method, exc) from exc
        except ValueError as exc:
            raise NearRpcError(method, f"invalid JSON response: {exc}") from exc

        if body.get("error"):
            err = body["error"]
            cause = err.get("cause", {}) if isinstance(err, dict) else {}
            detail = cause.get("name") or (err.get("message") if isinstance(err, dict) else err)
            raise NearRpcError(method, detail)
        return body.get("result")

    # ── Endpoints ──────────────────────────────────────────

    async def block(
        self, block_id: int | str | None = None, finality: str | None = None
    ) -> dict[str, Any]:
        """Block by height or hash, or by finality when no id is given."""
        if block_id is not None:
            params: dict[str, Any] = {"block_id": block_id}
        else:
            params = {"finality": finality or "final"}
        return await self.call("block", params)

    async def chunk(self, chunk_hash: str) -> dict[str, Any]:
        return await self.call("chunk", {"chunk_id": chunk_hash})

    async def tx_status(
        self, tx_hash: str, sender_id: str, wait_until: str = "INCLUDED"
    ) -> dict[str, Any]:
        return await self.call(
            "tx",
            {"tx_hash": tx_hash, "sender_account_id": sender_id, "wait_until": wait_until},
        )

    async def status(self) -> dict[str, Any]:
        return await self.call("status", [])

    async def view_account(self, account_id: str) -> dict[str, Any]:
        return await self.call(
            "query",
            {"request_type": "view_account", "finality": "final", "account_id": account_id},
        )
