"""Tier 2 fixtures: local aiohttp servers standing in for NEAR RPC and NearBlocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest
from aiohttp import web

from near_event_agent.near.explorer import NearBlocksExplorer
from near_event_agent.near.rpc import NearRpcClient

RPC_PORT = 9310
EXPLORER_PORT = 9311


@dataclass
class FakeChain:
    """State served by the fake RPC node and explorer."""

    final_height: int = 500
    blocks: dict[int, dict[str, Any]] = field(default_factory=dict)
    chunks: dict[str, dict[str, Any]] = field(default_factory=dict)
    txs: dict[str, dict[str, Any]] = field(default_factory=dict)
    accounts: set[str] = field(default_factory=set)
    tx_by_receipt: dict[str, str] = field(default_factory=dict)
    explorer_status: int = 200
    rpc_requests: list[dict[str, Any]] = field(default_factory=list)
    explorer_queries: list[str] = field(default_factory=list)


def _rpc_error(name: str, message: str) -> dict[str, Any]:
    return {"name": "HANDLER_ERROR", "cause": {"name": name, "info": {}}, "code": -32000, "message": message}


def _dispatch(chain: FakeChain, method: str, params: Any) -> tuple[Any, Any]:
    """Returns (result, error) for one JSON-RPC request."""
    if method == "block":
        if "finality" in params:
            height = chain.final_height
        else:
            height = params["block_id"]
        if height > chain.final_height:
            return None, _rpc_error("UNKNOWN_BLOCK", "DB Not Found Error")
        return chain.blocks.get(height, {"header": {"height": height}, "chunks": []}), None

    if method == "chunk":
        chunk = chain.chunks.get(params["chunk_id"])
        if chunk is None:
            return None, _rpc_error("UNKNOWN_CHUNK", "Chunk Missing")
        return chunk, None

    if method == "tx":
        tx = chain.txs.get(params["tx_hash"])
        if tx is None:
            return None, _rpc_error("UNKNOWN_TRANSACTION", "Transaction doesn't exist")
        return tx, None

    if method == "query" and params.get("request_type") == "view_account":
        if params["account_id"] not in chain.accounts:
            return None, _rpc_error("UNKNOWN_ACCOUNT", "account does not exist")
        return {"amount": "1000000000000000000000000", "storage_usage": 182}, None

    if method == "status":
        return {"chain_id": "testnet", "sync_info": {"latest_block_height": chain.final_height}}, None

    return None, {"code": -32601, "message": "Method not found"}


@pytest.fixture
def fake_chain():
    return FakeChain()


@pytest.fixture
async def rpc_server(fake_chain):
    """Local JSON-RPC endpoint. Returns its URL."""

    async def handle_rpc(request):
        body = await request.json()
        fake_chain.rpc_requests.append(body)
        result, error = _dispatch(fake_chain, body["method"], body["params"])
        reply: dict[str, Any] = {"jsonrpc": "2.0", "id": body.get("id")}
        if error is not None:
            reply["error"] = error
        else:
            reply["result"] = result
        return web.json_response(reply)

    async def handle_broken(request):
        return web.Response(status=502, text="bad gateway")

    app = web.Application()
    app.router.add_post("/", handle_rpc)
    app.router.add_post("/broken", handle_broken)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", RPC_PORT)
    await site.start()
    yield f"http://127.0.0.1:{RPC_PORT}"
    await runner.cleanup()


@pytest.fixture
async def explorer_server(fake_chain):
    """Local NearBlocks search endpoint. Returns its API base URL."""

    async def handle_search(request):
        keyword = request.query.get("keyword", "")
        fake_chain.explorer_queries.append(keyword)
        if fake_chain.explorer_status != 200:
            return web.json_response({"message": "rate limited"}, status=fake_chain.explorer_status)
        tx_hash = fake_chain.tx_by_receipt.get(keyword)
        receipts = [{
            "receipt_id": keyword,
            "originated_from_transaction_hash": tx_hash,
        }] if tx_hash else []
        return web.json_response({"receipts": receipts})

    app = web.Application()
    app.router.add_get("/v1/search", handle_search)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", EXPLORER_PORT)
    await site.start()
    yield f"http://127.0.0.1:{EXPLORER_PORT}/v1"
    await runner.cleanup()


@pytest.fixture
async def rpc_client(rpc_server):
    client = NearRpcClient(rpc_server, timeout=5.0)
    yield client
    await client.close()


@pytest.fixture
async def explorer_client(explorer_server):
    client = NearBlocksExplorer(explorer_server, timeout=5.0)
    yield client
    await client.close()
