"""NearBlocks explorer client - maps receipt ids to their originating transaction."""

from __future__ import annotations

import logging

import httpx

from near_event_agent.errors import ExplorerError

log = logging.getLogger(__name__)


class NearBlocksExplorer:
    """Resolves receipts through the NearBlocks search endpoint.

    GET {base_url}/search?keyword={receipt_id} returns a `receipts` list whose
    first entry carries `originated_from_transaction_hash`.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=10))

    @property
    def base_url(self) -> str:
        return self._base_url

    async def close(self) -> None:
        await self._client.aclose()

    async def get_transaction_hash(self, receipt_id: str) -> str | None:
        try:
            resp = await self._client.get(
                f"{self._base_url}/search", params={"keyword": receipt_id},
            )
        except httpx.HTTPError as exc:
            raise ExplorerError(f"NearBlocks request failed: {exc}") from exc

        if resp.status_code != 200:
            raise ExplorerError(f"NearBlocks API error: {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise ExplorerError(f"NearBlocks returned invalid JSON: {exc}") from exc

        receipts = data.get("receipts") or []
        if not receipts:
            log.debug("No explorer record for receipt %s", receipt_id)
            return None
        return receipts[0].get("originated_from_transaction_hash") or None
