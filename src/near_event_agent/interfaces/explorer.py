"""ReceiptExplorer protocol - resolves a receipt to its originating transaction."""

from __future__ import annotations

from typing import Protocol


class ReceiptExplorer(Protocol):
    """Looks up the transaction that produced a receipt.

    Chain receipts do not carry execution logs, so the poller needs the owning
    transaction hash to fetch them.
    """

    async def get_transaction_hash(self, receipt_id: str) -> str | None:
        """Originating transaction hash, or None when the explorer has no record."""
        ...
