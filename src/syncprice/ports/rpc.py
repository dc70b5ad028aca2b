# syncprice/ports/rpc.py
from __future__ import annotations

from typing import Protocol, Sequence
from ..domain.models import EventLog
from ..domain.value_types import Address, Topic0


class RPCClient(Protocol):
    """Port defining the contract for an Ethereum JSON-RPC client."""

    async def latest_block(self) -> int:
        """Return the latest block number as an integer."""

    async def get_logs(
        self,
        topic0s: Sequence[Topic0],
        from_block: int,
        to_block: int,
        address: Address | None = None,
    ) -> list[EventLog]:
        """Return normalized, typed logs for [from_block, to_block] inclusive."""

    async def call(self, to: Address, data: str) -> bytes:
        """Execute a read-only eth_call against `to`; raise on any RPC failure."""

    async def aclose(self) -> None:
        """Release the underlying transport."""
