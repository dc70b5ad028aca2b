# syncprice/ports/storage.py
from __future__ import annotations

from typing import Protocol
from ..domain.models import PriceRow


class PriceSink(Protocol):
    """Port for emitting price rows (e.g., TSV on stdout, Parquet file)."""

    async def start(self) -> None:
        """Open the destination once logs are in hand; called before any row."""

    async def write_row(self, row: PriceRow) -> None:
        """Emit one price row, in the order received."""

    async def close(self) -> None:
        """Flush and release the destination. A sink that never started writes nothing."""
