from __future__ import annotations
import os, sys
from typing import TextIO

from ..domain.models import PriceRow
from ..domain.pricing import format_price
from ..domain.value_types import OutputContext
from ..ports.storage import PriceSink

HEADER = ("symbol_0", "symbol_1", "price")
CONTEXT_COLUMN = {"tx": "tx_hash", "block": "block_number"}

class TSVPriceSink(PriceSink):
    """
    Tab-separated rows: symbol_0, symbol_1, price, then tx hash or block number.
    Writes to `stream` (stdout by default) or to `path` when given. Nothing is
    opened or written, header included, until `start` (or the first row).
    """
    def __init__(self, path: str | None = None, *, context: OutputContext = "tx",
                 stream: TextIO | None = None) -> None:
        self.context = context
        self.path = path
        self._stream = stream
        self._f: TextIO | None = None
        self._owned = False

    def _write_line(self, fields: tuple[str, ...]) -> None:
        if self._f is None:
            raise RuntimeError("TSV sink written before start")
        self._f.write("\t".join(fields) + "\n")

    async def start(self) -> None:
        if self._f is not None:
            return
        if self.path:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            self._f = open(self.path, "w", encoding="utf-8", newline="")
            self._owned = True
        else:
            self._f = self._stream or sys.stdout
        self._write_line((*HEADER, CONTEXT_COLUMN[self.context]))

    async def write_row(self, row: PriceRow) -> None:
        await self.start()
        self._write_line((row.symbol_0, row.symbol_1, format_price(row.price), row.context(self.context)))

    async def close(self) -> None:
        if self._f is None:
            return
        self._f.flush()
        if self._owned:
            self._f.close()
