from __future__ import annotations
import os, pyarrow as pa, pyarrow.parquet as pq

from ..domain.models import PriceRow
from ..ports.storage import PriceSink

PRICE_SCHEMA = pa.schema([
    pa.field("symbol_0",     pa.large_string()),
    pa.field("symbol_1",     pa.large_string()),
    pa.field("price",        pa.float64()),
    pa.field("tx_hash",      pa.large_string()),
    pa.field("block_number", pa.int64()),
    pa.field("pair",         pa.large_string()),
])

def _rows_to_table(rows: list[PriceRow]) -> pa.Table:
    return pa.Table.from_arrays(
        arrays=[
            pa.array([r.symbol_0 for r in rows], PRICE_SCHEMA.field("symbol_0").type),
            pa.array([r.symbol_1 for r in rows], PRICE_SCHEMA.field("symbol_1").type),
            pa.array([r.price for r in rows], PRICE_SCHEMA.field("price").type),
            pa.array([r.tx_hash for r in rows], PRICE_SCHEMA.field("tx_hash").type),
            pa.array([r.block_number for r in rows], PRICE_SCHEMA.field("block_number").type),
            pa.array([r.pair for r in rows], PRICE_SCHEMA.field("pair").type),
        ],
        schema=PRICE_SCHEMA,
    )

class ParquetPriceSink(PriceSink):
    """
    Buffers rows in memory and writes a single Parquet file on close
    (tmp file + os.replace). Absent tx hash / block number stay null here.
    A sink that never started (the run failed before its logs arrived) writes nothing.
    """
    def __init__(self, path: str, codec: str = "zstd") -> None:
        self.path = path
        self.codec = codec
        self.rows: list[PriceRow] = []
        self.started = False

    async def start(self) -> None:
        if not self.started:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            self.started = True

    async def write_row(self, row: PriceRow) -> None:
        await self.start()
        self.rows.append(row)

    async def close(self) -> None:
        if not self.started:
            return
        tmp = self.path + ".tmp"
        pq.write_table(_rows_to_table(self.rows), tmp, compression=self.codec)
        os.replace(tmp, self.path)
