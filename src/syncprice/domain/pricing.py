from __future__ import annotations
import math
from decimal import Decimal

from .models import PairInfo, PriceRow, SyncEvent


def spot_price(reserve0: int, reserve1: int, decimals0: int, decimals1: int) -> float:
    """
    Units of token1 per unit of token0, scaled by each token's decimals:
    r0 * 10^(d1 - d0) / r1. A zero reserve1 gives inf (or nan for 0/0), never an error.
    """
    r0 = float(reserve0)
    r1 = float(reserve1)
    num = r0 * 10.0 ** (decimals1 - decimals0)
    if r1 == 0.0:
        return math.nan if num == 0.0 else math.inf
    return num / r1


def build_row(event: SyncEvent, pair: PairInfo | None) -> PriceRow | None:
    if pair is None:
        return None
    m0, m1 = pair.token0_meta, pair.token1_meta
    if m0 is None or m1 is None:
        return None
    return PriceRow(
        symbol_0=m0.symbol,
        symbol_1=m1.symbol,
        price=spot_price(event.reserve0, event.reserve1, m0.decimals, m1.decimals),
        tx_hash=event.tx_hash,
        block_number=event.block_number,
        pair=event.pair_address,
    )


def format_price(price: float) -> str:
    """
    Shortest round-trip digits in plain positional notation, never an exponent:
    5e-13 -> "0.0000000000005", 2.0 -> "2", and "NaN" / "inf" / "-inf".
    """
    if math.isnan(price):
        return "NaN"
    if math.isinf(price):
        return "inf" if price > 0 else "-inf"
    text = format(Decimal(repr(price)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
