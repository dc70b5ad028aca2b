from __future__ import annotations
from ..domain.models import BlockRange
from ..errors import ConfigError

def plan_range(latest: int, *, lookback: int, from_block: int | None = None,
               to_block: int | None = None) -> BlockRange:
    """
    Explicit [from_block, to_block] when from_block is given (to_block defaults
    to latest); otherwise the trailing window [latest - lookback, latest].
    """
    if from_block is None:
        if to_block is not None:
            raise ConfigError("--to-block requires --from-block")
        if lookback < 0:
            raise ConfigError(f"lookback must be >= 0, got {lookback}")
        return BlockRange(max(0, latest - lookback), latest)
    end = latest if to_block is None else to_block
    if from_block < 0 or from_block > end:
        raise ConfigError(f"from_block ({from_block}) must be within [0, {end}]")
    return BlockRange(from_block, end)

def plan_chunks(rng: BlockRange, step: int) -> list[BlockRange]:
    if step <= 0:
        raise ConfigError(f"step must be > 0, got {step}")
    out: list[BlockRange] = []
    b = rng.start
    while b <= rng.end:
        fb, tb = b, min(rng.end, b + step - 1)
        out.append(BlockRange(fb, tb))
        b = tb + 1
    return out
