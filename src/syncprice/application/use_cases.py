from __future__ import annotations
import asyncio, logging

from ..domain.decoding import SYNC_T0, decode_sync
from ..domain.models import BlockRange, SyncEvent
from ..domain.pricing import build_row
from ..domain.value_types import Address
from ..ports.rpc import RPCClient
from ..ports.storage import PriceSink
from .planning import plan_chunks, plan_range
from .resolver import MetadataResolver

logger = logging.getLogger(__name__)


async def fetch_sync_events(
    *,
    rpc: RPCClient,
    from_block: int,
    to_block: int,
    step: int,
) -> tuple[list[SyncEvent], int]:
    """
    Fetch Sync logs chunk by chunk (sequentially) and decode them.
    Any fetch failure propagates. Returns (events, raw_log_count).
    """
    events: list[SyncEvent] = []
    total_logs = 0
    for chunk in plan_chunks(BlockRange(from_block, to_block), step):
        logs = await rpc.get_logs([SYNC_T0], chunk.start, chunk.end)
        total_logs += len(logs)
        for log in logs:
            ev = decode_sync(log)
            if ev is None:
                logger.warning("undecodable Sync log from %s (tx=%s, index=%s)",
                               log.address, log.tx_hash, log.log_index)
                continue
            events.append(ev)
    return events, total_logs


async def prefetch_pairs(resolver: MetadataResolver, pairs: list[Address], concurrency: int) -> None:
    sem = asyncio.Semaphore(concurrency)

    async def worker(addr: Address) -> None:
        async with sem:
            await resolver.resolve_pair(addr)

    await asyncio.gather(*(worker(a) for a in pairs))


async def report_sync_prices(
    *,
    rpc: RPCClient,
    sinks: list[PriceSink],
    lookback: int = 20,
    from_block: int | None = None,
    to_block: int | None = None,
    step: int = 1_000,
    concurrency: int = 1,
    resolver: MetadataResolver | None = None,
) -> dict[str, int]:
    """
    latest block → Sync logs → decoded events → resolved pair/token metadata →
    one price row per event whose pair fully resolved.
    """
    latest = await rpc.latest_block()
    rng = plan_range(latest, lookback=lookback, from_block=from_block, to_block=to_block)
    logger.info("scanning blocks %d-%d (%d blocks)", rng.start, rng.end, rng.span())

    events, total_logs = await fetch_sync_events(rpc=rpc, from_block=rng.start, to_block=rng.end, step=step)
    for sink in sinks:
        await sink.start()

    resolver = resolver or MetadataResolver(rpc)
    if concurrency > 1:
        distinct = list(dict.fromkeys(ev.pair_address for ev in events))
        await prefetch_pairs(resolver, distinct, concurrency)

    emitted = skipped = 0
    for ev in events:
        pair = await resolver.resolve_pair(ev.pair_address)
        row = build_row(ev, pair)
        if row is None:
            skipped += 1
            continue
        for sink in sinks:
            await sink.write_row(row)
        emitted += 1

    return {
        "from_block": rng.start,
        "to_block": rng.end,
        "total_logs": total_logs,
        "decoded": len(events),
        "undecodable": total_logs - len(events),
        "emitted": emitted,
        "skipped": skipped,
        "eth_calls": resolver.calls,
        **resolver.cache.stats(),
    }
