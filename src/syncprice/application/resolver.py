from __future__ import annotations
import asyncio, logging
from typing import Any, Awaitable, Callable, TypeVar

import httpx
from eth_abi.exceptions import DecodingError

from ..domain.abi import DECIMALS, SYMBOL, TOKEN0, TOKEN1, ContractFunction
from ..domain.models import PairInfo, ResolutionCache, TokenInfo
from ..domain.value_types import Address
from ..errors import RPCError
from ..ports.rpc import RPCClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

# per-item failures: node error/revert, transport, non-conforming return data
CALL_FAILURES = (RPCError, httpx.HTTPError, DecodingError, ValueError)


async def call_function(rpc: RPCClient, address: Address, fn: ContractFunction) -> Any | None:
    """Invoke a read-only contract function and decode its result; any failure -> None."""
    try:
        raw = await rpc.call(address, fn.encode())
        return fn.decode(raw)
    except CALL_FAILURES as e:
        logger.debug("%s on %s failed: %s: %s", fn.signature, address, type(e).__name__, e)
        return None


class MetadataResolver:
    """
    Pair -> (token0, token1) -> TokenInfo, backed by a run-owned ResolutionCache.
    At most one set of on-chain calls per distinct address; concurrent lookups
    of the same address await the same in-flight task.
    """
    def __init__(self, rpc: RPCClient, cache: ResolutionCache | None = None) -> None:
        self.rpc = rpc
        self.cache = cache if cache is not None else ResolutionCache()
        self._inflight: dict[tuple[str, Address], asyncio.Task] = {}
        self.calls = 0

    async def _call(self, address: Address, fn: ContractFunction) -> Any | None:
        self.calls += 1
        return await call_function(self.rpc, address, fn)

    async def _once(self, kind: str, address: Address, fetch: Callable[[], Awaitable[T]]) -> T:
        key = (kind, address)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(fetch())
            self._inflight[key] = task
            task.add_done_callback(lambda _t: self._inflight.pop(key, None))
        return await asyncio.shield(task)

    async def resolve_token(self, address: Address) -> TokenInfo | None:
        address = Address(address.lower())
        if self.cache.has_token(address):
            return self.cache.get_token(address)
        return await self._once("token", address, lambda: self._fetch_token(address))

    async def _fetch_token(self, address: Address) -> TokenInfo | None:
        info: TokenInfo | None = None
        decimals = await self._call(address, DECIMALS)
        if decimals is not None:
            symbol = await self._call(address, SYMBOL)
            if symbol is not None:
                info = TokenInfo(decimals=int(decimals), symbol=str(symbol))
        if info is None:
            logger.info("token %s unresolved", address)
        self.cache.put_token(address, info)
        return info

    async def resolve_pair(self, address: Address) -> PairInfo | None:
        address = Address(address.lower())
        if self.cache.has_pair(address):
            return self.cache.get_pair(address)
        return await self._once("pair", address, lambda: self._fetch_pair(address))

    async def _fetch_pair(self, address: Address) -> PairInfo | None:
        token0 = await self._call(address, TOKEN0)
        token1 = await self._call(address, TOKEN1) if token0 is not None else None
        if token0 is None or token1 is None:
            logger.info("pair %s unresolved", address)
            self.cache.put_pair(address, None)
            return None
        meta0 = await self.resolve_token(Address(token0))
        meta1 = await self.resolve_token(Address(token1))
        pair = PairInfo(token0=Address(token0), token1=Address(token1),
                        token0_meta=meta0, token1_meta=meta1)
        self.cache.put_pair(address, pair)
        return pair
