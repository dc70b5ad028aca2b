from __future__ import annotations
from dataclasses import dataclass
from .value_types import Address, Topic0, TxHash, ZERO_TX_HASH

@dataclass(slots=True, frozen=True)
class BlockRange:
    start: int
    end: int
    def span(self) -> int: return self.end - self.start + 1

@dataclass(slots=True, frozen=True)
class EventLog:
    address: Address
    topics: tuple[Topic0, ...]
    data_hex: str
    block_number: int | None    # None for pending logs
    tx_hash: TxHash | None
    log_index: int | None

    @property
    def topic0(self) -> Topic0 | None:
        return self.topics[0] if self.topics else None

@dataclass(slots=True, frozen=True)
class SyncEvent:
    pair_address: Address
    reserve0: int               # uint112
    reserve1: int               # uint112
    block_number: int | None = None
    tx_hash: TxHash | None = None
    log_index: int | None = None

@dataclass(slots=True, frozen=True)
class TokenInfo:
    decimals: int               # uint8
    symbol: str

@dataclass(slots=True, frozen=True)
class PairInfo:
    token0: Address
    token1: Address
    token0_meta: TokenInfo | None
    token1_meta: TokenInfo | None

    @property
    def is_priceable(self) -> bool:
        return self.token0_meta is not None and self.token1_meta is not None

@dataclass(slots=True, frozen=True)
class PriceRow:
    symbol_0: str
    symbol_1: str
    price: float
    tx_hash: TxHash | None
    block_number: int | None
    pair: Address

    def context(self, mode: str) -> str:
        """Traceback column: tx hash (zero hash when absent) or block number (0 when absent)."""
        if mode == "block":
            return str(self.block_number if self.block_number is not None else 0)
        return self.tx_hash or ZERO_TX_HASH


class ResolutionCache:
    """
    Write-once memo tables for one run: token address -> TokenInfo | None and
    pair address -> PairInfo | None. A cached None is a remembered failure.
    No eviction; the cache dies with the run that owns it.
    """
    def __init__(self) -> None:
        self._tokens: dict[Address, TokenInfo | None] = {}
        self._pairs: dict[Address, PairInfo | None] = {}

    def has_token(self, address: Address) -> bool: return address in self._tokens
    def has_pair(self, address: Address) -> bool: return address in self._pairs
    def get_token(self, address: Address) -> TokenInfo | None: return self._tokens[address]
    def get_pair(self, address: Address) -> PairInfo | None: return self._pairs[address]

    def put_token(self, address: Address, info: TokenInfo | None) -> None:
        if address in self._tokens:
            raise KeyError(f"token {address} already cached")
        self._tokens[address] = info

    def put_pair(self, address: Address, info: PairInfo | None) -> None:
        if address in self._pairs:
            raise KeyError(f"pair {address} already cached")
        self._pairs[address] = info

    def tokens(self) -> dict[Address, TokenInfo | None]:
        return dict(self._tokens)

    def pairs(self) -> dict[Address, PairInfo | None]:
        return dict(self._pairs)

    def stats(self) -> dict[str, int]:
        return {
            "tokens_resolved": sum(1 for v in self._tokens.values() if v is not None),
            "tokens_failed":   sum(1 for v in self._tokens.values() if v is None),
            "pairs_resolved":  sum(1 for v in self._pairs.values() if v is not None),
            "pairs_failed":    sum(1 for v in self._pairs.values() if v is None),
        }
