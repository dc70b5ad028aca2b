from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from eth_abi import decode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address


@dataclass(slots=True, frozen=True)
class ContractFunction:
    """A zero-argument view function returning a single ABI value."""
    signature: str              # e.g. "decimals()"
    output_type: str            # e.g. "uint8"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode(self) -> str:
        return "0x" + self.selector.hex()

    def decode(self, data: bytes) -> Any:
        """Raises eth_abi DecodingError / UnicodeDecodeError on non-conforming return data."""
        (value,) = decode([self.output_type], data)
        if self.output_type == "address":
            return to_checksum_address(value).lower()
        return value


# UniswapV2Pair
TOKEN0   = ContractFunction("token0()", "address")
TOKEN1   = ContractFunction("token1()", "address")
# ERC-20 metadata
DECIMALS = ContractFunction("decimals()", "uint8")
SYMBOL   = ContractFunction("symbol()", "string")
