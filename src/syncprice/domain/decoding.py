from __future__ import annotations

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import event_signature_to_log_topic

from .models import EventLog, SyncEvent
from .value_types import Address, Topic0, TxHash


SYNC_SIGNATURE = "Sync(uint112,uint112)"
# Topic0 constant (lowercase, WITH "0x")
SYNC_T0 = Topic0("0x" + event_signature_to_log_topic(SYNC_SIGNATURE).hex())

# ---------- hex helpers -------------------------------------------------------

def to_hex_block(n: int) -> str: return hex(int(n))

def hexstr_to_bytes(s: str | None) -> bytes:
    if not s:
        return b""
    h = s[2:] if s[:2].lower() == "0x" else s
    if len(h) % 2: h = "0" + h
    return bytes.fromhex(h) if h else b""

def opt_hex_int(v: str | int | None) -> int | None:
    """Handles 0x..., decimal strings, and native ints; None stays None."""
    if v is None:
        return None
    if isinstance(v, int):
        return v
    s = v.lower()
    return int(s, 16) if s.startswith("0x") else int(s)

# ---------------------------- public API --------------------------------------

def decode_sync(log: EventLog) -> SyncEvent | None:
    """
    Decode one raw log into a SyncEvent. Returns None when the log is not a
    Sync event or its data is not hex holding two uint112 words.
    """
    if log.topic0 is None or log.topic0.lower() != SYNC_T0:
        return None
    try:
        data_b = hexstr_to_bytes(log.data_hex)
    except ValueError:
        return None
    if len(data_b) < 64:
        return None
    try:
        reserve0, reserve1 = decode(["uint112", "uint112"], data_b[:64])
    except DecodingError:
        return None
    return SyncEvent(
        pair_address=Address(log.address.lower()),
        reserve0=int(reserve0),
        reserve1=int(reserve1),
        block_number=log.block_number,
        tx_hash=TxHash(log.tx_hash.lower()) if log.tx_hash else None,
        log_index=log.log_index,
    )
