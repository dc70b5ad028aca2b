from __future__ import annotations
import itertools, logging, httpx
from typing import Any, Sequence
from ..domain.decoding import hexstr_to_bytes, opt_hex_int, to_hex_block
from ..domain.models import EventLog
from ..domain.value_types import Address, Topic0, TxHash
from ..errors import RPCError
from ..ports.rpc import RPCClient

logger = logging.getLogger(__name__)

def _is_topic_hash(x: str) -> bool: return isinstance(x, str) and x.startswith("0x") and len(x)==66
def _normalize_topic0_list(t0s: Sequence[Topic0]) -> list[str]:
    return [str(t).strip().lower() for t in t0s]

def _build_topics_param(topic0s: Sequence[Topic0]) -> list[list[str]]:
    t0s = _normalize_topic0_list(topic0s)
    if not all(_is_topic_hash(x) for x in t0s):
        raise ValueError(f"Invalid topic0(s): {t0s}")
    return [t0s]

def _to_event_log(rl: dict[str, Any]) -> EventLog:
    addr = rl.get("address")
    if not isinstance(addr, str):
        raise RPCError("eth_getLogs", f"log without address: {rl!r}")
    topics = tuple(Topic0(t.lower()) for t in rl.get("topics", []))
    txh = rl.get("transactionHash")
    return EventLog(
        address=Address(addr.lower()),
        topics=topics,
        data_hex=str(rl.get("data") or "0x"),
        block_number=opt_hex_int(rl.get("blockNumber")),
        tx_hash=TxHash(txh.lower()) if txh else None,
        log_index=opt_hex_int(rl.get("logIndex")),
    )

class HttpxRPC(RPCClient):
    def __init__(self, rpc_url: str, timeout_s: float = 20, max_conn: int = 16) -> None:
        self.rpc_url = rpc_url
        self.client = httpx.AsyncClient(
            http2=True,
            timeout=httpx.Timeout(timeout_s),
            limits=httpx.Limits(max_connections=max_conn, max_keepalive_connections=max(1, max_conn//2)),
        )
        self._ids = itertools.count(1)

    async def _request(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc":"2.0","id":next(self._ids),"method":method,"params":params}
        r = await self.client.post(self.rpc_url, json=payload)
        r.raise_for_status()
        try:
            data = r.json()
        except ValueError:
            raise RPCError(method, f"non-JSON response: {r.text[:80]!r}") from None
        if not isinstance(data, dict):
            raise RPCError(method, f"unexpected response: {data!r}")
        if "error" in data:
            err = data["error"]
            if isinstance(err, dict):
                raise RPCError(method, str(err.get("message")), err.get("code"))
            raise RPCError(method, str(err))
        if "result" not in data:
            raise RPCError(method, "response has no result")
        return data["result"]

    async def latest_block(self) -> int:
        res = await self._request("eth_blockNumber", [])
        if not (isinstance(res, str) and res[:2].lower() == "0x"):
            raise RPCError("eth_blockNumber", f"unexpected result: {res!r}")
        try:
            return int(res, 16)
        except ValueError:
            raise RPCError("eth_blockNumber", f"unexpected result: {res!r}") from None

    async def get_logs(self, topic0s: Sequence[Topic0], from_block: int, to_block: int,
                       address: Address | None = None) -> list[EventLog]:
        flt: dict[str, Any] = {
            "fromBlock": to_hex_block(from_block),
            "toBlock": to_hex_block(to_block),
            "topics": _build_topics_param(topic0s),
        }
        if address is not None:
            flt["address"] = str(address).lower()
        res = await self._request("eth_getLogs", [flt])
        if res is None:
            res = []
        if not isinstance(res, list):
            raise RPCError("eth_getLogs", f"unexpected result: {res!r}")
        try:
            logs = [_to_event_log(rl) for rl in res]
        except (AttributeError, TypeError, ValueError) as e:
            raise RPCError("eth_getLogs", f"malformed log: {e}") from e
        logger.debug("eth_getLogs %d-%d -> %d logs", from_block, to_block, len(logs))
        return logs

    async def call(self, to: Address, data: str) -> bytes:
        res = await self._request("eth_call", [{"to": str(to), "data": data}, "latest"])
        if not isinstance(res, str):
            raise RPCError("eth_call", f"unexpected result: {res!r}")
        return hexstr_to_bytes(res)

    async def aclose(self) -> None:
        await self.client.aclose()
