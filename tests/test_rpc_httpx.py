"""
tests/test_rpc_httpx.py - JSON-RPC adapter against a mocked transport.
"""

import json

import httpx
import pytest

from fakes import PAIR_WETH_USDC, tx
from syncprice.adapters.rpc_httpx import HttpxRPC
from syncprice.domain.decoding import SYNC_T0
from syncprice.errors import RPCError


def _rpc(handler) -> HttpxRPC:
    rpc = HttpxRPC("http://node.test")
    rpc.client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return rpc


def _reply(result=None, error=None):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        handler.requests.append(body)
        out = {"jsonrpc": "2.0", "id": body["id"]}
        if error is not None:
            out["error"] = error
        else:
            out["result"] = result
        return httpx.Response(200, json=out)
    handler.requests = []
    return handler


class TestHttpxRPC:

    @pytest.mark.asyncio
    async def test_latest_block(self):
        h = _reply("0x10")
        rpc = _rpc(h)
        assert await rpc.latest_block() == 16
        assert h.requests[0]["method"] == "eth_blockNumber"
        await rpc.aclose()

    @pytest.mark.asyncio
    async def test_get_logs_builds_filter_and_types_logs(self):
        h = _reply([{
            "address": PAIR_WETH_USDC.upper().replace("0X", "0x"),
            "topics": [SYNC_T0.upper().replace("0X", "0x")],
            "data": "0x" + "00" * 64,
            "blockNumber": "0x2a",
            "transactionHash": tx(5),
            "logIndex": "0x3",
        }, {
            "address": PAIR_WETH_USDC,
            "topics": [SYNC_T0],
            "data": "0x" + "00" * 64,
            "blockNumber": None,
            "transactionHash": None,
            "logIndex": None,
        }])
        rpc = _rpc(h)
        logs = await rpc.get_logs([SYNC_T0], 16, 31)

        flt = h.requests[0]["params"][0]
        assert h.requests[0]["method"] == "eth_getLogs"
        assert flt == {"fromBlock": "0x10", "toBlock": "0x1f", "topics": [[SYNC_T0]]}

        assert logs[0].address == PAIR_WETH_USDC
        assert logs[0].topic0 == SYNC_T0
        assert logs[0].block_number == 42
        assert logs[0].tx_hash == tx(5)
        assert logs[0].log_index == 3
        assert logs[1].block_number is None
        assert logs[1].tx_hash is None

    @pytest.mark.asyncio
    async def test_get_logs_with_address(self):
        h = _reply([])
        rpc = _rpc(h)
        assert await rpc.get_logs([SYNC_T0], 1, 2, address=PAIR_WETH_USDC) == []
        assert h.requests[0]["params"][0]["address"] == PAIR_WETH_USDC

    @pytest.mark.asyncio
    async def test_invalid_topic_rejected(self):
        rpc = _rpc(_reply([]))
        with pytest.raises(ValueError):
            await rpc.get_logs(["0x1234"], 1, 2)

    @pytest.mark.asyncio
    async def test_rpc_error_object_raises(self):
        rpc = _rpc(_reply(error={"code": -32005, "message": "limit exceeded"}))
        with pytest.raises(RPCError) as exc_info:
            await rpc.get_logs([SYNC_T0], 1, 2)
        assert exc_info.value.code == -32005
        assert exc_info.value.method == "eth_getLogs"

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        rpc = _rpc(lambda request: httpx.Response(503))
        with pytest.raises(httpx.HTTPStatusError):
            await rpc.latest_block()

    @pytest.mark.asyncio
    async def test_call_returns_bytes(self):
        h = _reply("0x" + "00" * 31 + "06")
        rpc = _rpc(h)
        assert await rpc.call(PAIR_WETH_USDC, "0x313ce567") == b"\x00" * 31 + b"\x06"
        params = h.requests[0]["params"]
        assert params == [{"to": PAIR_WETH_USDC, "data": "0x313ce567"}, "latest"]

    @pytest.mark.asyncio
    async def test_call_revert_raises(self):
        rpc = _rpc(_reply(error={"code": 3, "message": "execution reverted"}))
        with pytest.raises(RPCError):
            await rpc.call(PAIR_WETH_USDC, "0x313ce567")

    @pytest.mark.asyncio
    async def test_html_gateway_page_raises_rpc_error(self):
        rpc = _rpc(lambda request: httpx.Response(200, text="<html>gateway</html>"))
        with pytest.raises(RPCError, match="non-JSON"):
            await rpc.latest_block()
        with pytest.raises(RPCError) as exc_info:
            await rpc.get_logs([SYNC_T0], 1, 2)
        assert exc_info.value.method == "eth_getLogs"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [None, 16, "16", "0xzz", {"number": "0x10"}])
    async def test_bad_block_number_raises_rpc_error(self, result):
        rpc = _rpc(_reply(result))
        with pytest.raises(RPCError):
            await rpc.latest_block()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [
        [{"topics": [SYNC_T0], "data": "0x"}],
        [{"address": PAIR_WETH_USDC, "topics": [SYNC_T0], "blockNumber": "0xzz"}],
        ["0xdeadbeef"],
        {"logs": []},
    ])
    async def test_malformed_logs_raise_rpc_error(self, result):
        rpc = _rpc(_reply(result))
        with pytest.raises(RPCError) as exc_info:
            await rpc.get_logs([SYNC_T0], 1, 2)
        assert exc_info.value.method == "eth_getLogs"
