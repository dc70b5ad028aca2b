"""
Pytest configuration and fixtures for syncprice tests.
"""

import pytest

from fakes import (
    DAI, JUNK, PAIR_DAI_USDC, PAIR_WETH_JUNK, PAIR_WETH_USDC, USDC, WETH,
    FakeRPC, ListSink,
)
from syncprice.domain.abi import DECIMALS


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: end-to-end runs through the use case or CLI"
    )


@pytest.fixture
def rpc() -> FakeRPC:
    r = FakeRPC(latest=1_000)
    r.erc20(WETH, "WETH", 18)
    r.erc20(USDC, "USDC", 6)
    r.erc20(DAI, "DAI", 18)
    r.set(JUNK, DECIMALS, 9)      # symbol() reverts
    r.pair(PAIR_WETH_USDC, WETH, USDC)
    r.pair(PAIR_DAI_USDC, DAI, USDC)
    r.pair(PAIR_WETH_JUNK, WETH, JUNK)
    return r


@pytest.fixture
def sink() -> ListSink:
    return ListSink()
