from json import JSONDecodeError

import pytest

import stablesnap.connection
from stablesnap.config import Settings
from stablesnap.connection import (
    _fast_decode_rpc_response,
    check_connection,
    get_async_web3_from_config,
)
from stablesnap.exceptions import StablesnapValueError, Web3ConnectionTimeout

from .conftest import FakeAsyncWeb3


def test_fast_decode_rpc_response():
    assert _fast_decode_rpc_response(b'{"jsonrpc": "2.0", "id": 1, "result": "0xa4ec"}') == {
        "jsonrpc": "2.0",
        "id": 1,
        "result": "0xa4ec",
    }

    with pytest.raises(JSONDecodeError):
        _fast_decode_rpc_response(b"<html>Bad Gateway</html>")


async def test_check_connection():
    await check_connection(FakeAsyncWeb3())  # type: ignore[arg-type]


async def test_check_connection_timeout(monkeypatch: pytest.MonkeyPatch):
    class DisconnectedWeb3(FakeAsyncWeb3):
        async def is_connected(self) -> bool:
            return False

    monkeypatch.setattr(stablesnap.connection, "CONNECTION_TIMEOUT", 0)

    with pytest.raises(Web3ConnectionTimeout):
        await check_connection(DisconnectedWeb3())  # type: ignore[arg-type]


async def test_missing_rpc_endpoint():
    with pytest.raises(StablesnapValueError, match="does not have an RPC"):
        await get_async_web3_from_config(chain_id=1, config=Settings(rpc={}))
