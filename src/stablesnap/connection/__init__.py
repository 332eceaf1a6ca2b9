from json import JSONDecodeError
from typing import TYPE_CHECKING, cast

import tenacity
from ujson import loads as ujson_loads
from web3 import AsyncBaseProvider, AsyncHTTPProvider, AsyncWeb3, JSONBaseProvider
from web3.types import RPCResponse

from stablesnap.config import CONFIG_FILE, Settings, settings
from stablesnap.exceptions import StablesnapValueError, Web3ConnectionTimeout
from stablesnap.logging import logger
from stablesnap.types.aliases import ChainId

CONNECTION_TIMEOUT = 10


def _fast_decode_rpc_response(raw_response: bytes) -> RPCResponse:
    """
    Decode the JSON-RPC response using ujson.
    """

    try:
        return cast("RPCResponse", ujson_loads(raw_response))
    except ValueError:
        # Re-raise as a dummy JSONDecodeError so web3py's exception handling works as intended.
        msg = "JSON failure"
        raise JSONDecodeError(msg, "[]", 0) from None


async def check_connection(w3: AsyncWeb3[AsyncBaseProvider]) -> None:
    async_w3_connected_check_with_retry = tenacity.AsyncRetrying(
        stop=tenacity.stop_after_delay(CONNECTION_TIMEOUT),
        wait=tenacity.wait_exponential_jitter(),
        retry=tenacity.retry_if_result(lambda result: result is False),
    )
    try:
        await async_w3_connected_check_with_retry(w3.is_connected)
    except tenacity.RetryError as exc:
        raise Web3ConnectionTimeout(timeout_seconds=CONNECTION_TIMEOUT) from exc


async def get_async_web3_from_config(
    *,
    chain_id: ChainId,
    config: Settings | None = None,
    optimize: bool = True,
) -> AsyncWeb3[AsyncBaseProvider]:
    """
    Build a connected `AsyncWeb3` instance for the RPC endpoint configured for `chain_id`, and
    verify that the endpoint serves that chain.

    With `optimize=True`, all middleware is removed and RPC responses are decoded with ujson.
    """

    if config is None:
        config = settings

    endpoint = config.rpc.get(chain_id)
    if endpoint is None:
        raise StablesnapValueError(
            message=f"Chain ID {chain_id} does not have an RPC defined in config file "
            f"{CONFIG_FILE}"
        )

    w3: AsyncWeb3[AsyncBaseProvider] = AsyncWeb3(AsyncHTTPProvider(str(endpoint)))
    await check_connection(w3)

    if (endpoint_chain_id := await w3.eth.chain_id) != chain_id:
        raise StablesnapValueError(
            message=f"The chain ID ({endpoint_chain_id}) at endpoint {endpoint} does not match "
            f"the chain ID ({chain_id}) defined in the config file."
        )

    if optimize:
        # Remove all middleware and monkey-patch the JSON decoding for RPC responses
        w3.middleware_onion.clear()
        if TYPE_CHECKING:
            assert isinstance(w3.provider, JSONBaseProvider)
        w3.provider.decode_rpc_response = _fast_decode_rpc_response  # type:ignore[method-assign]

    logger.debug(f"Connected to chain {chain_id} at {endpoint}")
    return w3


__all__ = (
    "check_connection",
    "get_async_web3_from_config",
)
