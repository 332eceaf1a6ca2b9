import asyncio
import logging
from collections import Counter
from collections.abc import Sequence
from typing import Any

import eth_abi.abi
import pytest
from eth_typing import BlockNumber, ChecksumAddress
from web3.exceptions import ContractLogicError

from stablesnap.checksum_cache import get_checksum_address
from stablesnap.functions import function_selector
from stablesnap.logging import logger
from stablesnap.multicall import AGGREGATE_PROTOTYPE, TRY_AGGREGATE_PROTOTYPE
from stablesnap.registry import StableswapPool, TokenInfo
from stablesnap.stableswap.operations import (
    GET_A,
    GET_BALANCES,
    PAUSED,
    SWAP_STORAGE,
    TOTAL_SUPPLY,
    ContractOperation,
)

CELO_CHAIN_ID = 42220
FAKE_BLOCK_NUMBER = 21_000_000
AGGREGATOR_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"

DEFAULT_AMP = 200
DEFAULT_SWAP_FEE = 4_000_000  # 0.04%
DEFAULT_ADMIN_FEE = 5_000_000_000  # 50% of the swap fee

type CallKey = tuple[ChecksumAddress, bytes]


def fake_address(n: int) -> ChecksumAddress:
    return get_checksum_address(f"0x{n:040x}")


def call_key(address: str, operation: ContractOperation) -> CallKey:
    return get_checksum_address(address), function_selector(operation.function_prototype)


def make_pool(index: int, decimals: tuple[int, int] = (18, 18)) -> StableswapPool:
    base = 0x1000 * (index + 1)
    return StableswapPool(
        name=f"Pool{index}",
        address=fake_address(base),
        lp_token=TokenInfo(address=fake_address(base + 1), symbol=f"LP{index}", decimals=18),
        tokens=(
            TokenInfo(address=fake_address(base + 2), symbol=f"A{index}", decimals=decimals[0]),
            TokenInfo(address=fake_address(base + 3), symbol=f"B{index}", decimals=decimals[1]),
        ),
    )


def pool_responses(
    pool: StableswapPool,
    *,
    amp: int = DEFAULT_AMP,
    swap_fee: int = DEFAULT_SWAP_FEE,
    admin_fee: int = DEFAULT_ADMIN_FEE,
    paused: bool = False,
    balances: Sequence[int] | None = None,
    total_supply: int | None = None,
) -> dict[CallKey, bytes]:
    """
    Build the ABI-encoded return data for every read made against `pool`.
    """

    if balances is None:
        balances = [1_000_000 * 10**token.decimals for token in pool.tokens]
    if total_supply is None:
        total_supply = 2_000_000 * 10**18

    return {
        call_key(pool.address, GET_A): eth_abi.abi.encode(["uint256"], [amp]),
        call_key(pool.address, SWAP_STORAGE): eth_abi.abi.encode(
            list(SWAP_STORAGE.return_types),
            [amp, amp, 0, 0, swap_fee, admin_fee, 0, 0, pool.lp_token.address],
        ),
        call_key(pool.address, PAUSED): eth_abi.abi.encode(["bool"], [paused]),
        call_key(pool.address, GET_BALANCES): eth_abi.abi.encode(["uint256[]"], [list(balances)]),
        call_key(pool.lp_token.address, TOTAL_SUPPLY): eth_abi.abi.encode(
            ["uint256"], [total_supply]
        ),
    }


class FakeEth:
    """
    An in-memory aggregator. Decodes the `aggregate` and `tryAggregate` calldata built by the
    executor and answers each inner call from `responses`, keyed by (target, calldata).

    A chunk is identified by the key of its first call, which is how `fail` and `delay` select the
    chunk to disturb.
    """

    def __init__(self, block_number: int = FAKE_BLOCK_NUMBER, chain_id: int = CELO_CHAIN_ID):
        self.block_number = block_number
        self._chain_id = chain_id
        self.responses: dict[CallKey, bytes | None] = {}
        self.requests: list[tuple[CallKey, int]] = []
        self.completed: list[CallKey] = []
        self.block_identifiers: list[Any] = []
        self._failures: dict[CallKey, tuple[BaseException, int | None]] = {}
        self._delays: dict[CallKey, float] = {}
        self.block_delay = 0.0

    @property
    async def chain_id(self) -> int:
        return self._chain_id

    def fail(self, key: CallKey, error: BaseException, times: int | None = None) -> None:
        """
        Raise `error` for the chunk starting with `key`, `times` times or on every attempt.
        """
        self._failures[key] = (error, times)

    def delay(self, key: CallKey, seconds: float) -> None:
        self._delays[key] = seconds

    @property
    def attempts(self) -> Counter[CallKey]:
        return Counter(key for key, _ in self.requests)

    @property
    def chunk_sizes(self) -> list[int]:
        return [size for _, size in self.requests]

    async def get_block_number(self) -> BlockNumber:
        if self.block_delay:
            await asyncio.sleep(self.block_delay)
        return BlockNumber(self.block_number)

    async def get_block(self, block_identifier: Any) -> dict[str, Any]:
        return {"number": BlockNumber(self.block_number)}

    async def call(self, transaction: dict[str, Any], block_identifier: Any = None) -> bytes:
        data = bytes(transaction["data"])
        selector, body = data[:4], data[4:]

        if selector == function_selector(AGGREGATE_PROTOTYPE):
            allow_failure = False
            (encoded_calls,) = eth_abi.abi.decode(["(address,bytes)[]"], body)
        elif selector == function_selector(TRY_AGGREGATE_PROTOTYPE):
            allow_failure = True
            _, encoded_calls = eth_abi.abi.decode(["bool", "(address,bytes)[]"], body)
        else:  # pragma: no cover
            raise AssertionError(f"Unexpected selector {selector.hex()}")

        calls = [
            (get_checksum_address(target), bytes(payload)) for target, payload in encoded_calls
        ]
        chunk_key = calls[0]
        self.requests.append((chunk_key, len(calls)))
        self.block_identifiers.append(block_identifier)

        if chunk_key in self._failures:
            error, times = self._failures[chunk_key]
            if times is None or times > 0:
                if times is not None:
                    self._failures[chunk_key] = (error, times - 1)
                raise error

        if (delay := self._delays.get(chunk_key)) is not None:
            await asyncio.sleep(delay)

        results = [self.responses.get(call) for call in calls]
        self.completed.append(chunk_key)

        if allow_failure:
            return eth_abi.abi.encode(
                ["(bool,bytes)[]"],
                [[(result is not None, result or b"") for result in results]],
            )

        if any(result is None for result in results):
            raise ContractLogicError("execution reverted")
        return eth_abi.abi.encode(["uint256", "bytes[]"], [self.block_number, results])


class FakeAsyncWeb3:
    def __init__(self, eth: FakeEth | None = None) -> None:
        self.eth = eth if eth is not None else FakeEth()

    async def is_connected(self) -> bool:
        return True


@pytest.fixture(scope="session", autouse=True)
def _set_stablesnap_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


@pytest.fixture
def pools() -> list[StableswapPool]:
    return [make_pool(i) for i in range(3)]


@pytest.fixture
def fake_w3(pools: list[StableswapPool]) -> FakeAsyncWeb3:
    w3 = FakeAsyncWeb3()
    for pool in pools:
        w3.eth.responses.update(pool_responses(pool))
    return w3
