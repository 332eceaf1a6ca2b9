"""
Chunked execution of read-only calls through a Multicall aggregator contract.

A list of calls is split into contiguous chunks of bounded size. Each chunk is submitted as one
`eth_call` to the aggregator, all chunks run concurrently, and the raw return payloads are
concatenated in input order. The position of each result always matches the position of the call
that produced it.
"""

import asyncio
import enum
from collections.abc import Sequence
from typing import Protocol

import eth_abi.abi
import tenacity
from eth_abi.exceptions import DecodingError
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.exceptions import ContractLogicError, Web3Exception
from web3.types import BlockIdentifier, TxParams

from stablesnap.checksum_cache import validate_address
from stablesnap.exceptions import (
    ChunkExecutionFailure,
    DeadlineExceeded,
    InvariantViolation,
    StablesnapValueError,
    TransportFailure,
)
from stablesnap.functions import encode_function_calldata, get_number_for_block_identifier_async
from stablesnap.logging import logger
from stablesnap.types.aliases import BlockNumber

AGGREGATE_PROTOTYPE = "aggregate((address,bytes)[])"
AGGREGATE_RETURN_TYPES = ["uint256", "bytes[]"]

TRY_AGGREGATE_PROTOTYPE = "tryAggregate(bool,(address,bytes)[])"
TRY_AGGREGATE_RETURN_TYPES = ["(bool,bytes)[]"]


class Call(Protocol):
    @property
    def target(self) -> ChecksumAddress: ...

    @property
    def payload(self) -> bytes: ...


class ChunkFailurePolicy(enum.Enum):
    """
    The action taken when a chunk fails after all retries.

    RAISE: abort the whole execution with `ChunkExecutionFailure`
    MARK_ABSENT: return `None` for every call in the failed chunk
    """

    RAISE = "raise"
    MARK_ABSENT = "mark_absent"


def partition[T](calls: Sequence[T], max_chunk_size: int) -> list[Sequence[T]]:
    """
    Split `calls` into contiguous chunks of at most `max_chunk_size` items, preserving order.
    """

    if isinstance(max_chunk_size, bool) or max_chunk_size < 1:
        raise StablesnapValueError(message="Chunk size must be a positive integer.")

    return [calls[i : i + max_chunk_size] for i in range(0, len(calls), max_chunk_size)]


class MulticallExecutor:
    """
    Executes batches of calls through the aggregator deployed at `aggregator_address`.

    With `allow_call_failure=False`, chunks are submitted to `aggregate`, and a revert in any
    call fails the whole chunk. With `allow_call_failure=True`, chunks are submitted to
    `tryAggregate(false, ...)` and a failed call leaves an absent (`None`) result in its slot.

    Transport failures are retried with exponential backoff, resubmitting the same chunk. When
    `deadline` is set, execution is abandoned after that many seconds.
    """

    def __init__(
        self,
        w3: AsyncWeb3[AsyncBaseProvider],
        aggregator_address: str,
        *,
        max_chunk_size: int = 100,
        max_retries: int = 3,
        retry_backoff: float = 0.5,
        deadline: float | None = None,
        failure_policy: ChunkFailurePolicy = ChunkFailurePolicy.RAISE,
        allow_call_failure: bool = False,
    ) -> None:
        if isinstance(max_chunk_size, bool) or max_chunk_size < 1:
            raise StablesnapValueError(message="Chunk size must be a positive integer.")
        if max_retries < 1:
            raise StablesnapValueError(message="At least one attempt per chunk is required.")
        if deadline is not None and deadline <= 0:
            raise StablesnapValueError(message="Deadline must be positive.")

        self.w3 = w3
        self.aggregator_address = validate_address(aggregator_address)
        self.max_chunk_size = max_chunk_size
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.deadline = deadline
        self.failure_policy = failure_policy
        self.allow_call_failure = allow_call_failure

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"{type(self).__name__}(aggregator={self.aggregator_address}, "
            f"max_chunk_size={self.max_chunk_size})"
        )

    async def execute(
        self,
        calls: Sequence[Call],
        block_identifier: BlockIdentifier | None = None,
        failure_policy: ChunkFailurePolicy | None = None,
    ) -> list[HexBytes | None]:
        """
        Execute all calls and return one raw result per call, in input order. All chunks are read
        at the same block, resolved from `block_identifier` (the latest block if omitted).

        `failure_policy` overrides the policy given at construction for this execution only.
        """

        if not calls:
            return []

        _, results = await self.execute_at_block(calls, block_identifier, failure_policy)
        return results

    async def execute_at_block(
        self,
        calls: Sequence[Call],
        block_identifier: BlockIdentifier | None = None,
        failure_policy: ChunkFailurePolicy | None = None,
    ) -> tuple[BlockNumber, list[HexBytes | None]]:
        """
        Resolve `block_identifier` and execute all calls at that block, returning the block number
        with the results. Block resolution counts against the deadline.
        """

        if failure_policy is None:
            failure_policy = self.failure_policy
        chunks = partition(calls, self.max_chunk_size)

        try:
            async with asyncio.timeout(self.deadline):
                block_number = await self.resolve_block(block_identifier)
                logger.debug(
                    f"Executing {len(calls)} calls in {len(chunks)} chunk(s) at block "
                    f"{block_number}"
                )
                chunk_results = await asyncio.gather(
                    *(
                        self._execute_chunk(chunk_index, chunk, block_number)
                        for chunk_index, chunk in enumerate(chunks)
                    ),
                    return_exceptions=True,
                )
        except TimeoutError:
            if self.deadline is None:
                raise
            raise DeadlineExceeded(self.deadline) from None

        results: list[HexBytes | None] = []
        for chunk, chunk_result in zip(chunks, chunk_results, strict=True):
            match chunk_result:
                case ChunkExecutionFailure() if (
                    failure_policy is ChunkFailurePolicy.MARK_ABSENT
                ):
                    logger.warning(f"{chunk_result.message} Marking {len(chunk)} results absent.")
                    results.extend([None] * len(chunk))
                case BaseException():
                    raise chunk_result
                case _:
                    results.extend(chunk_result)

        if len(results) != len(calls):
            raise InvariantViolation(
                f"executed {len(calls)} calls but collected {len(results)} results"
            )

        return block_number, results

    async def resolve_block(self, block_identifier: BlockIdentifier | None) -> BlockNumber:
        """
        Resolve a block identifier to a block number, using the latest block if omitted.
        """

        try:
            return await get_number_for_block_identifier_async(block_identifier, self.w3)
        except (Web3Exception, OSError, TimeoutError) as exc:
            raise TransportFailure(error=str(exc) or type(exc).__name__) from exc

    async def _execute_chunk(
        self,
        chunk_index: int,
        chunk: Sequence[Call],
        block_number: BlockNumber,
    ) -> list[HexBytes | None]:
        start = chunk_index * self.max_chunk_size
        end = start + len(chunk)
        encoded_calls = [(call.target, call.payload) for call in chunk]
        calldata = (
            encode_function_calldata(TRY_AGGREGATE_PROTOTYPE, [False, encoded_calls])
            if self.allow_call_failure
            else encode_function_calldata(AGGREGATE_PROTOTYPE, [encoded_calls])
        )

        retrier = tenacity.AsyncRetrying(
            stop=tenacity.stop_after_attempt(self.max_retries),
            wait=tenacity.wait_exponential_jitter(
                initial=self.retry_backoff,
                jitter=self.retry_backoff,
            ),
            retry=tenacity.retry_if_exception_type(TransportFailure),
        )

        try:
            async for attempt in retrier:
                with attempt:
                    logger.debug(
                        f"Chunk {chunk_index}: submitting calls {start}-{end - 1} "
                        f"(attempt {attempt.retry_state.attempt_number})"
                    )
                    raw_response = await self._call_aggregator(calldata, block_number)
        except tenacity.RetryError as exc:
            raise ChunkExecutionFailure(
                chunk_index=chunk_index,
                start=start,
                end=end,
                reason=f"{exc.last_attempt.exception()} (gave up after {self.max_retries} "
                "attempts)",
            ) from exc.last_attempt.exception()
        except ContractLogicError as exc:
            raise ChunkExecutionFailure(
                chunk_index=chunk_index,
                start=start,
                end=end,
                reason=f"aggregate call reverted: {exc}",
            ) from exc

        try:
            results = self._decode_response(raw_response)
        except (DecodingError, OverflowError) as exc:
            # eth-abi raises OverflowError for a byte string with an absurd declared length
            raise ChunkExecutionFailure(
                chunk_index=chunk_index,
                start=start,
                end=end,
                reason=f"malformed aggregate response: {exc}",
            ) from exc

        if len(results) != len(chunk):
            raise ChunkExecutionFailure(
                chunk_index=chunk_index,
                start=start,
                end=end,
                reason=f"aggregator returned {len(results)} results for {len(chunk)} calls",
            )

        return results

    async def _call_aggregator(self, calldata: bytes, block_number: BlockNumber) -> bytes:
        try:
            return await self.w3.eth.call(
                transaction=TxParams(
                    to=self.aggregator_address,
                    data=calldata,
                ),
                block_identifier=block_number,
            )
        except ContractLogicError:
            raise
        except (Web3Exception, OSError, TimeoutError) as exc:
            raise TransportFailure(error=str(exc) or type(exc).__name__) from exc

    def _decode_response(self, raw_response: bytes) -> list[HexBytes | None]:
        if self.allow_call_failure:
            (call_results,) = eth_abi.abi.decode(
                types=TRY_AGGREGATE_RETURN_TYPES,
                data=raw_response,
            )
            return [
                HexBytes(return_data) if success else None
                for success, return_data in call_results
            ]

        _, return_data = eth_abi.abi.decode(
            types=AGGREGATE_RETURN_TYPES,
            data=raw_response,
        )
        return [HexBytes(data) for data in return_data]
