"""
Fetch snapshots for a sequence of pools: encode the calls for every pool, execute them in chunks,
decode each result under its operation, and regroup the decoded fields into one snapshot per
pool.
"""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from web3.types import BlockIdentifier

from stablesnap.exceptions import (
    ChunkExecutionFailure,
    InvariantViolation,
    MissingReturnData,
    PoolSnapshotError,
    StablesnapError,
    TransportFailure,
)
from stablesnap.logging import logger
from stablesnap.multicall import ChunkFailurePolicy, MulticallExecutor
from stablesnap.registry import StableswapPool
from stablesnap.stableswap.decoder import decode_results
from stablesnap.stableswap.encoder import encode_pool_calls
from stablesnap.stableswap.operations import DecodedField
from stablesnap.stableswap.reassembler import assemble_snapshots
from stablesnap.stableswap.schema import SNAPSHOT_SCHEMA_V1, SnapshotSchema
from stablesnap.stableswap.types import StableswapPoolSnapshot
from stablesnap.types.aliases import BlockNumber


@dataclass(slots=True, frozen=True)
class PoolFetchFailure:
    pool: StableswapPool
    error: StablesnapError


@dataclass(slots=True, frozen=True)
class SnapshotFetchResult:
    """
    The outcome of one fetch. `pools[i]` is the pool described by `snapshots[i]`. Pools that could
    not be fetched are listed in `failures` and have no snapshot.
    """

    block: BlockNumber
    pools: tuple[StableswapPool, ...]
    snapshots: tuple[StableswapPoolSnapshot, ...]
    failures: tuple[PoolFetchFailure, ...]

    def __iter__(self) -> Iterator[tuple[StableswapPool, StableswapPoolSnapshot]]:
        return zip(self.pools, self.snapshots, strict=True)


def pools_for_call_range(
    pools: Sequence[StableswapPool],
    start: int,
    end: int,
    schema: SnapshotSchema = SNAPSHOT_SCHEMA_V1,
) -> list[StableswapPool]:
    """
    Return the pools with at least one call in positions `[start, end)`.
    """

    n = schema.fields_per_entity
    return list(pools[start // n : (end - 1) // n + 1]) if end > start else []


async def fetch_pool_snapshots(
    pools: Iterable[StableswapPool],
    executor: MulticallExecutor,
    *,
    schema: SnapshotSchema = SNAPSHOT_SCHEMA_V1,
    block_identifier: BlockIdentifier | None = None,
    allow_incomplete: bool = False,
) -> SnapshotFetchResult:
    """
    Fetch one snapshot per pool, in pool order.

    By default, any failed chunk or missing field aborts with `PoolSnapshotError`, naming the
    affected pools. With `allow_incomplete=True`, failed chunks are marked absent and the pools
    missing any field are reported in the result's `failures` instead of raising. A snapshot is
    never built from partial data.
    """

    pools = tuple(pools)
    n = schema.fields_per_entity

    calls = encode_pool_calls(pools, schema)
    if len(calls) != n * len(pools):
        raise InvariantViolation(f"encoded {len(calls)} calls for {len(pools)} pools")

    logger.info(f"Fetching {len(pools)} pools ({len(calls)} calls)")

    try:
        block, raw_results = await executor.execute_at_block(
            calls,
            block_identifier=block_identifier,
            failure_policy=ChunkFailurePolicy.MARK_ABSENT if allow_incomplete else None,
        )
    except TransportFailure as exc:
        # Chunk transport failures arrive wrapped in ChunkExecutionFailure, so this one came from
        # the block lookup and affects every pool
        raise PoolSnapshotError(
            stage="block resolution",
            pools=[pool.name for pool in pools],
            reason=exc.message or str(exc),
        ) from exc
    except ChunkExecutionFailure as exc:
        affected = pools_for_call_range(pools, exc.start, exc.end, schema)
        raise PoolSnapshotError(
            stage="batch execution",
            pools=[pool.name for pool in affected],
            reason=exc.message or str(exc),
        ) from exc

    if len(raw_results) != len(calls):
        raise InvariantViolation(f"received {len(raw_results)} results for {len(calls)} calls")
    logger.debug(f"Received {len(raw_results)} results at block {block}")

    complete_pools: list[StableswapPool] = []
    decoded: list[DecodedField] = []
    failures: list[PoolFetchFailure] = []
    for i, pool in enumerate(pools):
        window = slice(i * n, (i + 1) * n)
        try:
            pool_fields = decode_results(raw_results[window], calls[window])
        except MissingReturnData as exc:
            if not allow_incomplete:
                raise PoolSnapshotError(
                    stage="decoding",
                    pools=[pool.name],
                    reason=exc.message or str(exc),
                ) from exc
            logger.warning(f"Skipping pool {pool.name}: {exc.message}")
            failures.append(PoolFetchFailure(pool=pool, error=exc))
            continue
        complete_pools.append(pool)
        decoded.extend(pool_fields)

    snapshots = assemble_snapshots(complete_pools, decoded, schema=schema, block=block)

    return SnapshotFetchResult(
        block=block,
        pools=tuple(complete_pools),
        snapshots=tuple(snapshots),
        failures=tuple(failures),
    )
