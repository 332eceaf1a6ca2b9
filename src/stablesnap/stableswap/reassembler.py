from collections.abc import Sequence
from typing import Any

from stablesnap.checksum_cache import validate_address
from stablesnap.exceptions import InvariantViolation, ReserveCountMismatch
from stablesnap.registry import StableswapPool
from stablesnap.stableswap.operations import (
    AmplificationFactor,
    DecodedField,
    LpTotalSupply,
    PausedFlag,
    PoolBalances,
    SwapFees,
)
from stablesnap.stableswap.schema import SNAPSHOT_SCHEMA_V1, SnapshotSchema
from stablesnap.stableswap.types import StableswapFees, StableswapPoolSnapshot
from stablesnap.types.aliases import BlockNumber


def _snapshot_value(decoded: DecodedField) -> Any:
    match decoded:
        case AmplificationFactor(value=value):
            return value
        case SwapFees():
            return StableswapFees(
                trade=decoded.swap_fee,
                admin=decoded.admin_fee,
                deposit=decoded.default_deposit_fee,
                withdraw=decoded.default_withdraw_fee,
            )
        case PausedFlag(paused=paused):
            return paused
        case PoolBalances(balances=balances):
            return balances
        case LpTotalSupply(total_supply=total_supply):
            return total_supply


def assemble_snapshot(
    pool: StableswapPool,
    window: Sequence[DecodedField],
    schema: SnapshotSchema = SNAPSHOT_SCHEMA_V1,
    block: BlockNumber | None = None,
) -> StableswapPoolSnapshot:
    """
    Build the snapshot for one pool from its window of decoded fields, mapped by schema position.
    """

    if len(window) != schema.fields_per_entity:
        raise InvariantViolation(
            f"pool {pool.name} has {len(window)} decoded fields, schema v{schema.version} "
            f"requires {schema.fields_per_entity}"
        )

    attributes: dict[str, Any] = {}
    for field in schema.fields:
        decoded = window[field.position]
        if not isinstance(decoded, field.operation.result_type):
            raise InvariantViolation(
                f"pool {pool.name} field {field.position} ({field.attribute}) holds "
                f"{type(decoded).__name__}, expected {field.operation.result_type.__name__}"
            )
        attributes[field.attribute] = _snapshot_value(decoded)

    if len(attributes["reserves"]) != len(pool.tokens):
        raise ReserveCountMismatch(
            pool=pool.name,
            expected=len(pool.tokens),
            actual=len(attributes["reserves"]),
        )

    return StableswapPoolSnapshot(
        address=validate_address(pool.address),
        block=block,
        schema_version=schema.version,
        **attributes,
    )


def assemble_snapshots(
    pools: Sequence[StableswapPool],
    decoded: Sequence[DecodedField],
    schema: SnapshotSchema = SNAPSHOT_SCHEMA_V1,
    block: BlockNumber | None = None,
) -> list[StableswapPoolSnapshot]:
    """
    Regroup a flat sequence of decoded fields into one snapshot per pool, in pool order. The
    fields for pool `i` occupy positions `i * n` to `(i + 1) * n`, where `n` is the number of
    fields in the schema.
    """

    fields_per_entity = schema.fields_per_entity
    if len(decoded) != fields_per_entity * len(pools):
        raise InvariantViolation(
            f"{len(decoded)} decoded fields cannot be split into {len(pools)} pools of "
            f"{fields_per_entity} fields"
        )

    return [
        assemble_snapshot(
            pool=pool,
            window=decoded[i * fields_per_entity : (i + 1) * fields_per_entity],
            schema=schema,
            block=block,
        )
        for i, pool in enumerate(pools)
    ]
