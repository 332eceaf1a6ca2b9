from collections.abc import Iterable
from dataclasses import dataclass

from eth_typing import ChecksumAddress

from stablesnap.checksum_cache import validate_address
from stablesnap.functions import encode_function_calldata
from stablesnap.registry import StableswapPool
from stablesnap.stableswap.operations import ContractKind, ContractOperation, get_operation
from stablesnap.stableswap.schema import SNAPSHOT_SCHEMA_V1, SnapshotSchema


@dataclass(slots=True, frozen=True)
class CallDescriptor:
    """
    A single read-only call. The operation travels with the call so the result can be decoded
    without inferring its shape.
    """

    target: ChecksumAddress
    payload: bytes
    operation: ContractOperation


def encode_call(target: str, operation: ContractOperation | str) -> CallDescriptor:
    """
    Encode a call to `operation` at `target`. Raises `InvalidAddress` for a bad target address and
    `UnknownOperation` for an unrecognized operation name.
    """

    if isinstance(operation, str):
        operation = get_operation(operation)

    return CallDescriptor(
        target=validate_address(target),
        payload=encode_function_calldata(
            function_prototype=operation.function_prototype,
            function_arguments=None,
        ),
        operation=operation,
    )


def _target_for(pool: StableswapPool, operation: ContractOperation) -> str:
    match operation.contract:
        case ContractKind.SWAP:
            return pool.address
        case ContractKind.LP_TOKEN:
            return pool.lp_token.address


def encode_pool_calls(
    pools: Iterable[StableswapPool],
    schema: SnapshotSchema = SNAPSHOT_SCHEMA_V1,
) -> list[CallDescriptor]:
    """
    Encode the calls for every pool, in pool order, then schema position order.
    """

    return [
        encode_call(_target_for(pool, field.operation), field.operation)
        for pool in pools
        for field in schema.fields
    ]
