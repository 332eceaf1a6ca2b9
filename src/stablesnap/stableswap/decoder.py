from collections.abc import Sequence

import eth_abi.abi
from eth_abi.exceptions import DecodingError
from hexbytes import HexBytes

from stablesnap.exceptions import InvariantViolation, MalformedReturnData, MissingReturnData
from stablesnap.stableswap.encoder import CallDescriptor
from stablesnap.stableswap.operations import ContractOperation, DecodedField


def decode_result(raw: HexBytes | bytes | None, operation: ContractOperation) -> DecodedField:
    """
    Decode the raw return data of a call made with `operation`.

    Absent data raises `MissingReturnData`, and data that does not decode under the operation's
    return types raises `MalformedReturnData`.
    """

    if raw is None:
        raise MissingReturnData(operation=operation.name)

    try:
        values = eth_abi.abi.decode(types=operation.return_types, data=raw)
    except (DecodingError, OverflowError) as exc:
        raise MalformedReturnData(operation=operation.name, error=str(exc)) from exc

    return operation.result_type.from_abi(values)


def decode_results(
    raw_results: Sequence[HexBytes | None],
    calls: Sequence[CallDescriptor],
) -> list[DecodedField]:
    if len(raw_results) != len(calls):
        raise InvariantViolation(
            f"received {len(raw_results)} results for {len(calls)} calls"
        )

    return [
        decode_result(raw, call.operation) for raw, call in zip(raw_results, calls, strict=True)
    ]
