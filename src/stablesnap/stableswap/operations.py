"""
Read-only operations on the stableswap pool and LP token contracts.

Each operation maps to exactly one decoded result type, so decoding is resolved from the operation
table and never by inspecting the shape of the returned values.
"""

import enum
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Self

from eth_typing import ChecksumAddress

from stablesnap.checksum_cache import get_checksum_address
from stablesnap.exceptions import UnknownOperation


class ContractKind(enum.Enum):
    SWAP = "swap"
    LP_TOKEN = "lp_token"


@dataclass(slots=True, frozen=True)
class AmplificationFactor:
    value: int

    @classmethod
    def from_abi(cls, values: Sequence[Any]) -> Self:
        (value,) = values
        return cls(value=value)


@dataclass(slots=True, frozen=True)
class SwapFees:
    """
    The fee configuration from the pool's `swapStorage` getter. Values are raw integers with 10
    decimals of precision.
    """

    initial_a: int
    future_a: int
    initial_a_time: int
    future_a_time: int
    swap_fee: int
    admin_fee: int
    default_deposit_fee: int
    default_withdraw_fee: int
    lp_token: ChecksumAddress

    @classmethod
    def from_abi(cls, values: Sequence[Any]) -> Self:
        (
            initial_a,
            future_a,
            initial_a_time,
            future_a_time,
            swap_fee,
            admin_fee,
            default_deposit_fee,
            default_withdraw_fee,
            lp_token,
        ) = values
        return cls(
            initial_a=initial_a,
            future_a=future_a,
            initial_a_time=initial_a_time,
            future_a_time=future_a_time,
            swap_fee=swap_fee,
            admin_fee=admin_fee,
            default_deposit_fee=default_deposit_fee,
            default_withdraw_fee=default_withdraw_fee,
            lp_token=get_checksum_address(lp_token),
        )


@dataclass(slots=True, frozen=True)
class PausedFlag:
    paused: bool

    @classmethod
    def from_abi(cls, values: Sequence[Any]) -> Self:
        (paused,) = values
        return cls(paused=paused is True)


@dataclass(slots=True, frozen=True)
class PoolBalances:
    balances: tuple[int, ...]

    @classmethod
    def from_abi(cls, values: Sequence[Any]) -> Self:
        (balances,) = values
        return cls(balances=tuple(balances))


@dataclass(slots=True, frozen=True)
class LpTotalSupply:
    total_supply: int

    @classmethod
    def from_abi(cls, values: Sequence[Any]) -> Self:
        (total_supply,) = values
        return cls(total_supply=total_supply)


type DecodedField = AmplificationFactor | SwapFees | PausedFlag | PoolBalances | LpTotalSupply


@dataclass(slots=True, frozen=True)
class ContractOperation:
    name: str
    contract: ContractKind
    function_prototype: str
    return_types: tuple[str, ...]
    result_type: (
        type[AmplificationFactor]
        | type[SwapFees]
        | type[PausedFlag]
        | type[PoolBalances]
        | type[LpTotalSupply]
    )


GET_A = ContractOperation(
    name="getA",
    contract=ContractKind.SWAP,
    function_prototype="getA()",
    return_types=("uint256",),
    result_type=AmplificationFactor,
)
SWAP_STORAGE = ContractOperation(
    name="swapStorage",
    contract=ContractKind.SWAP,
    function_prototype="swapStorage()",
    return_types=(
        "uint256",  # initialA
        "uint256",  # futureA
        "uint256",  # initialATime
        "uint256",  # futureATime
        "uint256",  # swapFee
        "uint256",  # adminFee
        "uint256",  # defaultDepositFee
        "uint256",  # defaultWithdrawFee
        "address",  # lpToken
    ),
    result_type=SwapFees,
)
PAUSED = ContractOperation(
    name="paused",
    contract=ContractKind.SWAP,
    function_prototype="paused()",
    return_types=("bool",),
    result_type=PausedFlag,
)
GET_BALANCES = ContractOperation(
    name="getBalances",
    contract=ContractKind.SWAP,
    function_prototype="getBalances()",
    return_types=("uint256[]",),
    result_type=PoolBalances,
)
TOTAL_SUPPLY = ContractOperation(
    name="totalSupply",
    contract=ContractKind.LP_TOKEN,
    function_prototype="totalSupply()",
    return_types=("uint256",),
    result_type=LpTotalSupply,
)

OPERATIONS: dict[str, ContractOperation] = {
    operation.name: operation
    for operation in (GET_A, SWAP_STORAGE, PAUSED, GET_BALANCES, TOTAL_SUPPLY)
}


def get_operation(name: str) -> ContractOperation:
    try:
        return OPERATIONS[name]
    except KeyError:
        raise UnknownOperation(name) from None
