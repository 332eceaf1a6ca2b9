import dataclasses
from fractions import Fraction

from stablesnap.constants import FEE_DENOMINATOR
from stablesnap.types import AbstractPoolState


@dataclasses.dataclass(slots=True, frozen=True)
class StableswapFees:
    trade: int
    admin: int
    deposit: int
    withdraw: int

    @property
    def trade_fraction(self) -> Fraction:
        return Fraction(self.trade, FEE_DENOMINATOR)

    @property
    def admin_fraction(self) -> Fraction:
        return Fraction(self.admin, FEE_DENOMINATOR)

    @property
    def deposit_fraction(self) -> Fraction:
        return Fraction(self.deposit, FEE_DENOMINATOR)

    @property
    def withdraw_fraction(self) -> Fraction:
        return Fraction(self.withdraw, FEE_DENOMINATOR)


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class StableswapPoolSnapshot(AbstractPoolState):
    amplification_factor: int
    fees: StableswapFees
    paused: bool
    reserves: tuple[int, ...]
    lp_total_supply: int
    schema_version: int


@dataclasses.dataclass(slots=True, frozen=True)
class SwapOutput:
    output_amount: int
    output_amount_before_fees: int
    fee: int
    lp_fee: int
    admin_fee: int
