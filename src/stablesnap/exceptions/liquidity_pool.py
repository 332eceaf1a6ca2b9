from collections.abc import Sequence
from typing import Any

from stablesnap.exceptions.base import StablesnapError


class LiquidityPoolError(StablesnapError):
    """
    Exception raised inside liquidity pool helpers.
    """


class ReserveCountMismatch(LiquidityPoolError):
    """
    The number of decoded reserves does not match the number of tokens held by the pool.
    """

    def __init__(self, pool: str, expected: int, actual: int) -> None:
        self.pool = pool
        self.expected = expected
        self.actual = actual
        super().__init__(
            message=f"Pool {pool} returned {actual} reserve balances, expected {expected}."
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.pool, self.expected, self.actual)


class PoolSnapshotError(LiquidityPoolError):
    """
    Raised when snapshots could not be built for one or more pools. The pool names are available
    at `.pools` and the failed stage at `.stage`.
    """

    def __init__(self, stage: str, pools: Sequence[str], reason: str) -> None:
        self.stage = stage
        self.pools = tuple(pools)
        self.reason = reason
        super().__init__(
            message=f"{stage} failed for pool(s) {', '.join(self.pools)}: {reason}"
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.stage, self.pools, self.reason)


class PricingError(LiquidityPoolError):
    """
    Raised when a price or swap output cannot be calculated from a snapshot.
    """
