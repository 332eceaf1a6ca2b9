"""
Spot price and swap output estimates for a stableswap pool snapshot.

Balances are scaled to a common 18 decimal precision before solving the stableswap invariant, and
scaled back to the output token's native units afterwards.

Reference: https://github.com/curveresearch/notes/blob/main/stableswap.pdf
"""

from collections.abc import Sequence
from fractions import Fraction

from stablesnap.constants import FEE_DENOMINATOR, POOL_PRECISION_DECIMALS
from stablesnap.exceptions import PricingError
from stablesnap.registry import StableswapPool
from stablesnap.stableswap.types import StableswapPoolSnapshot, SwapOutput

MAX_ITERATIONS = 255
MIN_PRICE_INPUT = 10_000


def compute_d(amp: int, xp: Sequence[int]) -> int:
    """
    Solve for the stableswap invariant D, using Newton's method.
    """

    n_coins = len(xp)
    s = sum(xp)
    if not xp or any(x == 0 for x in xp):
        raise PricingError(message="Cannot solve the invariant for a pool with an empty reserve.")
    if amp <= 0:
        raise PricingError(message=f"Invalid amplification factor {amp}.")

    a_nn = amp * n_coins
    d = s
    for _ in range(MAX_ITERATIONS):  # pragma: no branch
        d_p = d
        for x in xp:
            d_p = d_p * d // (x * n_coins)
        d_prev = d
        d = (a_nn * s + d_p * n_coins) * d // ((a_nn - 1) * d + (n_coins + 1) * d_p)
        if abs(d - d_prev) <= 1:
            return d

    raise PricingError(message="D calculation did not converge.")  # pragma: no cover


def compute_y(amp: int, i: int, j: int, x: int, xp: Sequence[int]) -> int:
    """
    Calculate the new balance of coin `j` if the balance of coin `i` becomes `x`, holding D
    constant.

    Done by solving the quadratic equation iteratively:
    y**2 + y * (b - D) = c
    y = (y**2 + c) / (2*y + b - D)
    """

    n_coins = len(xp)
    if i == j:
        raise PricingError(message="Input and output coin are the same.")
    if not (0 <= i < n_coins and 0 <= j < n_coins):
        raise PricingError(message=f"Coin index out of range for a {n_coins} coin pool.")

    d = compute_d(amp, xp)

    c = d
    s = 0
    for coin_index in range(n_coins):
        if coin_index == i:
            _x = x
        elif coin_index != j:
            _x = xp[coin_index]
        else:
            continue
        s += _x
        c = c * d // (_x * n_coins)

    a_nn = amp * n_coins
    c = c * d // (a_nn * n_coins)
    b = s + d // a_nn

    y = d
    for _ in range(MAX_ITERATIONS):  # pragma: no branch
        y_prev = y
        y = (y * y + c) // (2 * y + b - d)
        if abs(y - y_prev) <= 1:
            return y

    raise PricingError(message="y calculation did not converge.")  # pragma: no cover


def _precision_multipliers(pool: StableswapPool) -> tuple[int, ...]:
    return tuple(10 ** (POOL_PRECISION_DECIMALS - token.decimals) for token in pool.tokens)


def calculate_estimated_swap_output(
    snapshot: StableswapPoolSnapshot,
    pool: StableswapPool,
    amount_in: int,
    token_in_index: int,
) -> SwapOutput:
    """
    Estimate the output of swapping `amount_in` (raw units) of the token at `token_in_index` for
    the other token in the pool.
    """

    if len(snapshot.reserves) != len(pool.tokens):
        raise PricingError(
            message=f"Snapshot has {len(snapshot.reserves)} reserves for a pool of "
            f"{len(pool.tokens)} tokens."
        )
    if token_in_index not in (0, 1):
        raise PricingError(message=f"Invalid input token index {token_in_index}.")
    if amount_in < 0:
        raise PricingError(message="Input amount cannot be negative.")

    if amount_in == 0:
        return SwapOutput(
            output_amount=0,
            output_amount_before_fees=0,
            fee=0,
            lp_fee=0,
            admin_fee=0,
        )

    token_out_index = 1 - token_in_index
    multipliers = _precision_multipliers(pool)
    xp = [
        balance * multiplier
        for balance, multiplier in zip(snapshot.reserves, multipliers, strict=True)
    ]

    x = xp[token_in_index] + amount_in * multipliers[token_in_index]
    y = compute_y(snapshot.amplification_factor, token_in_index, token_out_index, x, xp)
    output_before_fees = max(0, (xp[token_out_index] - y - 1) // multipliers[token_out_index])

    fee = output_before_fees * snapshot.fees.trade // FEE_DENOMINATOR
    admin_fee = fee * snapshot.fees.admin // FEE_DENOMINATOR

    return SwapOutput(
        output_amount=output_before_fees - fee,
        output_amount_before_fees=output_before_fees,
        fee=fee,
        lp_fee=fee - admin_fee,
        admin_fee=admin_fee,
    )


def calculate_swap_price(snapshot: StableswapPoolSnapshot, pool: StableswapPool) -> Fraction:
    """
    Return the price of the first token in units of the second token, before fees.
    """

    token0, token1 = pool.tokens
    amount_in = max(MIN_PRICE_INPUT, 10**token0.decimals)
    output = calculate_estimated_swap_output(
        snapshot=snapshot,
        pool=pool,
        amount_in=amount_in,
        token_in_index=0,
    )
    return Fraction(
        output.output_amount_before_fees * 10**token0.decimals,
        amount_in * 10**token1.decimals,
    )
