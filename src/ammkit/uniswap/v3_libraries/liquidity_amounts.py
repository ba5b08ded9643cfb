"""
Conversions between token amounts and liquidity for a position bounded by two sqrt prices.

All results are floored, matching the V3 periphery library.

ref: https://github.com/Uniswap/v3-periphery/blob/main/contracts/libraries/LiquidityAmounts.sol
"""

from ammkit.uniswap.v3_libraries.constants import Q96, Q96_RESOLUTION
from ammkit.uniswap.v3_libraries.full_math import muldiv
from ammkit.uniswap.v3_libraries.safe_cast import to_uint128


def _ordered(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int) -> tuple[int, int]:
    return (
        (sqrt_ratio_b_x96, sqrt_ratio_a_x96)
        if sqrt_ratio_a_x96 > sqrt_ratio_b_x96
        else (sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    )


def get_liquidity_for_amount0(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount0: int) -> int:
    sqrt_ratio_a_x96, sqrt_ratio_b_x96 = _ordered(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    intermediate = muldiv(sqrt_ratio_a_x96, sqrt_ratio_b_x96, Q96)
    return to_uint128(muldiv(amount0, intermediate, sqrt_ratio_b_x96 - sqrt_ratio_a_x96))


def get_liquidity_for_amount1(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount1: int) -> int:
    sqrt_ratio_a_x96, sqrt_ratio_b_x96 = _ordered(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    return to_uint128(muldiv(amount1, Q96, sqrt_ratio_b_x96 - sqrt_ratio_a_x96))


def get_liquidity_for_amounts(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int,
    amount1: int,
) -> int:
    """
    Compute the maximum liquidity received for the given token amounts at the current price.
    Inside the range, the side that runs out first bounds the result.
    """

    sqrt_ratio_a_x96, sqrt_ratio_b_x96 = _ordered(sqrt_ratio_a_x96, sqrt_ratio_b_x96)

    if sqrt_ratio_x96 <= sqrt_ratio_a_x96:
        return get_liquidity_for_amount0(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount0)
    if sqrt_ratio_x96 < sqrt_ratio_b_x96:
        return min(
            get_liquidity_for_amount0(sqrt_ratio_x96, sqrt_ratio_b_x96, amount0),
            get_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_x96, amount1),
        )
    return get_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount1)


def get_amount0_for_liquidity(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int) -> int:
    sqrt_ratio_a_x96, sqrt_ratio_b_x96 = _ordered(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    return (
        muldiv(
            liquidity << Q96_RESOLUTION,
            sqrt_ratio_b_x96 - sqrt_ratio_a_x96,
            sqrt_ratio_b_x96,
        )
        // sqrt_ratio_a_x96
    )


def get_amount1_for_liquidity(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int) -> int:
    sqrt_ratio_a_x96, sqrt_ratio_b_x96 = _ordered(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    return muldiv(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)


def get_amounts_for_liquidity(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
) -> tuple[int, int]:
    """
    Compute the token0 and token1 value of `liquidity` at the current price.
    """

    sqrt_ratio_a_x96, sqrt_ratio_b_x96 = _ordered(sqrt_ratio_a_x96, sqrt_ratio_b_x96)

    if sqrt_ratio_x96 <= sqrt_ratio_a_x96:
        return get_amount0_for_liquidity(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity), 0
    if sqrt_ratio_x96 < sqrt_ratio_b_x96:
        return (
            get_amount0_for_liquidity(sqrt_ratio_x96, sqrt_ratio_b_x96, liquidity),
            get_amount1_for_liquidity(sqrt_ratio_a_x96, sqrt_ratio_x96, liquidity),
        )
    return 0, get_amount1_for_liquidity(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity)
