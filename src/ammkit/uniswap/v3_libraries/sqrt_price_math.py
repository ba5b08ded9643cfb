"""
Functions for computing sqrt prices and token deltas from liquidity.

ref: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/SqrtPriceMath.sol
"""

import functools

from ammkit.constants import MAX_UINT160, MAX_UINT256
from ammkit.exceptions import EVMRevertError
from ammkit.uniswap.v3_libraries.constants import LIB_CACHE_SIZE, Q96, Q96_RESOLUTION
from ammkit.uniswap.v3_libraries.full_math import muldiv, muldiv_rounding_up
from ammkit.uniswap.v3_libraries.safe_cast import to_int256, to_uint160
from ammkit.uniswap.v3_libraries.unsafe_math import div_rounding_up


@functools.lru_cache(maxsize=LIB_CACHE_SIZE)
def get_amount0_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool | None = None,
) -> int:
    """
    Calculate the token0 amount between two prices, i.e. liquidity / sqrt(lower) -
    liquidity / sqrt(upper).

    The Solidity function is overloaded: with `round_up` given, `liquidity` is unsigned and the
    result is rounded in that direction. Without it, `liquidity` is signed and the result is a
    signed delta rounded away from the pool.
    """

    if round_up is None:
        return (
            to_int256(-get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity, False))
            if liquidity < 0
            else to_int256(get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, True))
        )

    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_a_x96 <= 0:
        raise EVMRevertError(error="required: sqrt_ratio_a_x96 > 0")

    numerator1 = liquidity << Q96_RESOLUTION
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(
            muldiv_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96,
        )
    return muldiv(numerator1, numerator2, sqrt_ratio_b_x96) // sqrt_ratio_a_x96


@functools.lru_cache(maxsize=LIB_CACHE_SIZE)
def get_amount1_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool | None = None,
) -> int:
    """
    Calculate the token1 amount between two prices, i.e. liquidity * (sqrt(upper) - sqrt(lower)).

    Overloaded on `round_up` in the same way as `get_amount0_delta`.
    """

    if round_up is None:
        return (
            to_int256(-get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity, False))
            if liquidity < 0
            else to_int256(get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, True))
        )

    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    return (
        muldiv_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
        if round_up
        else muldiv(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    )


@functools.lru_cache(maxsize=LIB_CACHE_SIZE)
def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool,
) -> int:
    # Always rounds up: when adding token0 the price must not fall past the exact value, and when
    # removing it the price must not rise short of it
    if amount == 0:
        return sqrt_price_x96

    numerator1 = liquidity << Q96_RESOLUTION
    product = amount * sqrt_price_x96

    if add:
        if product <= MAX_UINT256:
            denominator = numerator1 + product
            if denominator <= MAX_UINT256:
                return muldiv_rounding_up(numerator1, sqrt_price_x96, denominator)
        # overflow fallback, equivalent to the Solidity path
        return div_rounding_up(numerator1, numerator1 // sqrt_price_x96 + amount)

    if product > MAX_UINT256 or numerator1 <= product:
        raise EVMRevertError(error="required: numerator1 > product")
    return to_uint160(muldiv_rounding_up(numerator1, sqrt_price_x96, numerator1 - product))


@functools.lru_cache(maxsize=LIB_CACHE_SIZE)
def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool,
) -> int:
    if add:
        quotient = (
            (amount << Q96_RESOLUTION) // liquidity
            if amount <= MAX_UINT160
            else muldiv(amount, Q96, liquidity)
        )
        return to_uint160(sqrt_price_x96 + quotient)

    quotient = (
        div_rounding_up(amount << Q96_RESOLUTION, liquidity)
        if amount <= MAX_UINT160
        else muldiv_rounding_up(amount, Q96, liquidity)
    )
    if sqrt_price_x96 <= quotient:
        raise EVMRevertError(error="required: sqrt_price_x96 > quotient")
    return sqrt_price_x96 - quotient


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool,
) -> int:
    """
    Get the next sqrt price after adding `amount_in` of the input token, rounded so the target
    price is never passed.
    """

    if sqrt_price_x96 <= 0:
        raise EVMRevertError(error="required: sqrt_price_x96 > 0")
    if liquidity <= 0:
        raise EVMRevertError(error="required: liquidity > 0")

    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(
            sqrt_price_x96, liquidity, amount_in, True
        )
    return get_next_sqrt_price_from_amount1_rounding_down(
        sqrt_price_x96, liquidity, amount_in, True
    )


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int,
    liquidity: int,
    amount_out: int,
    zero_for_one: bool,
) -> int:
    """
    Get the next sqrt price after removing `amount_out` of the output token, rounded so the target
    price is always passed.
    """

    if sqrt_price_x96 <= 0:
        raise EVMRevertError(error="required: sqrt_price_x96 > 0")
    if liquidity <= 0:
        raise EVMRevertError(error="required: liquidity > 0")

    if zero_for_one:
        return get_next_sqrt_price_from_amount1_rounding_down(
            sqrt_price_x96, liquidity, amount_out, False
        )
    return get_next_sqrt_price_from_amount0_rounding_up(
        sqrt_price_x96, liquidity, amount_out, False
    )
