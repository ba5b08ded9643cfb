from decimal import Decimal, getcontext

import pytest

from ammkit.constants import MAX_UINT128, MAX_UINT256
from ammkit.exceptions import EVMRevertError
from ammkit.uniswap.v3_libraries.sqrt_price_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)

# Tests adapted from Typescript tests on Uniswap V3 Github repo
# ref: https://github.com/Uniswap/v3-core/blob/main/test/SqrtPriceMath.spec.ts

getcontext().prec = 256
getcontext().rounding = "ROUND_FLOOR"


def expand_to_18_decimals(x: int) -> int:
    return x * 10**18


def encode_price_sqrt(reserve1: int, reserve0: int) -> int:
    """
    Returns the sqrt price as a Q64.96 value
    """
    return round((Decimal(reserve1) / Decimal(reserve0)).sqrt() * Decimal(2**96))


def test_get_next_sqrt_price_from_input():
    with pytest.raises(EVMRevertError):
        get_next_sqrt_price_from_input(
            sqrt_price_x96=0,
            liquidity=1,
            amount_in=expand_to_18_decimals(1) // 10,
            zero_for_one=False,
        )
    with pytest.raises(EVMRevertError):
        get_next_sqrt_price_from_input(
            sqrt_price_x96=1,
            liquidity=0,
            amount_in=expand_to_18_decimals(1) // 10,
            zero_for_one=True,
        )

    price = encode_price_sqrt(1, 1)
    assert (
        get_next_sqrt_price_from_input(
            sqrt_price_x96=price,
            liquidity=expand_to_18_decimals(1) // 10,
            amount_in=0,
            zero_for_one=True,
        )
        == price
    )

    # input amount of 0.1 token1
    assert (
        get_next_sqrt_price_from_input(
            sqrt_price_x96=encode_price_sqrt(1, 1),
            liquidity=expand_to_18_decimals(1),
            amount_in=expand_to_18_decimals(1) // 10,
            zero_for_one=False,
        )
        == 87150978765690771352898345369
    )

    # input amount of 0.1 token0
    assert (
        get_next_sqrt_price_from_input(
            sqrt_price_x96=encode_price_sqrt(1, 1),
            liquidity=expand_to_18_decimals(1),
            amount_in=expand_to_18_decimals(1) // 10,
            zero_for_one=True,
        )
        == 72025602285694852357767227579
    )

    # amount_in > type(uint96).max and zero_for_one = true
    assert (
        get_next_sqrt_price_from_input(
            sqrt_price_x96=encode_price_sqrt(1, 1),
            liquidity=expand_to_18_decimals(10),
            amount_in=2**100,
            zero_for_one=True,
        )
        == 624999999995069620
    )

    # can return 1 with enough amount_in and zero_for_one = true
    assert (
        get_next_sqrt_price_from_input(
            sqrt_price_x96=encode_price_sqrt(1, 1),
            liquidity=1,
            amount_in=MAX_UINT256 // 2,
            zero_for_one=True,
        )
        == 1
    )


def test_get_next_sqrt_price_from_output():
    with pytest.raises(EVMRevertError):
        get_next_sqrt_price_from_output(
            sqrt_price_x96=0,
            liquidity=1,
            amount_out=expand_to_18_decimals(1) // 10,
            zero_for_one=False,
        )

    price = 20282409603651670423947251286016
    assert (
        get_next_sqrt_price_from_output(
            sqrt_price_x96=price,
            liquidity=1024,
            amount_out=262143,
            zero_for_one=True,
        )
        == 77371252455336267181195264
    )

    with pytest.raises(EVMRevertError):
        # output amount is exactly the virtual reserves of token0
        get_next_sqrt_price_from_output(
            sqrt_price_x96=price,
            liquidity=1024,
            amount_out=4,
            zero_for_one=False,
        )

    assert (
        get_next_sqrt_price_from_output(
            sqrt_price_x96=encode_price_sqrt(1, 1),
            liquidity=expand_to_18_decimals(1),
            amount_out=expand_to_18_decimals(1) // 10,
            zero_for_one=False,
        )
        == 88031291682515930659493278152
    )
    assert (
        get_next_sqrt_price_from_output(
            sqrt_price_x96=encode_price_sqrt(1, 1),
            liquidity=expand_to_18_decimals(1),
            amount_out=expand_to_18_decimals(1) // 10,
            zero_for_one=True,
        )
        == 71305346262837903834189555302
    )


def test_get_amount0_delta():
    assert (
        get_amount0_delta(encode_price_sqrt(1, 1), encode_price_sqrt(2, 1), 0, round_up=True)
        == 0
    )

    amount0 = get_amount0_delta(
        sqrt_ratio_a_x96=encode_price_sqrt(1, 1),
        sqrt_ratio_b_x96=encode_price_sqrt(121, 100),
        liquidity=expand_to_18_decimals(1),
        round_up=True,
    )
    assert amount0 == 90909090909090910

    amount0_rounded_down = get_amount0_delta(
        sqrt_ratio_a_x96=encode_price_sqrt(1, 1),
        sqrt_ratio_b_x96=encode_price_sqrt(121, 100),
        liquidity=expand_to_18_decimals(1),
        round_up=False,
    )
    assert amount0_rounded_down == amount0 - 1

    # prices given in either order
    assert (
        get_amount0_delta(
            encode_price_sqrt(121, 100),
            encode_price_sqrt(1, 1),
            expand_to_18_decimals(1),
            round_up=True,
        )
        == amount0
    )


def test_get_amount1_delta():
    amount1 = get_amount1_delta(
        sqrt_ratio_a_x96=encode_price_sqrt(1, 1),
        sqrt_ratio_b_x96=encode_price_sqrt(121, 100),
        liquidity=expand_to_18_decimals(1),
        round_up=True,
    )
    assert amount1 == 100000000000000001

    amount1_rounded_down = get_amount1_delta(
        sqrt_ratio_a_x96=encode_price_sqrt(1, 1),
        sqrt_ratio_b_x96=encode_price_sqrt(121, 100),
        liquidity=expand_to_18_decimals(1),
        round_up=False,
    )
    assert amount1_rounded_down == amount1 - 1


def test_signed_deltas():
    price_a = encode_price_sqrt(1, 1)
    price_b = encode_price_sqrt(121, 100)
    liquidity = expand_to_18_decimals(1)

    # adding liquidity rounds up, removing it rounds down
    assert get_amount0_delta(price_a, price_b, liquidity) == 90909090909090910
    assert get_amount0_delta(price_a, price_b, -liquidity) == -90909090909090909
    assert get_amount1_delta(price_a, price_b, liquidity) == 100000000000000001
    assert get_amount1_delta(price_a, price_b, -liquidity) == -100000000000000000

    assert get_amount1_delta(price_a, price_b, MAX_UINT128) > 0


def test_swap_computation():
    sqrt_p = 1025574284609383690408304870162715216695788925244
    liquidity = 50015962439936049619261659728067971248

    sqrt_q = get_next_sqrt_price_from_input(
        sqrt_price_x96=sqrt_p,
        liquidity=liquidity,
        amount_in=406,
        zero_for_one=True,
    )
    assert sqrt_q == 1025574284609383582644711336373707553698163132913

    assert (
        get_amount0_delta(
            sqrt_ratio_a_x96=sqrt_q,
            sqrt_ratio_b_x96=sqrt_p,
            liquidity=liquidity,
            round_up=True,
        )
        == 406
    )
