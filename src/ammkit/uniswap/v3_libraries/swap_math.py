from ammkit.uniswap.v3_libraries import full_math, sqrt_price_math
from ammkit.uniswap.v3_libraries.constants import FEE_DENOMINATOR

type SqrtPriceX96 = int
type AmountIn = int
type AmountOut = int
type FeeTaken = int


def compute_swap_step(
    sqrt_ratio_x96_current: int,
    sqrt_ratio_x96_target: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int,
) -> tuple[SqrtPriceX96, AmountIn, AmountOut, FeeTaken]:
    """
    Compute the result of swapping some amount in or out, given the parameters of the swap.

    A positive `amount_remaining` is an exact input, a negative value an exact output. Returns the
    price after the step, the input consumed (without fee), the output produced, and the fee taken.

    ref: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/SwapMath.sol
    """

    assert liquidity >= 0

    zero_for_one = sqrt_ratio_x96_current >= sqrt_ratio_x96_target
    exact_in = amount_remaining >= 0

    def amount_in_between(price_a: int, price_b: int) -> int:
        return (
            sqrt_price_math.get_amount0_delta(price_a, price_b, liquidity, True)
            if zero_for_one
            else sqrt_price_math.get_amount1_delta(price_a, price_b, liquidity, True)
        )

    def amount_out_between(price_a: int, price_b: int) -> int:
        return (
            sqrt_price_math.get_amount1_delta(price_a, price_b, liquidity, False)
            if zero_for_one
            else sqrt_price_math.get_amount0_delta(price_a, price_b, liquidity, False)
        )

    amount_in = amount_out = 0
    if exact_in:
        amount_remaining_less_fee = full_math.muldiv(
            amount_remaining, FEE_DENOMINATOR - fee_pips, FEE_DENOMINATOR
        )
        amount_in = amount_in_between(sqrt_ratio_x96_target, sqrt_ratio_x96_current)
        sqrt_ratio_x96_next = (
            sqrt_ratio_x96_target
            if amount_remaining_less_fee >= amount_in
            else sqrt_price_math.get_next_sqrt_price_from_input(
                sqrt_price_x96=sqrt_ratio_x96_current,
                liquidity=liquidity,
                amount_in=amount_remaining_less_fee,
                zero_for_one=zero_for_one,
            )
        )
    else:
        amount_out = amount_out_between(sqrt_ratio_x96_target, sqrt_ratio_x96_current)
        sqrt_ratio_x96_next = (
            sqrt_ratio_x96_target
            if -amount_remaining >= amount_out
            else sqrt_price_math.get_next_sqrt_price_from_output(
                sqrt_price_x96=sqrt_ratio_x96_current,
                liquidity=liquidity,
                amount_out=-amount_remaining,
                zero_for_one=zero_for_one,
            )
        )

    reached_target = sqrt_ratio_x96_target == sqrt_ratio_x96_next

    if not (reached_target and exact_in):
        amount_in = amount_in_between(sqrt_ratio_x96_next, sqrt_ratio_x96_current)
    if not (reached_target and not exact_in):
        amount_out = amount_out_between(sqrt_ratio_x96_next, sqrt_ratio_x96_current)

    # cap the output amount to not exceed the remaining output amount
    if not exact_in and amount_out > -amount_remaining:
        amount_out = -amount_remaining

    if exact_in and not reached_target:
        # the target was not reached, so the remainder of the maximum input is taken as fee
        fee_amount = amount_remaining - amount_in
    else:
        fee_amount = full_math.muldiv_rounding_up(amount_in, fee_pips, FEE_DENOMINATOR - fee_pips)

    return sqrt_ratio_x96_next, amount_in, amount_out, fee_amount
