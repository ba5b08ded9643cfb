from typing import TYPE_CHECKING

from ammkit.constants import MAX_UINT128, MAX_UINT256
from ammkit.exceptions import TickNotFound
from ammkit.functions import evm_divide
from ammkit.uniswap.v3_libraries.tick_math import MAX_TICK, MIN_TICK

if TYPE_CHECKING:
    from ammkit.uniswap.v3_types import UniswapV3PoolState

# ref: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/Tick.sol


def tick_spacing_to_max_liquidity_per_tick(tick_spacing: int) -> int:
    min_tick = evm_divide(MIN_TICK, tick_spacing) * tick_spacing
    max_tick = evm_divide(MAX_TICK, tick_spacing) * tick_spacing
    num_ticks = (max_tick - min_tick) // tick_spacing + 1
    return MAX_UINT128 // num_ticks


def get_fee_growth_inside(
    state: "UniswapV3PoolState",
    tick_lower: int,
    tick_upper: int,
) -> tuple[int, int]:
    """
    Retrieve the all-time fee growth per unit of liquidity inside a position's tick boundaries,
    as a (token0, token1) pair of Q128 values.

    The accumulators are uint256 values that are allowed to overflow, so the subtractions wrap.
    """

    try:
        lower = state.tick_data[tick_lower]
        upper = state.tick_data[tick_upper]
    except KeyError as exc:
        raise TickNotFound(exc.args[0]) from None

    global0 = state.fee_growth_global0_x128
    global1 = state.fee_growth_global1_x128

    # fee growth below the lower boundary
    if state.tick >= tick_lower:
        below0 = lower.fee_growth_outside0_x128
        below1 = lower.fee_growth_outside1_x128
    else:
        below0 = global0 - lower.fee_growth_outside0_x128
        below1 = global1 - lower.fee_growth_outside1_x128

    # fee growth above the upper boundary
    if state.tick < tick_upper:
        above0 = upper.fee_growth_outside0_x128
        above1 = upper.fee_growth_outside1_x128
    else:
        above0 = global0 - upper.fee_growth_outside0_x128
        above1 = global1 - upper.fee_growth_outside1_x128

    return (
        (global0 - below0 - above0) & MAX_UINT256,
        (global1 - below1 - above1) & MAX_UINT256,
    )
