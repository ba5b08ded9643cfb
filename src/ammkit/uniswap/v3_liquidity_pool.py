import dataclasses
from fractions import Fraction
from typing import ClassVar

from ammkit.constants import MAX_UINT256
from ammkit.erc20 import Erc20Token
from ammkit.exceptions import (
    AmmValueError,
    EVMRevertError,
    IncompleteSwap,
    InvalidPoolState,
    LiquidityUnderflow,
    TickNotFound,
)
from ammkit.logging import logger
from ammkit.types.aliases import Address, ChainId
from ammkit.uniswap.abstract_pool import AbstractUniswapPool
from ammkit.uniswap.types import DexKind, FeeAmount, PoolVersion, tick_spacing_for_fee
from ammkit.uniswap.v3_functions import exchange_rate_from_sqrt_price_x96
from ammkit.uniswap.v3_libraries.constants import Q128
from ammkit.uniswap.v3_libraries.full_math import muldiv
from ammkit.uniswap.v3_libraries.liquidity_math import add_delta
from ammkit.uniswap.v3_libraries.swap_math import compute_swap_step
from ammkit.uniswap.v3_libraries.tick import (
    get_fee_growth_inside,
    tick_spacing_to_max_liquidity_per_tick,
)
from ammkit.uniswap.v3_libraries.tick_bitmap import next_initialized_tick_within_one_word
from ammkit.uniswap.v3_libraries.tick_math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
)
from ammkit.uniswap.v3_types import LiquidityMap, UniswapV3PoolState, UniswapV3SwapResult


class UniswapV3Pool(AbstractUniswapPool):
    """
    A concentrated liquidity pool. Swaps are simulated by walking the initialized ticks in the
    direction of the swap, exactly as the pool contract does.
    """

    type PoolState = UniswapV3PoolState
    state_type = UniswapV3PoolState
    pool_version: ClassVar[PoolVersion] = PoolVersion.V3

    @dataclasses.dataclass(slots=True, eq=False)
    class SwapState:
        amount_specified_remaining: int
        amount_calculated: int
        sqrt_price_x96: int
        tick: int
        liquidity: int
        fee_growth_global_x128: int

        def __post_init__(self) -> None:
            assert self.liquidity >= 0

    @dataclasses.dataclass(slots=True, eq=False)
    class StepComputations:
        sqrt_price_start_x96: int = 0
        sqrt_price_next_x96: int = 0
        tick_next: int = 0
        initialized: bool = False
        amount_in: int = 0
        amount_out: int = 0
        fee_amount: int = 0

    def __init__(
        self,
        *,
        chain_id: ChainId,
        address: Address,
        token0: Erc20Token,
        token1: Erc20Token,
        fee: int = FeeAmount.MEDIUM,
        dex: DexKind = DexKind.UNISWAP_V3,
        tick_spacing: int | None = None,
        state: UniswapV3PoolState | None = None,
    ) -> None:
        if dex.version is not self.pool_version:
            raise AmmValueError(message=f"{dex} pools cannot be built as {type(self).__name__}.")

        self.tick_spacing = tick_spacing if tick_spacing is not None else tick_spacing_for_fee(fee)
        if self.tick_spacing < 1:
            raise AmmValueError(message=f"Invalid tick spacing {self.tick_spacing}.")

        super().__init__(
            chain_id=chain_id,
            address=address,
            token0=token0,
            token1=token1,
            fee=fee,
            dex=dex,
            state=state,
        )

    @property
    def state(self) -> UniswapV3PoolState | None:
        return self._state

    @property
    def liquidity(self) -> int:
        state: UniswapV3PoolState = self._require_state()
        return state.liquidity

    @property
    def sqrt_price_x96(self) -> int:
        state: UniswapV3PoolState = self._require_state()
        return state.sqrt_price_x96

    @property
    def tick(self) -> int:
        state: UniswapV3PoolState = self._require_state()
        return state.tick

    def check_state(self, state: UniswapV3PoolState) -> None:  # type: ignore[override]
        super().check_state(state)
        if state.tick_spacing != self.tick_spacing:
            raise InvalidPoolState(
                message=f"State tick spacing {state.tick_spacing} does not match pool tick "
                f"spacing {self.tick_spacing}."
            )

        max_liquidity = tick_spacing_to_max_liquidity_per_tick(state.tick_spacing)
        for tick, tick_info in state.tick_data.items():
            if tick_info.liquidity_gross > max_liquidity:
                raise InvalidPoolState(
                    message=f"Gross liquidity {tick_info.liquidity_gross} at tick {tick} exceeds "
                    f"the maximum of {max_liquidity} for tick spacing {state.tick_spacing}."
                )

    def _balances(self) -> tuple[int, int]:
        state: UniswapV3PoolState = self._require_state()
        return state.balance0, state.balance1

    def _before_swap(self) -> None:
        """
        Hook for subclasses to reject a swap before any calculation is done.
        """

    def _calculate_swap(
        self,
        state: UniswapV3PoolState,
        *,
        zero_for_one: bool,
        amount_specified: int,
        sqrt_price_limit_x96: int,
    ) -> UniswapV3SwapResult:
        """
        This function is ported and adapted from the UniswapV3Pool.sol contract at
        https://github.com/Uniswap/v3-core/blob/main/contracts/UniswapV3Pool.sol

        A positive `amount_specified` is an exact input, a negative value an exact output.

        The state is not modified. Ticks crossed during the swap are returned with their fee growth
        outside values flipped, for the caller to apply if the swap is committed.
        """

        if amount_specified == 0:  # pragma: no cover
            raise EVMRevertError(error="AS")

        if state.sqrt_price_x96 == 0:
            raise InvalidPoolState(message=f"Pool {self.address} has a zero sqrt price.")

        exact_input = amount_specified > 0

        if zero_for_one and not (MIN_SQRT_RATIO < sqrt_price_limit_x96 < state.sqrt_price_x96):
            raise EVMRevertError(error="SPL")

        if not zero_for_one and not (
            state.sqrt_price_x96 < sqrt_price_limit_x96 < MAX_SQRT_RATIO
        ):
            raise EVMRevertError(error="SPL")

        swap_state = self.SwapState(
            amount_specified_remaining=amount_specified,
            amount_calculated=0,
            sqrt_price_x96=state.sqrt_price_x96,
            tick=state.tick,
            liquidity=state.liquidity,
            fee_growth_global_x128=(
                state.fee_growth_global0_x128 if zero_for_one else state.fee_growth_global1_x128
            ),
        )
        crossed_ticks: LiquidityMap = {}

        step = self.StepComputations()

        while (
            swap_state.amount_specified_remaining != 0
            and swap_state.sqrt_price_x96 != sqrt_price_limit_x96
        ):
            step.sqrt_price_start_x96 = swap_state.sqrt_price_x96

            step.tick_next, step.initialized = next_initialized_tick_within_one_word(
                tick_bitmap=state.tick_bitmap,
                tick=swap_state.tick,
                tick_spacing=self.tick_spacing,
                less_than_or_equal=zero_for_one,
            )

            # Ensure that we do not overshoot the min/max tick, as the tick bitmap is not aware of
            # these bounds
            step.tick_next = (
                max(MIN_TICK, step.tick_next)  # descending ticks
                if zero_for_one
                else min(MAX_TICK, step.tick_next)  # ascending ticks
            )

            step.sqrt_price_next_x96 = get_sqrt_ratio_at_tick(step.tick_next)

            # compute values to swap to the target tick, price limit, or point where
            # the input/output amount is exhausted
            swap_state.sqrt_price_x96, step.amount_in, step.amount_out, step.fee_amount = (
                compute_swap_step(
                    sqrt_ratio_x96_current=swap_state.sqrt_price_x96,
                    sqrt_ratio_x96_target=(
                        sqrt_price_limit_x96
                        if (
                            (zero_for_one and step.sqrt_price_next_x96 < sqrt_price_limit_x96)
                            or (
                                not zero_for_one
                                and step.sqrt_price_next_x96 > sqrt_price_limit_x96
                            )
                        )
                        else step.sqrt_price_next_x96
                    ),
                    liquidity=swap_state.liquidity,
                    amount_remaining=swap_state.amount_specified_remaining,
                    fee_pips=self.fee,
                )
            )

            if exact_input:
                swap_state.amount_specified_remaining -= step.amount_in + step.fee_amount
                swap_state.amount_calculated -= step.amount_out
            else:
                swap_state.amount_specified_remaining += step.amount_out
                swap_state.amount_calculated += step.amount_in + step.fee_amount

            # update global fee tracker
            if swap_state.liquidity > 0:
                swap_state.fee_growth_global_x128 = (
                    swap_state.fee_growth_global_x128
                    + muldiv(step.fee_amount, Q128, swap_state.liquidity)
                ) & MAX_UINT256

            if swap_state.sqrt_price_x96 == step.sqrt_price_next_x96:
                # If the next tick is initialized, adjust the in-range liquidity
                if step.initialized:
                    try:
                        tick_info = state.tick_data[step.tick_next]
                    except KeyError:
                        raise TickNotFound(tick=step.tick_next) from None

                    # Only the accumulator of the input token is tracked through the swap
                    crossed_ticks[step.tick_next] = tick_info.model_copy(
                        update=(
                            {
                                "fee_growth_outside0_x128": (
                                    swap_state.fee_growth_global_x128
                                    - tick_info.fee_growth_outside0_x128
                                )
                                & MAX_UINT256
                            }
                            if zero_for_one
                            else {
                                "fee_growth_outside1_x128": (
                                    swap_state.fee_growth_global_x128
                                    - tick_info.fee_growth_outside1_x128
                                )
                                & MAX_UINT256
                            }
                        )
                    )

                    liquidity_net = (
                        -tick_info.liquidity_net if zero_for_one else tick_info.liquidity_net
                    )
                    try:
                        swap_state.liquidity = add_delta(swap_state.liquidity, liquidity_net)
                    except EVMRevertError:
                        raise LiquidityUnderflow(
                            tick=step.tick_next,
                            liquidity=swap_state.liquidity,
                            liquidity_net=liquidity_net,
                        ) from None

                swap_state.tick = step.tick_next - 1 if zero_for_one else step.tick_next

            elif swap_state.sqrt_price_x96 != step.sqrt_price_start_x96:
                # Recompute unless we're on a lower tick boundary (i.e. already transitioned ticks),
                # and haven't moved
                swap_state.tick = get_tick_at_sqrt_ratio(swap_state.sqrt_price_x96)

        amount0, amount1 = (
            (
                amount_specified - swap_state.amount_specified_remaining,
                swap_state.amount_calculated,
            )
            if zero_for_one == exact_input
            else (
                swap_state.amount_calculated,
                amount_specified - swap_state.amount_specified_remaining,
            )
        )

        return UniswapV3SwapResult(
            amount0=amount0,
            amount1=amount1,
            sqrt_price_x96=swap_state.sqrt_price_x96,
            liquidity=swap_state.liquidity,
            tick=swap_state.tick,
            fee_growth_global_x128=swap_state.fee_growth_global_x128,
            crossed_ticks=crossed_ticks,
        )

    def _exact_input_swap(
        self, token_in: Erc20Token, amount_in: int
    ) -> tuple[bool, UniswapV3PoolState, UniswapV3SwapResult | None]:
        self._before_swap()
        zero_for_one = self.zero_for_one(token_in)
        state: UniswapV3PoolState = self._require_state()

        if amount_in == 0:
            return zero_for_one, state, None
        if amount_in < 0:
            raise AmmValueError(message=f"Invalid swap amount {amount_in}.")

        return (
            zero_for_one,
            state,
            self._calculate_swap(
                state,
                zero_for_one=zero_for_one,
                amount_specified=amount_in,
                sqrt_price_limit_x96=(MIN_SQRT_RATIO + 1 if zero_for_one else MAX_SQRT_RATIO - 1),
            ),
        )

    def simulate_swap(self, token_in: Erc20Token, amount_in: int) -> int:
        zero_for_one, _, result = self._exact_input_swap(token_in, amount_in)
        if result is None:
            return 0
        return -result.amount1 if zero_for_one else -result.amount0

    def simulate_swap_mut(self, token_in: Erc20Token, amount_in: int) -> int:
        zero_for_one, state, result = self._exact_input_swap(token_in, amount_in)
        if result is None:
            return 0

        tick_data = dict(state.tick_data)
        tick_data.update(result.crossed_ticks)

        self._state = dataclasses.replace(
            state,
            liquidity=result.liquidity,
            sqrt_price_x96=result.sqrt_price_x96,
            tick=result.tick,
            tick_data=tick_data,
            fee_growth_global0_x128=(
                result.fee_growth_global_x128 if zero_for_one else state.fee_growth_global0_x128
            ),
            fee_growth_global1_x128=(
                state.fee_growth_global1_x128 if zero_for_one else result.fee_growth_global_x128
            ),
        )
        logger.debug(
            f"{self}: swapped {amount_in} {token_in}, tick {state.tick} -> {result.tick}, "
            f"crossed {len(result.crossed_ticks)} initialized ticks"
        )
        return -result.amount1 if zero_for_one else -result.amount0

    def simulate_exact_output_swap(self, token_out: Erc20Token, amount_out: int) -> int:
        """
        Calculate the input required to withdraw an exact amount of `token_out`, without modifying
        the pool. Raises `IncompleteSwap` if the pool cannot deliver the full amount.
        """

        self._before_swap()
        zero_for_one = not self.zero_for_one(token_out)
        state: UniswapV3PoolState = self._require_state()

        if amount_out == 0:
            return 0

        result = self._calculate_swap(
            state,
            zero_for_one=zero_for_one,
            amount_specified=-amount_out,
            sqrt_price_limit_x96=(MIN_SQRT_RATIO + 1 if zero_for_one else MAX_SQRT_RATIO - 1),
        )
        amount_in, amount_delivered = (
            (result.amount0, -result.amount1) if zero_for_one else (result.amount1, -result.amount0)
        )
        if amount_delivered < amount_out:
            raise IncompleteSwap(amount_in=amount_in, amount_out=amount_delivered)
        return amount_in

    def calculate_price(self, token_in: Erc20Token) -> float:
        """
        The spot exchange rate of `token_in`, in whole units of the other token, ignoring fees.
        """

        zero_for_one = self.zero_for_one(token_in)
        sqrt_price_x96 = self.sqrt_price_x96
        if sqrt_price_x96 == 0:
            raise InvalidPoolState(message=f"Pool {self.address} has a zero sqrt price.")

        # token1 per token0, in whole units
        price = exchange_rate_from_sqrt_price_x96(sqrt_price_x96) * Fraction(
            10**self.token0.decimals, 10**self.token1.decimals
        )
        return float(price if zero_for_one else 1 / price)

    def get_fee_growth_inside(self, tick_lower: int, tick_upper: int) -> tuple[int, int]:
        return get_fee_growth_inside(self._require_state(), tick_lower, tick_upper)
