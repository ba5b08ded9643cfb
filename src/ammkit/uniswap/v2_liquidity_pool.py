import dataclasses
from fractions import Fraction

from ammkit.erc20 import Erc20Token
from ammkit.exceptions import AmmValueError, IncompleteSwap, InvalidPoolState
from ammkit.logging import logger
from ammkit.types.aliases import Address, ChainId
from ammkit.uniswap.abstract_pool import AbstractUniswapPool
from ammkit.uniswap.types import DexKind, FeeAmount
from ammkit.uniswap.v2_functions import (
    constant_product_calc_exact_in,
    constant_product_calc_exact_out,
)
from ammkit.uniswap.v2_types import UniswapV2PoolState
from ammkit.uniswap.v3_libraries.constants import FEE_DENOMINATOR


class UniswapV2Pool(AbstractUniswapPool):
    """
    A constant product (x*y=k) pool holding reserves of two tokens.
    """

    state_type = UniswapV2PoolState

    def __init__(
        self,
        *,
        chain_id: ChainId,
        address: Address,
        token0: Erc20Token,
        token1: Erc20Token,
        fee: int = FeeAmount.MEDIUM,
        dex: DexKind = DexKind.UNISWAP_V2,
        state: UniswapV2PoolState | None = None,
    ) -> None:
        if not dex.is_v2:
            raise AmmValueError(message=f"{dex} is not a reserve pool exchange.")
        super().__init__(
            chain_id=chain_id,
            address=address,
            token0=token0,
            token1=token1,
            fee=fee,
            dex=dex,
            state=state,
        )
        self.fee_fraction = Fraction(fee, FEE_DENOMINATOR)

    @property
    def state(self) -> UniswapV2PoolState | None:
        return self._state

    @property
    def reserves_token0(self) -> int:
        state: UniswapV2PoolState = self._require_state()
        return state.reserves_token0

    @property
    def reserves_token1(self) -> int:
        state: UniswapV2PoolState = self._require_state()
        return state.reserves_token1

    def _balances(self) -> tuple[int, int]:
        state: UniswapV2PoolState = self._require_state()
        return state.reserves_token0, state.reserves_token1

    def _reserves_for_direction(self, token_in: Erc20Token) -> tuple[bool, int, int]:
        zero_for_one = self.zero_for_one(token_in)
        state: UniswapV2PoolState = self._require_state()
        reserves_in, reserves_out = (
            (state.reserves_token0, state.reserves_token1)
            if zero_for_one
            else (state.reserves_token1, state.reserves_token0)
        )
        return zero_for_one, reserves_in, reserves_out

    def simulate_swap(self, token_in: Erc20Token, amount_in: int) -> int:
        _, reserves_in, reserves_out = self._reserves_for_direction(token_in)
        if amount_in == 0:
            return 0
        if amount_in < 0:
            raise AmmValueError(message=f"Invalid swap amount {amount_in}.")

        return constant_product_calc_exact_in(
            amount_in=amount_in,
            reserves_in=reserves_in,
            reserves_out=reserves_out,
            fee=self.fee_fraction,
        )

    def simulate_swap_mut(self, token_in: Erc20Token, amount_in: int) -> int:
        zero_for_one, reserves_in, reserves_out = self._reserves_for_direction(token_in)
        amount_out = self.simulate_swap(token_in, amount_in)
        if amount_in == 0:
            return 0

        reserves_in += amount_in
        reserves_out -= amount_out
        state: UniswapV2PoolState = self._require_state()
        self._state = dataclasses.replace(
            state,
            reserves_token0=reserves_in if zero_for_one else reserves_out,
            reserves_token1=reserves_out if zero_for_one else reserves_in,
        )
        logger.debug(f"{self}: swapped {amount_in} {token_in} for {amount_out}")
        return amount_out

    def simulate_exact_output_swap(self, token_out: Erc20Token, amount_out: int) -> int:
        """
        Calculate the input required to withdraw an exact amount of `token_out`.
        """

        zero_for_one = not self.zero_for_one(token_out)
        state: UniswapV2PoolState = self._require_state()
        reserves_in, reserves_out = (
            (state.reserves_token0, state.reserves_token1)
            if zero_for_one
            else (state.reserves_token1, state.reserves_token0)
        )
        if amount_out == 0:
            return 0
        if amount_out >= reserves_out:
            raise IncompleteSwap(amount_in=0, amount_out=reserves_out)

        return constant_product_calc_exact_out(
            amount_out=amount_out,
            reserves_in=reserves_in,
            reserves_out=reserves_out,
            fee=self.fee_fraction,
        )

    def calculate_price(self, token_in: Erc20Token) -> float:
        """
        The spot exchange rate of `token_in`, in whole units of the other token, ignoring fees.
        """

        _, reserves_in, reserves_out = self._reserves_for_direction(token_in)
        if reserves_in == 0 or reserves_out == 0:
            raise InvalidPoolState(message=f"Pool {self.address} has an empty reserve.")

        token_out = self.token1 if token_in == self.token0 else self.token0
        return (reserves_out / 10**token_out.decimals) / (reserves_in / 10**token_in.decimals)
