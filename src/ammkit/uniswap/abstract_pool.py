from typing import TYPE_CHECKING, Any, ClassVar

from ammkit.config import settings as default_settings
from ammkit.erc20 import Erc20Token, base_currency_symbol, is_base_currency
from ammkit.exceptions import (
    AmmValueError,
    NoBaseCurrency,
    NoPoolState,
    TokenNotInPool,
    ZeroSwapOutput,
)
from ammkit.types.abstract import AbstractLiquidityPool, AbstractPoolState
from ammkit.types.aliases import Address, ChainId, UsdPrice
from ammkit.uniswap.types import DexKind

if TYPE_CHECKING:
    from ammkit.config import Settings

type PoolKey = tuple[Any, ...]


class AbstractUniswapPool(AbstractLiquidityPool):
    """
    Attributes and helpers common to every Uniswap-style pool.

    The tokens are held in canonical order, with `token0` sorting below `token1`. State is never
    edited in place, each update replaces the previous snapshot.
    """

    state_type: ClassVar[type[AbstractPoolState]] = AbstractPoolState

    fee: int
    dex: DexKind
    token0: Erc20Token
    token1: Erc20Token
    _state: AbstractPoolState | None

    def __init__(
        self,
        *,
        chain_id: ChainId,
        address: Address,
        token0: Erc20Token,
        token1: Erc20Token,
        fee: int,
        dex: DexKind,
        state: AbstractPoolState | None = None,
    ) -> None:
        if token0 == token1:
            raise AmmValueError(message="A pool must hold two different tokens.")
        if token0.chain_id != chain_id or token1.chain_id != chain_id:
            raise AmmValueError(message=f"Pool tokens must be deployed on chain {chain_id}.")
        if fee < 0:
            raise AmmValueError(message=f"Invalid fee {fee}.")

        self.chain_id = chain_id
        self.address = address
        self.token0, self.token1 = sorted((token0, token1))
        self.fee = fee
        self.dex = dex
        self.name = f"{self.token0.symbol}-{self.token1.symbol} ({dex.value}, {fee / 10_000:.2f}%)"
        self._state = None
        if state is not None:
            self.update_state(state)

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"{type(self).__name__}(address={self.address}, chain_id={self.chain_id}, "
            f"name={self.name})"
        )

    @property
    def state(self) -> AbstractPoolState | None:
        return self._state

    @property
    def tokens(self) -> tuple[Erc20Token, Erc20Token]:
        return self.token0, self.token1

    @property
    def key(self) -> PoolKey:
        """
        The registry key for this pool.
        """

        return self.chain_id, self.dex, self.fee, self.token0.address, self.token1.address

    def _require_state(self) -> Any:
        if self._state is None:
            raise NoPoolState(pool=self.address)
        return self._state

    def check_state(self, state: AbstractPoolState) -> None:
        if not isinstance(state, self.state_type):
            raise AmmValueError(
                message=f"Expected {self.state_type.__name__}, got {type(state).__name__}."
            )
        if state.address.lower() != self.address.lower():
            raise AmmValueError(
                message=f"State for {state.address} cannot be applied to pool {self.address}."
            )

    def update_state(self, state: AbstractPoolState) -> None:
        """
        Replace the pool state with a new snapshot.
        """

        self.check_state(state)
        self._state = state

    def zero_for_one(self, token_in: Erc20Token) -> bool:
        if token_in == self.token0:
            return True
        if token_in == self.token1:
            return False
        raise TokenNotInPool(token=token_in.address)

    @property
    def has_base_token(self) -> bool:
        return is_base_currency(self.token0) or is_base_currency(self.token1)

    @property
    def base_token(self) -> Erc20Token:
        """
        The base currency of the pool, preferring token0 when both tokens are base currencies.
        """

        if is_base_currency(self.token0):
            return self.token0
        if is_base_currency(self.token1):
            return self.token1
        raise NoBaseCurrency(pool=self.address)

    @property
    def quote_token(self) -> Erc20Token:
        return self.token1 if self.base_token == self.token0 else self.token0

    def _balances(self) -> tuple[int, int]:
        """
        Token balances (token0, token1) held by the pool in the current state.
        """

        raise NotImplementedError

    def base_balance(self) -> int:
        balance0, balance1 = self._balances()
        return balance0 if self.base_token == self.token0 else balance1

    def has_sufficient_liquidity(self, settings: "Settings | None" = None) -> bool:
        """
        Check whether the base-side balance meets the configured minimum for its base currency.

        Pools without state, or without a base currency, are never sufficiently liquid.
        """

        if settings is None:
            settings = default_settings

        if self._state is None or not self.has_base_token:
            return False

        base_token = self.base_token
        symbol = base_currency_symbol(base_token)
        assert symbol is not None

        threshold = settings.liquidity.threshold(symbol, v4=self.dex.is_v4)
        if threshold is None:
            return False
        return self.base_balance() >= threshold * 10**base_token.decimals

    def simulate_swap(self, token_in: Erc20Token, amount_in: int) -> int:
        """
        Calculate the output of an exact input swap against the current state, without modifying
        the pool.
        """

        raise NotImplementedError

    def simulate_swap_mut(self, token_in: Erc20Token, amount_in: int) -> int:
        """
        Calculate the output of an exact input swap and apply the resulting state to the pool.
        """

        raise NotImplementedError

    def quote_price(self, base_usd_price: UsdPrice) -> UsdPrice:
        """
        Derive the USD price of the quote token from the USD price of the base token, by simulating
        a swap of one whole base token.
        """

        base_token = self.base_token
        quote_token = self.quote_token

        if base_usd_price == 0:
            return 0.0

        amount_in = 10**base_token.decimals
        amount_out = self.simulate_swap(base_token, amount_in)
        if amount_out == 0:
            raise ZeroSwapOutput(amount_in=amount_in)

        return base_usd_price / (amount_out / 10**quote_token.decimals)
