from typing import TYPE_CHECKING, Any

from ammkit.exceptions.base import (
    AmmError,
    InvalidState,
    NotFound,
    Underflow,
    UnsupportedPool,
)

if TYPE_CHECKING:
    from ammkit.uniswap.v4_liquidity_pool import Hooks


class LiquidityPoolError(AmmError):
    """
    Exception raised inside liquidity pool helpers.
    """


class NoPoolState(LiquidityPoolError, InvalidState):
    """
    Raised when a calculation needs pool state that has not been set.
    """

    def __init__(self, pool: str) -> None:
        self.pool = pool
        super().__init__(message=f"Pool {pool} has no state.")


class InvalidPoolState(LiquidityPoolError, InvalidState):
    """
    Raised when pool state fails a sanity check, e.g. a zero sqrt price.
    """


class TickNotFound(LiquidityPoolError, NotFound):
    """
    An initialized tick is missing from the liquidity map.
    """

    def __init__(self, tick: int) -> None:
        self.tick = tick
        super().__init__(message=f"Tick {tick} is unknown.")


class TokenNotInPool(LiquidityPoolError, NotFound):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(message=f"Token {token} is not held by this pool.")


class NoBaseCurrency(LiquidityPoolError, NotFound):
    """
    Raised when a price is requested from a pool that holds no base currency.
    """

    def __init__(self, pool: str) -> None:
        super().__init__(message=f"Pool {pool} has no base currency.")


class LiquidityUnderflow(LiquidityPoolError, Underflow):
    """
    Raised when crossing a tick would drive the active liquidity below zero, or above the uint128
    limit.
    """

    def __init__(self, tick: int, liquidity: int, liquidity_net: int) -> None:
        self.tick = tick
        self.liquidity = liquidity
        self.liquidity_net = liquidity_net
        super().__init__(
            message=f"Crossing tick {tick} with net liquidity {liquidity_net} puts active "
            f"liquidity {liquidity} out of range."
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.tick, self.liquidity, self.liquidity_net)


class ZeroSwapOutput(LiquidityPoolError, InvalidState):
    """
    Raised when a price quote would divide by a zero swap output.
    """

    def __init__(self, amount_in: int) -> None:
        self.amount_in = amount_in
        super().__init__(message=f"A swap of {amount_in} produced no output.")


class IncompleteSwap(LiquidityPoolError):
    """
    Raised if a swap calculation would not consume the input or deliver the requested output.
    """

    def __init__(self, amount_in: int, amount_out: int) -> None:
        self.amount_in = amount_in
        self.amount_out = amount_out
        super().__init__(message="Insufficient liquidity to swap for the requested amount.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.amount_in, self.amount_out)


class UnsupportedHooks(LiquidityPoolError, UnsupportedPool):
    def __init__(self, hooks: frozenset["Hooks"]) -> None:
        """
        Raised if a pool has an active hook that would invalidate a simulated swap.
        """

        self.hooks = hooks
        super().__init__(
            message="The pool has one or more hooks that alter swap behavior: "
            + ", ".join(sorted(hook.name for hook in hooks))
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.hooks,)
