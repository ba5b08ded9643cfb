from ammkit.exceptions.base import (
    AmmError,
    AmmTypeError,
    AmmValueError,
    InvalidState,
    NotFound,
    Underflow,
    UnsupportedPool,
    UpstreamFailure,
)
from ammkit.exceptions.evm import EVMRevertError
from ammkit.exceptions.fetching import BatchFetchError, FetchingError, SyncFailed
from ammkit.exceptions.liquidity_pool import (
    IncompleteSwap,
    InvalidPoolState,
    LiquidityPoolError,
    LiquidityUnderflow,
    NoBaseCurrency,
    NoPoolState,
    TickNotFound,
    TokenNotInPool,
    UnsupportedHooks,
    ZeroSwapOutput,
)
from ammkit.exceptions.registry import PoolNotFound, RegistryError
from ammkit.exceptions.router import InvalidRoute, RouterError

from . import evm, fetching, liquidity_pool, registry, router

__all__ = (
    "AmmError",
    "AmmTypeError",
    "AmmValueError",
    "BatchFetchError",
    "EVMRevertError",
    "FetchingError",
    "IncompleteSwap",
    "InvalidPoolState",
    "InvalidRoute",
    "InvalidState",
    "LiquidityPoolError",
    "LiquidityUnderflow",
    "NoBaseCurrency",
    "NoPoolState",
    "NotFound",
    "PoolNotFound",
    "RegistryError",
    "RouterError",
    "SyncFailed",
    "TickNotFound",
    "TokenNotInPool",
    "Underflow",
    "UnsupportedHooks",
    "UnsupportedPool",
    "UpstreamFailure",
    "ZeroSwapOutput",
    "evm",
    "fetching",
    "liquidity_pool",
    "registry",
    "router",
)
