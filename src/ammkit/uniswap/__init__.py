from . import v3_libraries
from .types import DexKind, FeeAmount, PoolVersion, tick_spacing_for_fee
from .v2_liquidity_pool import UniswapV2Pool
from .v2_types import UniswapV2PoolState
from .v3_liquidity_pool import UniswapV3Pool
from .v3_types import UniswapV3LiquidityAtTick, UniswapV3PoolState
from .v4_liquidity_pool import Hooks, UniswapV4Pool

type AnyUniswapPool = UniswapV2Pool | UniswapV3Pool | UniswapV4Pool

__all__ = (
    "AnyUniswapPool",
    "DexKind",
    "FeeAmount",
    "Hooks",
    "PoolVersion",
    "UniswapV2Pool",
    "UniswapV2PoolState",
    "UniswapV3LiquidityAtTick",
    "UniswapV3Pool",
    "UniswapV3PoolState",
    "UniswapV4Pool",
    "tick_spacing_for_fee",
    "v3_libraries",
)
