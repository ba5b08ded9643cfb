from .config import settings
from .functions import get_checksum_address
from .logging import logger

# isort: split

from .erc20 import Erc20Token, NativeCurrency
from .prices import calculate_prices
from .registry import PoolRegistry
from .sync import PoolStateProvider, fetch_state, synchronize, update, update_base_token_prices
from .transaction import Permit2Allowance, SwapExecuteParams, SwapStep, encode_swap
from .uniswap import (
    DexKind,
    PoolVersion,
    UniswapV2Pool,
    UniswapV2PoolState,
    UniswapV3LiquidityAtTick,
    UniswapV3Pool,
    UniswapV3PoolState,
    UniswapV4Pool,
)

from . import (  # isort: skip
    constants,
    erc20,
    exceptions,
    registry,
    transaction,
    uniswap,
    validation,
)

__all__ = (
    "DexKind",
    "Erc20Token",
    "NativeCurrency",
    "Permit2Allowance",
    "PoolRegistry",
    "PoolStateProvider",
    "PoolVersion",
    "SwapExecuteParams",
    "SwapStep",
    "UniswapV2Pool",
    "UniswapV2PoolState",
    "UniswapV3LiquidityAtTick",
    "UniswapV3Pool",
    "UniswapV3PoolState",
    "UniswapV4Pool",
    "calculate_prices",
    "constants",
    "encode_swap",
    "erc20",
    "exceptions",
    "fetch_state",
    "get_checksum_address",
    "logger",
    "registry",
    "settings",
    "synchronize",
    "transaction",
    "uniswap",
    "update",
    "update_base_token_prices",
    "validation",
)
