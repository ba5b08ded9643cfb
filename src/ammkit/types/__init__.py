from .abstract import AbstractLiquidityPool, AbstractPoolState
from .aliases import Address, BlockNumber, ChainId, Timestamp, UsdPrice

__all__ = (
    "AbstractLiquidityPool",
    "AbstractPoolState",
    "Address",
    "BlockNumber",
    "ChainId",
    "Timestamp",
    "UsdPrice",
)
