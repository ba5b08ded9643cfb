import dataclasses

from ammkit.types.abstract import AbstractPoolState
from ammkit.types.aliases import Timestamp


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class UniswapV2PoolState(AbstractPoolState):
    reserves_token0: int
    reserves_token1: int
    timestamp: Timestamp = 0
