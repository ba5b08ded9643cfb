import dataclasses

import pydantic

from ammkit.types.abstract import AbstractPoolState
from ammkit.validation.evm_values import ValidatedInt128, ValidatedUint128, ValidatedUint256

type BitmapWord = int
type Pip = int  # V3 pool fees are expressed in pips equaling one hundredth of 1%
type Liquidity = int
type SqrtPriceX96 = int
type Tick = int


class UniswapV3LiquidityAtTick(pydantic.BaseModel, frozen=True):
    liquidity_net: ValidatedInt128
    liquidity_gross: ValidatedUint128
    fee_growth_outside0_x128: ValidatedUint256 = 0
    fee_growth_outside1_x128: ValidatedUint256 = 0
    initialized: bool = True


type InitializedTickMap = dict[BitmapWord, int]
type LiquidityMap = dict[Tick, UniswapV3LiquidityAtTick]


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class UniswapV3PoolState(AbstractPoolState):
    """
    A snapshot of a concentrated liquidity pool. Hook-capable pools use the same snapshot, with
    the pool ID held in `address`.
    """

    liquidity: Liquidity
    sqrt_price_x96: SqrtPriceX96
    tick: Tick
    tick_spacing: int
    tick_bitmap: InitializedTickMap = dataclasses.field(default_factory=dict)
    tick_data: LiquidityMap = dataclasses.field(default_factory=dict)
    fee_growth_global0_x128: int = 0
    fee_growth_global1_x128: int = 0
    balance0: int = 0
    balance1: int = 0

    def __post_init__(self) -> None:
        if self.liquidity < 0:
            raise ValueError(f"Negative liquidity {self.liquidity}")
        if self.tick_spacing < 1:
            raise ValueError(f"Invalid tick spacing {self.tick_spacing}")


@dataclasses.dataclass(slots=True, frozen=True)
class UniswapV3SwapResult:
    """
    The outcome of a simulated swap and the pool values after it.

    A negative amount is sent to the swapper, a positive amount is deposited into the pool.
    """

    amount0: int
    amount1: int
    sqrt_price_x96: SqrtPriceX96
    liquidity: Liquidity
    tick: Tick
    fee_growth_global_x128: int
    crossed_ticks: LiquidityMap
