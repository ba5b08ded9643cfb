from enum import Enum, IntEnum


class PoolVersion(IntEnum):
    V2 = 2
    V3 = 3
    V4 = 4


class DexKind(Enum):
    UNISWAP_V2 = "UniswapV2"
    UNISWAP_V3 = "UniswapV3"
    UNISWAP_V4 = "UniswapV4"
    PANCAKESWAP_V2 = "PancakeSwapV2"
    PANCAKESWAP_V3 = "PancakeSwapV3"

    @property
    def version(self) -> PoolVersion:
        match self:
            case DexKind.UNISWAP_V2 | DexKind.PANCAKESWAP_V2:
                return PoolVersion.V2
            case DexKind.UNISWAP_V3 | DexKind.PANCAKESWAP_V3:
                return PoolVersion.V3
            case DexKind.UNISWAP_V4:
                return PoolVersion.V4

    @property
    def is_v2(self) -> bool:
        return self.version is PoolVersion.V2

    @property
    def is_v3(self) -> bool:
        return self.version is PoolVersion.V3

    @property
    def is_v4(self) -> bool:
        return self.version is PoolVersion.V4


class FeeAmount(IntEnum):
    """
    Standard fee tiers, in pips (hundredths of a basis point).
    """

    LOWEST = 100
    LOW = 500
    MEDIUM = 3_000
    HIGH = 10_000


_TICK_SPACINGS: dict[int, int] = {
    FeeAmount.LOWEST: 1,
    FeeAmount.LOW: 10,
    FeeAmount.MEDIUM: 60,
    FeeAmount.HIGH: 200,
}


def tick_spacing_for_fee(fee: int) -> int:
    """
    Return the tick spacing enabled for a fee tier. Non-standard tiers get a spacing of one tick
    per 50 pips of fee, with a minimum of 1.
    """

    if fee < 0:
        raise ValueError(f"Invalid fee {fee}")
    return _TICK_SPACINGS.get(fee, max(1, fee // 50))
