from ammkit.constants import MAX_INT128, MAX_UINT128, MIN_INT128
from ammkit.exceptions import EVMRevertError


def add_delta(x: int, y: int) -> int:
    """
    Add a signed liquidity delta to an unsigned liquidity value.

    The result is range-checked directly instead of relying on Solidity's casting behavior as in
    https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/LiquidityMath.sol. Reverts
    with "LS" on underflow and "LA" on overflow.
    """

    if not (0 <= x <= MAX_UINT128):
        raise EVMRevertError(error="x not a valid uint128")
    if not (MIN_INT128 <= y <= MAX_INT128):
        raise EVMRevertError(error="y not a valid int128")

    z = x + y
    if z < 0:
        raise EVMRevertError(error="LS")
    if z > MAX_UINT128:
        raise EVMRevertError(error="LA")
    return z
