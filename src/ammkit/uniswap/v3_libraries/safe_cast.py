from ammkit.constants import (
    MAX_INT128,
    MAX_INT256,
    MAX_UINT128,
    MAX_UINT160,
    MIN_INT128,
    MIN_INT256,
)
from ammkit.exceptions import EVMRevertError

# Range checks matching the SafeCast library, which reverts if the value does not fit the type.
# ref: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/SafeCast.sol


def to_int128(x: int) -> int:
    if not (MIN_INT128 <= x <= MAX_INT128):
        raise EVMRevertError(error=f"{x} outside range of int128 values")
    return x


def to_int256(x: int) -> int:
    if not (MIN_INT256 <= x <= MAX_INT256):
        raise EVMRevertError(error=f"{x} outside range of int256 values")
    return x


def to_uint128(x: int) -> int:
    if not (0 <= x <= MAX_UINT128):
        raise EVMRevertError(error=f"{x} outside range of uint128 values")
    return x


def to_uint160(x: int) -> int:
    if not (0 <= x <= MAX_UINT160):
        raise EVMRevertError(error=f"{x} outside range of uint160 values")
    return x
