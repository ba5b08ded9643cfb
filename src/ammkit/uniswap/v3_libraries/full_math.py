from ammkit.constants import MAX_UINT256
from ammkit.exceptions import EVMRevertError

# ref: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/FullMath.sol


def _check_uint256(**values: int) -> None:
    for name, value in values.items():
        if not (0 <= value <= MAX_UINT256):
            raise EVMRevertError(error=f"Invalid value for {name}.")


def mulmod(x: int, y: int, k: int) -> int:
    if k == 0:
        raise EVMRevertError(error="division by zero")
    return (x * y) % k


def muldiv(a: int, b: int, denominator: int) -> int:
    """
    Calculate floor(a * b / denominator).

    The Solidity implementation avoids overflowing the 512-bit intermediate product. Python
    integers have arbitrary precision, so only the operand and result ranges are checked.
    """

    _check_uint256(a=a, b=b, denominator=denominator)

    if denominator == 0:
        raise EVMRevertError(error="DIVISION BY ZERO")

    result = (a * b) // denominator
    if result > MAX_UINT256:
        raise EVMRevertError(error="Invalid result, does not fit in uint256")
    return result


def muldiv_rounding_up(a: int, b: int, denominator: int) -> int:
    """
    Calculate ceil(a * b / denominator).
    """

    result = muldiv(a, b, denominator)
    if mulmod(a, b, denominator) == 0:
        return result
    if result == MAX_UINT256:
        raise EVMRevertError(error="Result overflows uint256 after rounding up")
    return result + 1
