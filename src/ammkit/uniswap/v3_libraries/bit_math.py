from ammkit.constants import MAX_UINT256
from ammkit.exceptions import EVMRevertError

# Adapted from the Uniswap V3 BitMath.sol library.
# Reference: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/BitMath.sol


def _check_uint256(number: int) -> None:
    if number <= 0:
        raise EVMRevertError(error="required: number > 0")
    if number > MAX_UINT256:
        raise EVMRevertError(error="required: number <= max(uint256)")


def least_significant_bit(number: int) -> int:
    """
    Find the index of the least significant set bit.

    Isolating the lowest set bit with `number & -number` leaves a power of two, whose bit length
    locates it directly instead of the binary search used by the Solidity contract.
    """

    _check_uint256(number)
    return (number & -number).bit_length() - 1


def most_significant_bit(number: int) -> int:
    """
    Find the index of the most significant set bit.
    """

    _check_uint256(number)
    return number.bit_length() - 1
