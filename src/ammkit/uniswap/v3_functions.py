from collections.abc import Sequence
from fractions import Fraction

from hexbytes import HexBytes

from ammkit.constants import MAX_UINT24

FEE_BYTES = 3


def encode_v3_path(path: Sequence[str | int]) -> bytes:
    """
    Encode a path of token addresses interleaved with fees into the close-packed `path` bytes used
    by the Uniswap V3 routers, e.g. [token_a, 500, token_b] -> 20 bytes + 3 bytes + 20 bytes.
    """

    if len(path) < 3 or len(path) % 2 != 1:
        raise ValueError("Invalid path.")

    encoded = b""
    for i, item in enumerate(path):
        match i % 2, item:
            case 0, str():
                encoded += HexBytes(item)
            case 1, int() if 0 <= item <= MAX_UINT24:
                encoded += item.to_bytes(FEE_BYTES, byteorder="big")
            case _:
                raise ValueError(f"Invalid path element {item!r} at position {i}.")
    return encoded


def exchange_rate_from_sqrt_price_x96(sqrt_price_x96: int) -> Fraction:
    # ref: https://blog.uniswap.org/uniswap-v3-math-primer
    return Fraction(sqrt_price_x96**2, 2**192)
