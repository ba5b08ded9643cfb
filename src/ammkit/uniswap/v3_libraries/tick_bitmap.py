from ammkit.exceptions import AmmValueError
from ammkit.uniswap.v3_libraries.bit_math import least_significant_bit, most_significant_bit

# ref: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/TickBitmap.sol

type TickBitmap = dict[int, int]


def position(tick: int) -> tuple[int, int]:
    """
    Computes the (word, bit) position in the tick initialization bitmap for a compressed tick,
    i.e. a tick already divided by the tick spacing.
    """
    return (
        tick >> 8,  # word_pos
        tick % 256,  # bit_pos
    )


def flip_tick(tick_bitmap: TickBitmap, tick: int, tick_spacing: int) -> None:
    """
    Flip the initialized state of a tick in place.
    """

    if tick % tick_spacing != 0:
        raise AmmValueError(message="Tick not correctly spaced!")

    word_pos, bit_pos = position(tick // tick_spacing)
    tick_bitmap[word_pos] = tick_bitmap.get(word_pos, 0) ^ (1 << bit_pos)


def next_initialized_tick_within_one_word(
    tick_bitmap: TickBitmap,
    tick: int,
    tick_spacing: int,
    less_than_or_equal: bool,
) -> tuple[int, bool]:
    """
    Find the next initialized tick contained in the same word as the tick that is either to the
    left (less than or equal to) or right (greater than) of the given tick.

    Returns the next tick and whether it is initialized. If no initialized tick is found, the word
    boundary is returned with `False`. Words absent from the bitmap are treated as empty.
    """

    # Python rounds down to negative infinity, so use it directly instead of the abs and modulo
    # implementation of the Solidity contract
    compressed = tick // tick_spacing

    if less_than_or_equal:
        word_pos, bit_pos = position(compressed)
        # all the 1s at or to the right of the current bit_pos
        masked = tick_bitmap.get(word_pos, 0) & ((1 << bit_pos) - 1 + (1 << bit_pos))

        if masked != 0:
            return (compressed - (bit_pos - most_significant_bit(masked))) * tick_spacing, True
        return (compressed - bit_pos) * tick_spacing, False

    # start from the word of the next tick, since the current tick state doesn't matter
    word_pos, bit_pos = position(compressed + 1)
    # all the 1s at or to the left of the bit_pos
    masked = tick_bitmap.get(word_pos, 0) & ~((1 << bit_pos) - 1)

    if masked != 0:
        return (compressed + 1 + (least_significant_bit(masked) - bit_pos)) * tick_spacing, True
    return (compressed + 1 + (255 - bit_pos)) * tick_spacing, False
