"""
M9312 PROM Data Scrambling
==========================

The M9312 boot PROMs are 4 bits wide, so each 16-bit word is stored in four
consecutive PROM locations, low nibble first. On top of that split the
module's wiring applies two fixed transforms between the PROM outputs and
the Unibus data lines:

- Bits 0 and 8 are crossed over
- Bits 10, 11 and 12 are inverted (mask 0x1C00)

unscramble() turns the PROM contents as read by a programmer into the words
the processor sees; scramble() does the reverse for burning a new PROM. The
two are exact inverses of each other.

Example:
    >>> scramble_word(0o012700)
    (1, 12, 8, 0)
    >>> oct(unscramble_word((1, 12, 8, 0)))
    '0o12700'
"""

from typing import Sequence

from m9312_prom.constants import NIBBLES_PER_WORD, ROM_WORDS, SCRAMBLE_XOR, SWAP_KEEP_MASK
from m9312_prom.errors import BoundsError


def _swap_bits_0_8(value: int) -> int:
    return (value & SWAP_KEEP_MASK) | ((value & 0x0001) << 8) | ((value & 0x0100) >> 8)


def unscramble_word(nibbles: Sequence[int]) -> int:
    """
    Convert four PROM locations into the word seen on the bus.

    Only the low 4 bits of each location are used; the PROM has no
    outputs for the upper bits.

    Args:
        nibbles: Four PROM locations, lowest address first

    Returns:
        The 16-bit word
    """
    n0, n1, n2, n3 = (n & 0x0F for n in nibbles)
    raw = (n3 << 12) | (n2 << 8) | (n1 << 4) | n0
    return _swap_bits_0_8(raw) ^ SCRAMBLE_XOR


def scramble_word(word: int) -> tuple[int, int, int, int]:
    """
    Convert a word into the four PROM locations that produce it.

    Args:
        word: 16-bit word

    Returns:
        Four nibble values, lowest address first
    """
    raw = _swap_bits_0_8((word & 0xFFFF) ^ SCRAMBLE_XOR)
    return (raw & 0x0F, (raw >> 4) & 0x0F, (raw >> 8) & 0x0F, (raw >> 12) & 0x0F)


def unscramble(nibbles: Sequence[int], word_count: int = ROM_WORDS) -> list[int]:
    """
    Unscramble a PROM image into words.

    Args:
        nibbles: PROM contents, one location per element. Locations beyond
            the first 4 * word_count are ignored.
        word_count: Number of words to produce

    Returns:
        The words, in address order

    Raises:
        BoundsError: If the image holds fewer than 4 * word_count locations
    """
    needed = word_count * NIBBLES_PER_WORD
    if len(nibbles) < needed:
        raise BoundsError(
            f"PROM image has {len(nibbles)} locations, {needed} needed "
            f"for {word_count} words"
        )
    return [
        unscramble_word(nibbles[i:i + NIBBLES_PER_WORD])
        for i in range(0, needed, NIBBLES_PER_WORD)
    ]


def scramble(words: Sequence[int]) -> bytearray:
    """
    Scramble words into a PROM image.

    Args:
        words: 16-bit words, in address order

    Returns:
        PROM contents, four locations per word
    """
    image = bytearray()
    for word in words:
        image.extend(scramble_word(word))
    return image
