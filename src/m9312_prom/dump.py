"""
Octal Dump of ROM Words
=======================

Renders a word buffer as an octal listing with an ASCII gloss, eight words
per line:

    173000: 000102 012700 ... .B..
    173020: ...

Each line starts with the bus address of its first word, so addresses step
by 20 octal. Dumps from the historical m9312 tool stepped by 10 (origin
plus word index) and will not match this column. Words are shown
as 6-digit octal, then each word's high and low bytes as printable ASCII
(or '.'). The last line is padded with spaces so the gloss column stays
aligned.
"""

from typing import Sequence, TextIO
import logging

from m9312_prom.constants import BOOT_ORIGIN
from m9312_prom.errors import StreamError

logger = logging.getLogger(__name__)

WORDS_PER_LINE = 8

# Width of one " WWWWWW" word column
_WORD_COLUMN = 7


def _gloss_char(byte: int) -> str:
    if 0x20 <= byte <= 0x7E:
        return chr(byte)
    return "."


def format_dump_line(words: Sequence[int], address: int) -> str:
    """
    Format up to WORDS_PER_LINE words as one dump line (no newline).

    Args:
        words: The words on this line
        address: Bus address of the first word
    """
    octal = "".join(f" {word:06o}" for word in words)
    octal = octal.ljust(WORDS_PER_LINE * _WORD_COLUMN)
    gloss = "".join(_gloss_char(word >> 8) + _gloss_char(word & 0xFF) for word in words)
    gloss = gloss.ljust(WORDS_PER_LINE * 2)
    return f"{address:06o}:{octal} {gloss}"


def format_dump(words: Sequence[int], origin: int = BOOT_ORIGIN) -> list[str]:
    """
    Format a word buffer as dump lines.

    Args:
        words: 16-bit words, in address order
        origin: Bus address of the first word

    Returns:
        One string per line, without newlines
    """
    return [
        format_dump_line(words[i:i + WORDS_PER_LINE], origin + 2 * i)
        for i in range(0, len(words), WORDS_PER_LINE)
    ]


def render_dump(stream: TextIO, words: Sequence[int], origin: int = BOOT_ORIGIN) -> None:
    """
    Write the dump of a word buffer to a text stream.

    Raises:
        StreamError: If writing the stream fails
    """
    lines = format_dump(words, origin)
    try:
        for line in lines:
            stream.write(line + "\n")
    except OSError as e:
        raise StreamError(f"error writing dump: {e}") from e
    logger.debug("Dumped %d words at %06o", len(words), origin)
