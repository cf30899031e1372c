"""
Conversion Pipelines
====================

The three conversions offered by the m9312 tool, each taking already
opened streams:

- **unscramble**: PROM hex file -> DEC absolute binary
- **scramble**: DEC absolute binary -> PROM hex file
- **dump**: PROM hex file -> octal dump

Each pipeline reads and transforms the whole input before writing any
output, so a malformed input never leaves a partial output behind in the
stream.
"""

from enum import Enum
from typing import BinaryIO, Callable, Optional, TextIO
import logging

from m9312_prom.config import ConversionConfig
from m9312_prom.dump import render_dump
from m9312_prom.formats.absbin import load_absolute_binary, write_absolute_binary
from m9312_prom.formats.hexrec import read_hex_records, write_hex_records
from m9312_prom.scramble import scramble, unscramble

logger = logging.getLogger(__name__)


class ConversionMode(Enum):
    """
    Conversion selected on the command line.

    Each value is (input file mode, output file mode).
    """
    UNSCRAMBLE = ("r", "wb")
    SCRAMBLE = ("rb", "w")
    DUMP = ("r", "w")

    @property
    def input_mode(self) -> str:
        return self.value[0]

    @property
    def output_mode(self) -> str:
        return self.value[1]

    def get_description(self) -> str:
        descriptions = {
            ConversionMode.UNSCRAMBLE: "unscramble PROM hex file into DEC binary",
            ConversionMode.SCRAMBLE: "scramble DEC binary file into PROM hex file",
            ConversionMode.DUMP: "unscramble PROM hex file into octal dump",
        }
        return descriptions[self]


def _read_hex_words(inf: TextIO, config: ConversionConfig) -> list[int]:
    nibbles = read_hex_records(inf, size=config.prom_bytes)
    return unscramble(nibbles, config.word_count)


def unscramble_hex_to_binary(
    inf: TextIO,
    outf: BinaryIO,
    config: Optional[ConversionConfig] = None,
) -> list[int]:
    """
    Convert a PROM hex file into a DEC absolute binary file.

    Returns:
        The unscrambled words
    """
    config = config or ConversionConfig()
    words = _read_hex_words(inf, config)
    write_absolute_binary(
        outf,
        words,
        origin=config.origin,
        transfer_address=config.effective_transfer_address,
        padding=config.padding,
    )
    logger.info("Unscrambled %d words at %06o", len(words), config.origin)
    return words


def scramble_binary_to_hex(
    inf: BinaryIO,
    outf: TextIO,
    config: Optional[ConversionConfig] = None,
) -> bytearray:
    """
    Convert a DEC absolute binary file into a PROM hex file.

    The whole PROM is written: the scrambled words fill the lower locations
    and the unused upper half is zero.

    Returns:
        The PROM image written
    """
    config = config or ConversionConfig()
    image = load_absolute_binary(inf, config.word_count)
    if image.origin != config.origin:
        logger.warning(
            "Binary file origin %06o differs from expected %06o",
            image.origin, config.origin,
        )

    prom = bytearray(config.prom_bytes)
    nibbles = scramble(image.words)
    prom[:len(nibbles)] = nibbles

    write_hex_records(outf, prom, base_address=0)
    logger.info("Scrambled %d words into %d PROM locations", len(image.words), len(prom))
    return prom


def dump_hex(
    inf: TextIO,
    outf: TextIO,
    config: Optional[ConversionConfig] = None,
) -> list[int]:
    """
    Unscramble a PROM hex file and write an octal dump of its words.

    Returns:
        The unscrambled words
    """
    config = config or ConversionConfig()
    words = _read_hex_words(inf, config)
    render_dump(outf, words, origin=config.origin)
    return words


_PIPELINES: dict[ConversionMode, Callable] = {
    ConversionMode.UNSCRAMBLE: unscramble_hex_to_binary,
    ConversionMode.SCRAMBLE: scramble_binary_to_hex,
    ConversionMode.DUMP: dump_hex,
}


def run_conversion(mode: ConversionMode, inf, outf, config: Optional[ConversionConfig] = None):
    """Run the pipeline for `mode` on already opened streams."""
    logger.debug("Running %s", mode.get_description())
    return _PIPELINES[mode](inf, outf, config)
