"""
M9312 PROM Tools - Boot PROM Converter for the DEC M9312 Module
===============================================================

This package converts the boot PROMs of the DEC M9312 Bootstrap/Terminator
module between three representations:

- PROM programmer hex-record files, holding the physical 4-bit PROM
  locations
- DEC absolute binary files, holding the 64 words of boot code as the
  PDP-11 sees them at 173000
- Octal dumps with an ASCII gloss, for inspection

The M9312 stores each 16-bit word in four consecutive locations of a
512 x 4 PROM, with bits 0 and 8 crossed over and bits 10-12 inverted by
the module's wiring. Conversion applies or reverses this scrambling.

Main Components
---------------
- **formats.hexrec**: hex-record reader and writer
- **formats.absbin**: absolute binary reader and writer
- **scramble**: PROM location <-> word transform
- **dump**: octal dump formatter
- **convert**: the three conversion pipelines
- **cli**: the m9312 command-line tool

Quick Start
-----------
Unscramble a PROM image:
    >>> from m9312_prom import read_hex_records, unscramble
    >>> with open("23-751a9.hex") as f:
    ...     words = unscramble(read_hex_records(f))

Or use the command-line tool:
    $ m9312 -u 23-751a9.hex dl.bin
    $ m9312 -d 23-751a9.hex -

Version History
---------------
1.0.0 - Initial release with unscramble, scramble and dump conversions
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from m9312_prom.constants import (
    BOOT_ORIGIN,
    PROM_BYTES,
    ROM_NIBBLES,
    ROM_WORDS,
    SCRAMBLE_XOR,
)
from m9312_prom.errors import (
    PromError,
    RecordLocation,
    FormatError,
    FormatSyntaxError,
    ChecksumMismatchError,
    RecordSizeError,
    BoundsError,
    StreamError,
)
from m9312_prom.formats import (
    HexRecord,
    RecordType,
    parse_hex_record,
    read_hex_records,
    write_hex_records,
    BinaryPadding,
    BinaryRecord,
    LoadImage,
    iter_binary_records,
    load_absolute_binary,
    read_absolute_binary,
    write_absolute_binary,
)
from m9312_prom.scramble import (
    scramble,
    scramble_word,
    unscramble,
    unscramble_word,
)
from m9312_prom.dump import format_dump, render_dump
from m9312_prom.config import ConversionConfig, parse_address
from m9312_prom.convert import (
    ConversionMode,
    dump_hex,
    run_conversion,
    scramble_binary_to_hex,
    unscramble_hex_to_binary,
)

__all__ = [
    # Version info
    "__version__",
    # Constants
    "BOOT_ORIGIN",
    "PROM_BYTES",
    "ROM_NIBBLES",
    "ROM_WORDS",
    "SCRAMBLE_XOR",
    # Exception hierarchy
    "PromError",
    "RecordLocation",
    "FormatError",
    "FormatSyntaxError",
    "ChecksumMismatchError",
    "RecordSizeError",
    "BoundsError",
    "StreamError",
    # Hex records
    "HexRecord",
    "RecordType",
    "parse_hex_record",
    "read_hex_records",
    "write_hex_records",
    # Absolute binary
    "BinaryPadding",
    "BinaryRecord",
    "LoadImage",
    "iter_binary_records",
    "load_absolute_binary",
    "read_absolute_binary",
    "write_absolute_binary",
    # Scrambling
    "scramble",
    "scramble_word",
    "unscramble",
    "unscramble_word",
    # Dump
    "format_dump",
    "render_dump",
    # Configuration and pipelines
    "ConversionConfig",
    "parse_address",
    "ConversionMode",
    "dump_hex",
    "run_conversion",
    "scramble_binary_to_hex",
    "unscramble_hex_to_binary",
]
