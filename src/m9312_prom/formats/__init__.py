"""
File Formats for M9312 Boot PROM Images
=======================================

This package holds the codecs for the two binary-carrying file formats:

- **hexrec**: hex-record text files, as read and written by PROM
  programmers. Holds the physical PROM contents, one 4-bit location
  per byte.
- **absbin**: DEC absolute binary files, as loaded by the PDP-11
  Absolute Loader. Holds the logical 16-bit words.
- **checksum**: the 8-bit additive checksum shared by both formats.

Reference
---------
- M9312 Bootstrap/Terminator Module Technical Manual (EK-M9312-TM)
- PDP-11 Paper Tape Software Handbook, Absolute Loader chapter
"""

from m9312_prom.formats.checksum import (
    byte_sum,
    checksum_byte,
    verify_checksum,
)
from m9312_prom.formats.hexrec import (
    HexRecord,
    RecordType,
    format_hex_record,
    parse_hex_record,
    read_hex_records,
    write_hex_records,
)
from m9312_prom.formats.absbin import (
    BinaryPadding,
    BinaryRecord,
    LoadImage,
    encode_binary_record,
    iter_binary_records,
    load_absolute_binary,
    read_absolute_binary,
    write_absolute_binary,
)

__all__ = [
    # Checksum
    "byte_sum",
    "checksum_byte",
    "verify_checksum",
    # Hex records
    "HexRecord",
    "RecordType",
    "format_hex_record",
    "parse_hex_record",
    "read_hex_records",
    "write_hex_records",
    # Absolute binary
    "BinaryPadding",
    "BinaryRecord",
    "LoadImage",
    "encode_binary_record",
    "iter_binary_records",
    "load_absolute_binary",
    "read_absolute_binary",
    "write_absolute_binary",
]
