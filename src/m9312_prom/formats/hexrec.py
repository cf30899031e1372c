"""
Hex Record Files
================

This module reads and writes the textual hex-record files produced and
consumed by PROM programmers (Intel HEX style records).

Record Format
-------------
Each record is one line:

    :BBAAAATTDD...DDCC

- BB: byte count (one hex pair)
- AAAA: big-endian load address (two hex pairs)
- TT: record type (00 = data, 01 = end of file)
- DD: BB payload bytes
- CC: checksum, the two's complement of the sum of all preceding bytes

Hex digits are case-insensitive. Lines that do not start with ':' are
ignored, so files carrying comments or programmer banners still load.
Record types other than data and end of file are skipped.

Usage
-----
    >>> with open("23-751a9.hex") as f:
    ...     nibbles = read_hex_records(f)
    >>> with open("out.hex", "w") as f:
    ...     write_hex_records(f, nibbles)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional, TextIO
import logging
import string

from m9312_prom.constants import HEX_BYTES_PER_RECORD, PROM_BYTES
from m9312_prom.errors import (
    BoundsError,
    ChecksumMismatchError,
    FormatSyntaxError,
    RecordLocation,
    StreamError,
)
from m9312_prom.formats.checksum import byte_sum, checksum_byte

# Logger for this module
logger = logging.getLogger(__name__)

SOURCE_NAME = "hex"

# Colon, byte count, address, record type and checksum
MIN_RECORD_LENGTH = 11

END_OF_FILE_LINE = ":00000001FF"

_HEX_DIGITS = frozenset(string.hexdigits)


class RecordType(IntEnum):
    """Hex record types understood by the reader."""
    DATA = 0x00
    END_OF_FILE = 0x01


@dataclass(frozen=True)
class HexRecord:
    """
    A single parsed hex record.

    Attributes:
        byte_count: Number of payload bytes
        address: Load address of the first payload byte
        record_type: Record type byte (see RecordType)
        data: Payload bytes
        checksum: Checksum byte as stored in the record
    """
    byte_count: int
    address: int
    record_type: int
    data: bytes
    checksum: int

    @property
    def is_data(self) -> bool:
        return self.record_type == RecordType.DATA

    @property
    def is_end(self) -> bool:
        return self.record_type == RecordType.END_OF_FILE


# =============================================================================
# Parsing
# =============================================================================

def _decode_pairs(
    line: str,
    start: int,
    count: int,
    location: RecordLocation,
) -> bytes:
    """Decode `count` hex digit pairs of `line` starting at column `start`."""
    field = line[start:start + 2 * count]
    for i, char in enumerate(field):
        if char not in _HEX_DIGITS:
            raise FormatSyntaxError(
                f"invalid character {char!r} in hex record",
                location,
                column=start + i + 1,
            )
    return bytes.fromhex(field)


def parse_hex_record(line: str, line_number: int = 0) -> Optional[HexRecord]:
    """
    Parse one line of a hex record file.

    Args:
        line: The text line (a trailing newline is allowed)
        line_number: Line number for error messages (1-indexed, 0 if unknown)

    Returns:
        The parsed record, or None if the line is not a record

    Raises:
        FormatSyntaxError: If the line is too short or has a bad hex digit
        ChecksumMismatchError: If the record bytes do not sum to zero
    """
    line = line.rstrip("\r\n")
    if not line.startswith(":"):
        return None

    location = RecordLocation(SOURCE_NAME, line=line_number or None)

    if len(line) < MIN_RECORD_LENGTH:
        raise FormatSyntaxError(
            f"hex record shorter than {MIN_RECORD_LENGTH} characters",
            location,
        )

    byte_count = _decode_pairs(line, 1, 1, location)[0]
    required = MIN_RECORD_LENGTH + 2 * byte_count
    if len(line) < required:
        raise FormatSyntaxError(
            f"hex record too short for byte count {byte_count} "
            f"(need {required} characters, got {len(line)})",
            location,
        )

    # count, address (2), type, payload, checksum
    raw = _decode_pairs(line, 1, byte_count + 5, location)
    if byte_sum(raw) != 0:
        raise ChecksumMismatchError(
            declared=raw[-1],
            computed=checksum_byte(raw[:-1]),
            location=location,
        )

    return HexRecord(
        byte_count=byte_count,
        address=(raw[1] << 8) | raw[2],
        record_type=raw[3],
        data=raw[4:-1],
        checksum=raw[-1],
    )


def read_hex_records(stream: Iterable[str], size: int = PROM_BYTES) -> bytearray:
    """
    Read a hex record file into a fixed-size buffer.

    Data records are copied to their absolute address. Reading stops at
    the end-of-file record, or at the end of the stream if there is none.
    Locations not covered by any data record are zero.

    Args:
        stream: Text stream (or any iterable of lines)
        size: Size of the destination buffer in bytes

    Returns:
        The loaded buffer

    Raises:
        FormatSyntaxError: On a malformed record
        ChecksumMismatchError: On a record with a bad checksum
        BoundsError: If a data record extends past the end of the buffer
        StreamError: If reading the stream fails
    """
    buffer = bytearray(size)
    data_records = 0

    try:
        for line_number, line in enumerate(stream, start=1):
            record = parse_hex_record(line, line_number)
            if record is None:
                continue

            if record.is_end:
                logger.debug("End of file record at line %d", line_number)
                break

            if not record.is_data:
                logger.debug(
                    "Skipping record type 0x%02X at line %d",
                    record.record_type, line_number,
                )
                continue

            end = record.address + record.byte_count
            if end > size:
                raise BoundsError(
                    f"data record at 0x{record.address:04X} with "
                    f"{record.byte_count} bytes exceeds buffer size 0x{size:04X}",
                    RecordLocation(SOURCE_NAME, line=line_number),
                )
            buffer[record.address:end] = record.data
            data_records += 1
    except OSError as e:
        raise StreamError(f"error reading hex file: {e}") from e

    logger.debug("Read %d hex data records", data_records)
    return buffer


# =============================================================================
# Writing
# =============================================================================

def format_hex_record(address: int, data: bytes, record_type: int = RecordType.DATA) -> str:
    """
    Format one hex record line (without the trailing newline).

    Example:
        >>> format_hex_record(0x0200, bytes([0xAA, 0xBB]))
        ':02020000AABB97'
    """
    header = bytes([len(data), (address >> 8) & 0xFF, address & 0xFF, record_type])
    body = header + bytes(data)
    return f":{body.hex().upper()}{checksum_byte(body):02X}"


def write_hex_records(
    stream: TextIO,
    data: bytes,
    base_address: int = 0,
    bytes_per_record: int = HEX_BYTES_PER_RECORD,
) -> int:
    """
    Write a buffer as hex data records followed by an end-of-file record.

    Args:
        stream: Text stream to write to
        data: Bytes to write
        base_address: Address of the first byte
        bytes_per_record: Maximum payload bytes per record (1-255)

    Returns:
        Number of data records written

    Raises:
        ValueError: If the data does not fit the 16-bit address space or
            bytes_per_record is out of range
        StreamError: If writing the stream fails
    """
    if not 1 <= bytes_per_record <= 0xFF:
        raise ValueError(f"bytes per record must be 1-255, got {bytes_per_record}")
    if base_address < 0 or base_address + len(data) > 0x10000:
        raise ValueError(
            f"{len(data)} bytes at 0x{base_address:04X} exceed the 16-bit address space"
        )
    data = bytes(data)

    lines = []
    for offset in range(0, len(data), bytes_per_record):
        chunk = data[offset:offset + bytes_per_record]
        lines.append(format_hex_record(base_address + offset, chunk))
    lines.append(END_OF_FILE_LINE)

    try:
        for line in lines:
            stream.write(line + "\n")
    except OSError as e:
        raise StreamError(f"error writing hex file: {e}") from e

    logger.debug("Wrote %d hex data records", len(lines) - 1)
    return len(lines) - 1
