"""
DEC Absolute Binary Files
=========================

This module reads and writes the DEC "absolute binary" format, the paper
tape format loaded by the PDP-11 Absolute Loader.

Record Format
-------------
A file is a sequence of records, optionally separated by null bytes:

    Offset  Size  Field
    ------  ----  -----
    0       2     Frame: 0x01 0x00
    2       2     Byte count (little-endian)
    4       2     Load address (little-endian)
    6       n     Payload words (little-endian)
    6+n     1     Checksum

The byte count covers the frame, byte count and address fields plus the
payload, so it is at least 6 and, since the payload is whole words, even.
The checksum byte makes the sum of every byte from the leading 0x01
through the checksum itself zero modulo 256.

A record with a byte count of exactly 6 carries no data. It ends the file,
and its load address is the transfer (start) address.

Usage
-----
    >>> with open("boot.bin", "rb") as f:
    ...     image = load_absolute_binary(f)
    >>> print(f"origin {image.origin:06o}, start {image.transfer_address:06o}")
"""

from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, Optional, Sequence
import logging
import struct

from m9312_prom.constants import BINARY_WORDS_PER_RECORD, BOOT_ORIGIN, ROM_WORDS
from m9312_prom.errors import (
    BoundsError,
    ChecksumMismatchError,
    RecordLocation,
    RecordSizeError,
    StreamError,
)
from m9312_prom.formats.checksum import byte_sum, checksum_byte

# Logger for this module
logger = logging.getLogger(__name__)

SOURCE_NAME = "absolute binary"

FRAME = b"\x01\x00"

# Frame, byte count and load address
HEADER_SIZE = 6


@dataclass(frozen=True)
class BinaryPadding:
    """
    Null bytes written around absolute binary records.

    Paper tape punches needed blank leader and trailer to thread the tape,
    and some loaders expect blank frames between records. The reader skips
    any such bytes, so they only matter for compatibility with other tools.

    Attributes:
        leader: Nulls before the first record
        interrecord: Nulls after each data record
        trailer: Nulls after the end record
    """
    leader: int = 0
    interrecord: int = 0
    trailer: int = 0

    def __post_init__(self) -> None:
        for name in ("leader", "interrecord", "trailer"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} padding cannot be negative")


@dataclass(frozen=True)
class BinaryRecord:
    """
    A single parsed absolute binary record.

    Attributes:
        byte_count: Byte count field (header plus payload)
        load_address: Load address, or the transfer address for an end record
        words: Payload words
        checksum: Checksum byte as stored in the record
        offset: Byte offset of the record frame in the stream
    """
    byte_count: int
    load_address: int
    words: tuple[int, ...]
    checksum: int
    offset: int = 0

    @property
    def is_end(self) -> bool:
        return self.byte_count == HEADER_SIZE


@dataclass
class LoadImage:
    """
    Memory image assembled from an absolute binary file.

    Attributes:
        words: Loaded words, indexed from the origin
        origin: Load address of the first record
        transfer_address: Start address from the end record
    """
    words: list[int] = field(default_factory=list)
    origin: int = 0
    transfer_address: int = 0


# =============================================================================
# Reading
# =============================================================================

class _RecordReader:
    """Byte reader that tracks stream position and a running checksum."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.position = 0
        self.checksum = 0

    def read_byte(self) -> Optional[int]:
        try:
            data = self.stream.read(1)
        except OSError as e:
            raise StreamError(f"error reading absolute binary file: {e}") from e
        if not data:
            return None
        self.position += 1
        return data[0]

    def require_byte(self, what: str, location: RecordLocation) -> int:
        value = self.read_byte()
        if value is None:
            raise StreamError(f"{location}: unexpected end of input reading {what}")
        return value

    def read_le16(self, what: str, location: RecordLocation) -> int:
        low = self.require_byte(what, location)
        high = self.require_byte(what, location)
        self.checksum = byte_sum((self.checksum, low, high))
        return low | (high << 8)

    def find_frame(self) -> Optional[int]:
        """
        Skip to the next record frame.

        Returns:
            Offset of the frame's first byte, or None at end of stream
        """
        previous = None
        while True:
            value = self.read_byte()
            if value is None:
                return None
            if previous == FRAME[0] and value == FRAME[1]:
                self.checksum = byte_sum(FRAME)
                return self.position - len(FRAME)
            previous = value


def iter_binary_records(stream: BinaryIO) -> Iterator[BinaryRecord]:
    """
    Iterate over the records of an absolute binary file.

    Bytes between records are skipped. Iteration stops after the end
    record.

    Args:
        stream: Binary stream positioned at the start of the file

    Yields:
        Each record in file order, the end record last

    Raises:
        RecordSizeError: If a byte count is less than 6 or odd
        ChecksumMismatchError: If a record's bytes do not sum to zero
        StreamError: If the input ends before the end record
    """
    reader = _RecordReader(stream)

    while True:
        offset = reader.find_frame()
        if offset is None:
            raise StreamError("absolute binary file has no end record")
        location = RecordLocation(SOURCE_NAME, offset=offset)

        byte_count = reader.read_le16("byte count", location)
        if byte_count < HEADER_SIZE or byte_count & 1:
            raise RecordSizeError(byte_count, location)

        load_address = reader.read_le16("load address", location)

        words = tuple(
            reader.read_le16("data", location)
            for _ in range((byte_count - HEADER_SIZE) // 2)
        )

        declared = reader.require_byte("checksum", location)
        if byte_sum((reader.checksum, declared)) != 0:
            raise ChecksumMismatchError(
                declared=declared,
                computed=checksum_byte((reader.checksum,)),
                location=location,
            )

        record = BinaryRecord(
            byte_count=byte_count,
            load_address=load_address,
            words=words,
            checksum=declared,
            offset=offset,
        )
        logger.debug(
            "Record at offset %d: %d words at %06o",
            offset, len(words), load_address,
        )
        yield record

        if record.is_end:
            return


def load_absolute_binary(stream: BinaryIO, word_count: int = ROM_WORDS) -> LoadImage:
    """
    Load an absolute binary file into a fixed-size word buffer.

    The first record's load address becomes the origin; every data word is
    stored at its byte offset from the origin divided by two. Words not
    loaded by any record are zero.

    Args:
        stream: Binary stream positioned at the start of the file
        word_count: Size of the destination buffer in words

    Returns:
        The loaded image, with origin and transfer address

    Raises:
        BoundsError: If a record loads below the origin, at an odd offset,
            or past the end of the buffer
        RecordSizeError, ChecksumMismatchError, StreamError: See
            iter_binary_records()
    """
    image = LoadImage(words=[0] * word_count)
    origin: Optional[int] = None

    for record in iter_binary_records(stream):
        if origin is None:
            origin = record.load_address
            image.origin = origin

        if record.is_end:
            image.transfer_address = record.load_address
            break

        location = RecordLocation(SOURCE_NAME, offset=record.offset)
        delta = record.load_address - origin
        if delta < 0:
            raise BoundsError(
                f"record address {record.load_address:06o} is below origin {origin:06o}",
                location,
            )
        if delta & 1:
            raise BoundsError(
                f"record address {record.load_address:06o} is not word aligned "
                f"with origin {origin:06o}",
                location,
            )
        index = delta // 2
        if index + len(record.words) > word_count:
            raise BoundsError(
                f"record at {record.load_address:06o} with {len(record.words)} words "
                f"exceeds {word_count}-word buffer at {origin:06o}",
                location,
            )
        image.words[index:index + len(record.words)] = record.words

    return image


def read_absolute_binary(stream: BinaryIO, word_count: int = ROM_WORDS) -> list[int]:
    """Load an absolute binary file and return just its word buffer."""
    return load_absolute_binary(stream, word_count).words


# =============================================================================
# Writing
# =============================================================================

def encode_binary_record(load_address: int, words: Sequence[int] = ()) -> bytes:
    """
    Encode one absolute binary record, checksum included.

    Args:
        load_address: Load address, or transfer address for an end record
        words: Payload words; empty for an end record

    Returns:
        The encoded record bytes
    """
    body = FRAME + struct.pack(
        f"<HH{len(words)}H",
        HEADER_SIZE + 2 * len(words),
        load_address,
        *words,
    )
    return body + bytes([checksum_byte(body)])


def write_absolute_binary(
    stream: BinaryIO,
    words: Sequence[int],
    origin: int = BOOT_ORIGIN,
    transfer_address: Optional[int] = None,
    padding: BinaryPadding = BinaryPadding(),
    words_per_record: int = BINARY_WORDS_PER_RECORD,
) -> int:
    """
    Write a word buffer as an absolute binary file.

    Args:
        stream: Binary stream to write to
        words: Words to write, loaded at consecutive addresses
        origin: Load address of the first word
        transfer_address: Start address for the end record. Defaults to the
            origin, which is what the historical tool wrote; whether the
            loader expects this or 1 (halt after loading) is unverified.
        padding: Null bytes around records
        words_per_record: Maximum payload words per data record

    Returns:
        Number of bytes written

    Raises:
        ValueError: If a word or address does not fit in 16 bits
        StreamError: If writing the stream fails
    """
    if transfer_address is None:
        transfer_address = origin
    if words_per_record < 1:
        raise ValueError(f"words per record must be positive, got {words_per_record}")
    if origin < 0 or origin + 2 * len(words) > 0x10000:
        raise ValueError(
            f"{len(words)} words at {origin:06o} exceed the 16-bit address space"
        )
    for word in words:
        if not 0 <= word <= 0xFFFF:
            raise ValueError(f"word {word!r} does not fit in 16 bits")
    if not 0 <= transfer_address <= 0xFFFF:
        raise ValueError(f"transfer address {transfer_address!r} does not fit in 16 bits")

    out = bytearray(padding.leader)
    address = origin
    records = 0
    for start in range(0, len(words), words_per_record):
        chunk = words[start:start + words_per_record]
        out += encode_binary_record(address, chunk)
        out += bytes(padding.interrecord)
        address += 2 * len(chunk)
        records += 1
    out += encode_binary_record(transfer_address)
    out += bytes(padding.trailer)

    try:
        stream.write(bytes(out))
    except OSError as e:
        raise StreamError(f"error writing absolute binary file: {e}") from e

    logger.debug(
        "Wrote %d data records, transfer address %06o", records, transfer_address
    )
    return len(out)
