"""
M9312 PROM Tools Error Hierarchy
================================

This module defines the exception hierarchy for the M9312 PROM tools.
All exceptions inherit from PromError, allowing callers to catch every
conversion failure with a single except clause.

Exception Hierarchy
-------------------
PromError (base)
├── FormatError (malformed input file)
│   ├── FormatSyntaxError - bad hex digit, line too short
│   ├── ChecksumMismatchError - declared and computed checksums differ
│   ├── RecordSizeError - binary record byte count out of range or odd
│   └── BoundsError - record would write outside the destination buffer
└── StreamError - I/O failure or truncated input

Design Philosophy
-----------------
A ROM image is all-or-nothing: a PROM burner or boot loader cannot use a
partially converted image. None of these errors is retried and the codecs
never return partial results. Each format error records which input format
was being read and where, so a message such as

    hex line 12: checksum mismatch: declared 0x36, computed 0x37

identifies both the stage and the structural check that failed.
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class PromError(Exception):
    """
    Base exception for all M9312 PROM tool errors.

    Example:
        try:
            words = read_absolute_binary(stream)
        except PromError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Input Location Tracking
# =============================================================================

@dataclass(frozen=True)
class RecordLocation:
    """
    Where in an input file a record was found.

    Hex record files are line oriented, so hex locations carry a line
    number; absolute binary files are byte streams, so binary locations
    carry the byte offset of the record's frame.

    Attributes:
        source: Name of the input format ("hex" or "absolute binary")
        line: Line number (1-indexed), for text formats
        offset: Byte offset from the start of the stream, for binary formats
    """
    source: str
    line: Optional[int] = None
    offset: Optional[int] = None

    def __str__(self) -> str:
        if self.line is not None:
            return f"{self.source} line {self.line}"
        if self.offset is not None:
            return f"{self.source} offset {self.offset:#06x}"
        return self.source


# =============================================================================
# Format Exceptions
# =============================================================================

class FormatError(PromError):
    """
    Base exception for malformed input files.

    Attributes:
        message: The error description
        location: Where in the input the bad record was found (optional)
    """

    def __init__(self, message: str, location: Optional[RecordLocation] = None):
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class FormatSyntaxError(FormatError):
    """
    Structural error in a record.

    Examples:
        - Hex record shorter than 11 characters
        - Hex record too short for its byte count
        - Non hex-digit character where a hex pair is expected
    """

    def __init__(
        self,
        message: str,
        location: Optional[RecordLocation] = None,
        column: Optional[int] = None,
    ):
        self.column = column
        if column is not None:
            message = f"{message} (column {column})"
        super().__init__(message, location)


class ChecksumMismatchError(FormatError):
    """
    Record checksum verification failed.

    Both formats use an 8-bit additive checksum: the sum of every byte in
    the record, including the checksum byte, must be zero modulo 256.

    Attributes:
        declared: Checksum byte stored in the record
        computed: Checksum byte the record contents require
    """

    def __init__(
        self,
        declared: int,
        computed: int,
        location: Optional[RecordLocation] = None,
    ):
        self.declared = declared
        self.computed = computed
        super().__init__(
            f"checksum mismatch: declared 0x{declared:02X}, computed 0x{computed:02X}",
            location,
        )


class RecordSizeError(FormatError):
    """
    Absolute binary record byte count out of range.

    The byte count covers the 6 header bytes plus whole payload words, so
    it must be at least 6 and even.
    """

    def __init__(self, byte_count: int, location: Optional[RecordLocation] = None):
        self.byte_count = byte_count
        if byte_count < 6:
            reason = "less than 6"
        else:
            reason = "odd"
        super().__init__(f"invalid record byte count {byte_count} ({reason})", location)


class BoundsError(FormatError):
    """
    Record would write outside the fixed-size destination buffer.

    Raised instead of silently growing or overrunning the buffer, since
    a malformed PROM file must never produce a partial image.
    """
    pass


# =============================================================================
# Stream Exceptions
# =============================================================================

class StreamError(PromError):
    """
    Failure of the underlying byte or text stream.

    Raised when:
    - Reading or writing the stream raises OSError
    - The input ends in the middle of a record
    - An absolute binary input ends before its end record
    """
    pass
