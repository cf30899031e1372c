"""
Record Checksum Calculations
============================

Both file formats handled here protect each record with the same 8-bit
additive checksum:

- Sum every byte of the record, checksum byte included
- Keep the low 8 bits
- A valid record sums to zero

The writer therefore stores the two's complement of the sum of the
preceding bytes.

Example:
    >>> hex(checksum_byte(bytes([0x02, 0x02, 0x00, 0x00, 0xAA, 0xBB])))
    '0x97'
"""

from typing import Iterable


def byte_sum(data: Iterable[int]) -> int:
    """
    Sum bytes modulo 256.

    Args:
        data: Byte values

    Returns:
        Low 8 bits of the sum
    """
    total = 0
    for byte in data:
        total = (total + byte) & 0xFF
    return total


def checksum_byte(data: Iterable[int]) -> int:
    """
    Calculate the checksum byte that makes a record sum to zero.

    Args:
        data: All record bytes preceding the checksum byte

    Returns:
        Two's complement of the byte sum (0x00 - 0xFF)
    """
    return (-byte_sum(data)) & 0xFF


def verify_checksum(data: Iterable[int]) -> bool:
    """Return True if the record bytes (checksum included) sum to zero."""
    return byte_sum(data) == 0
