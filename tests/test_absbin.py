"""
Absolute Binary Unit Tests
==========================

Tests for reading and writing DEC absolute binary loader files.

Test Categories
---------------
1. Encoding: record layout and checksums
2. Reading: frame scan, word placement, end record
3. Errors: byte count, checksum, truncation, bounds
4. Writing: record split, padding, transfer address, round-trip
"""

import io

import pytest

from m9312_prom.constants import BOOT_ORIGIN, ROM_WORDS
from m9312_prom.errors import (
    BoundsError,
    ChecksumMismatchError,
    RecordSizeError,
    StreamError,
)
from m9312_prom.formats.absbin import (
    BinaryPadding,
    encode_binary_record,
    iter_binary_records,
    load_absolute_binary,
    read_absolute_binary,
    write_absolute_binary,
)


# =============================================================================
# Test Fixtures
# =============================================================================

# Two words 0x1234 0x5678 at address 0:
# 01+00+0A+00+00+00+34+12+78+56 = 0x11F, checksum 0xE1
DATA_RECORD = bytes([
    0x01, 0x00, 0x0A, 0x00, 0x00, 0x00, 0x34, 0x12, 0x78, 0x56, 0xE1,
])

# End record with transfer address 173000 (0xF600):
# 01+00+06+00+00+F6 = 0xFD, checksum 0x03
END_RECORD = bytes([0x01, 0x00, 0x06, 0x00, 0x00, 0xF6, 0x03])


@pytest.fixture
def rom_words() -> list[int]:
    """64 distinct words covering the full 16-bit range."""
    return [(i * 0x1357 + 0x0101) & 0xFFFF for i in range(ROM_WORDS)]


def flip_bit(data: bytes, byte_index: int, bit: int) -> bytes:
    corrupted = bytearray(data)
    corrupted[byte_index] ^= 1 << bit
    return bytes(corrupted)


# =============================================================================
# Encoding Tests
# =============================================================================

class TestEncodeBinaryRecord:
    """Tests for single record encoding."""

    def test_data_record(self):
        assert encode_binary_record(0, [0x1234, 0x5678]) == DATA_RECORD

    def test_end_record(self):
        assert encode_binary_record(BOOT_ORIGIN) == END_RECORD

    def test_record_sums_to_zero(self):
        record = encode_binary_record(0o1000, [0xFFFF] * 16)
        assert len(record) == 6 + 32 + 1
        assert sum(record) % 256 == 0


# =============================================================================
# Reading Tests
# =============================================================================

class TestReadAbsoluteBinary:
    """Tests for loading absolute binary files."""

    def test_two_word_record(self):
        stream = io.BytesIO(DATA_RECORD + END_RECORD)
        assert read_absolute_binary(stream, word_count=2) == [0x1234, 0x5678]

    def test_origin_and_transfer_address(self):
        image = load_absolute_binary(io.BytesIO(DATA_RECORD + END_RECORD), word_count=2)
        assert image.origin == 0
        assert image.transfer_address == BOOT_ORIGIN

    def test_leader_and_garbage_skipped(self):
        stream = io.BytesIO(b"\x00" * 20 + b"\x01\x01\x05" + DATA_RECORD + b"\x00" * 4 + END_RECORD)
        assert read_absolute_binary(stream, word_count=2) == [0x1234, 0x5678]

    def test_unloaded_words_are_zero(self):
        stream = io.BytesIO(DATA_RECORD + END_RECORD)
        words = read_absolute_binary(stream)
        assert len(words) == ROM_WORDS
        assert words[:2] == [0x1234, 0x5678]
        assert words[2:] == [0] * (ROM_WORDS - 2)

    def test_records_placed_relative_to_first(self):
        data = (
            encode_binary_record(0o1000, [1, 2])
            + encode_binary_record(0o1010, [5])
            + encode_binary_record(0o1000)
        )
        assert read_absolute_binary(io.BytesIO(data), word_count=5) == [1, 2, 0, 0, 5]

    def test_stops_after_end_record(self):
        stream = io.BytesIO(DATA_RECORD + END_RECORD + b"\x01\x00\x02\x00")
        assert read_absolute_binary(stream, word_count=2) == [0x1234, 0x5678]

    def test_iter_records(self):
        records = list(iter_binary_records(io.BytesIO(b"\x00\x00" + DATA_RECORD + END_RECORD)))
        assert len(records) == 2
        assert records[0].words == (0x1234, 0x5678)
        assert records[0].offset == 2
        assert not records[0].is_end
        assert records[1].is_end
        assert records[1].load_address == BOOT_ORIGIN


class TestReadAbsoluteBinaryErrors:
    """Tests for malformed absolute binary rejection."""

    def test_byte_count_too_small(self):
        stream = io.BytesIO(b"\x01\x00\x04\x00\x00\x00\xFB")
        with pytest.raises(RecordSizeError) as exc_info:
            read_absolute_binary(stream)
        assert exc_info.value.byte_count == 4

    def test_byte_count_odd(self):
        stream = io.BytesIO(b"\x01\x00\x07\x00\x00\x00\x00\xF8")
        with pytest.raises(RecordSizeError, match="odd"):
            read_absolute_binary(stream)

    def test_checksum_mismatch(self):
        corrupted = DATA_RECORD[:-1] + b"\xE2"
        with pytest.raises(ChecksumMismatchError) as exc_info:
            read_absolute_binary(io.BytesIO(corrupted + END_RECORD), word_count=2)
        assert exc_info.value.declared == 0xE2
        assert exc_info.value.computed == 0xE1

    def test_any_single_bit_flip_detected(self):
        """Flipping any address or payload bit breaks the checksum."""
        # bytes 0-1 are the frame and 2-3 the byte count, which change the
        # record structure instead
        for byte_index in range(4, len(DATA_RECORD) - 1):
            for bit in range(8):
                stream = io.BytesIO(flip_bit(DATA_RECORD, byte_index, bit) + END_RECORD)
                with pytest.raises(ChecksumMismatchError):
                    read_absolute_binary(stream, word_count=ROM_WORDS)

    def test_end_record_checksum_checked(self):
        corrupted = END_RECORD[:-1] + b"\x04"
        with pytest.raises(ChecksumMismatchError):
            read_absolute_binary(io.BytesIO(DATA_RECORD + corrupted), word_count=2)

    def test_truncated_record(self):
        with pytest.raises(StreamError, match="unexpected end of input"):
            read_absolute_binary(io.BytesIO(DATA_RECORD[:-3]))

    def test_missing_end_record(self):
        with pytest.raises(StreamError, match="no end record"):
            read_absolute_binary(io.BytesIO(DATA_RECORD), word_count=2)

    def test_empty_input(self):
        with pytest.raises(StreamError):
            read_absolute_binary(io.BytesIO(b""))

    def test_record_below_origin(self):
        data = (
            encode_binary_record(0o1000, [1])
            + encode_binary_record(0o776, [2])
            + encode_binary_record(0o1000)
        )
        with pytest.raises(BoundsError, match="below origin"):
            read_absolute_binary(io.BytesIO(data))

    def test_record_not_word_aligned(self):
        data = (
            encode_binary_record(0o1000, [1])
            + encode_binary_record(0o1003, [2])
            + encode_binary_record(0o1000)
        )
        with pytest.raises(BoundsError, match="not word aligned"):
            read_absolute_binary(io.BytesIO(data))

    def test_record_past_end_of_buffer(self):
        with pytest.raises(BoundsError) as exc_info:
            read_absolute_binary(io.BytesIO(DATA_RECORD + END_RECORD), word_count=1)
        assert "absolute binary offset" in str(exc_info.value)


# =============================================================================
# Writing Tests
# =============================================================================

class TestWriteAbsoluteBinary:
    """Tests for writing absolute binary files."""

    def test_rom_record_layout(self, rom_words):
        out = io.BytesIO()
        written = write_absolute_binary(out, rom_words)
        data = out.getvalue()

        # four 16-word records of 39 bytes and a 7-byte end record
        assert written == len(data) == 4 * 39 + 7
        assert data[:6] == bytes([0x01, 0x00, 0x26, 0x00, 0x00, 0xF6])
        assert data[39:45] == bytes([0x01, 0x00, 0x26, 0x00, 0x20, 0xF6])
        assert data[-7:] == END_RECORD

    def test_round_trip(self, rom_words):
        out = io.BytesIO()
        write_absolute_binary(out, rom_words)
        out.seek(0)
        image = load_absolute_binary(out)
        assert image.words == rom_words
        assert image.origin == BOOT_ORIGIN
        assert image.transfer_address == BOOT_ORIGIN

    def test_transfer_address_override(self, rom_words):
        out = io.BytesIO()
        write_absolute_binary(out, rom_words, transfer_address=1)
        assert out.getvalue()[-7:] == encode_binary_record(1)

    def test_custom_origin(self):
        out = io.BytesIO()
        write_absolute_binary(out, [0o12700], origin=0o1000)
        assert out.getvalue()[:8] == encode_binary_record(0o1000, [0o12700])[:8]

    def test_padding(self, rom_words):
        out = io.BytesIO()
        padding = BinaryPadding(leader=10, interrecord=2, trailer=5)
        written = write_absolute_binary(out, rom_words, padding=padding)
        data = out.getvalue()

        assert written == 4 * 39 + 7 + 10 + 4 * 2 + 5
        assert data[:10] == bytes(10)
        assert data[-5:] == bytes(5)
        out.seek(0)
        assert read_absolute_binary(out) == rom_words

    def test_negative_padding_rejected(self):
        with pytest.raises(ValueError):
            BinaryPadding(leader=-1)

    def test_empty_buffer_writes_only_end_record(self):
        out = io.BytesIO()
        write_absolute_binary(out, [])
        assert out.getvalue() == END_RECORD

    def test_word_out_of_range(self):
        with pytest.raises(ValueError):
            write_absolute_binary(io.BytesIO(), [0x10000])

    def test_address_space_overflow(self):
        with pytest.raises(ValueError):
            write_absolute_binary(io.BytesIO(), [0] * 8, origin=0xFFF8)
