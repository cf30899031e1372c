"""
Conversion Pipeline Tests
=========================

End-to-end tests of the unscramble, scramble and dump pipelines on
in-memory streams.
"""

import io
import logging

import pytest

from m9312_prom.config import ConversionConfig
from m9312_prom.constants import BOOT_ORIGIN, PROM_BYTES, ROM_NIBBLES, ROM_WORDS
from m9312_prom.convert import (
    ConversionMode,
    dump_hex,
    run_conversion,
    scramble_binary_to_hex,
    unscramble_hex_to_binary,
)
from m9312_prom.errors import ChecksumMismatchError
from m9312_prom.formats.absbin import load_absolute_binary, write_absolute_binary
from m9312_prom.formats.hexrec import read_hex_records, write_hex_records
from m9312_prom.scramble import scramble, unscramble


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def rom_words() -> list[int]:
    return [(0o012700 + 3 * i) & 0xFFFF for i in range(ROM_WORDS)]


@pytest.fixture
def prom_hex(rom_words) -> str:
    """Hex file of a full PROM holding rom_words, as a programmer would read it."""
    prom = bytearray(PROM_BYTES)
    prom[:ROM_NIBBLES] = scramble(rom_words)
    out = io.StringIO()
    write_hex_records(out, prom)
    return out.getvalue()


@pytest.fixture
def rom_binary(rom_words) -> bytes:
    out = io.BytesIO()
    write_absolute_binary(out, rom_words)
    return out.getvalue()


# =============================================================================
# Pipeline Tests
# =============================================================================

class TestConversionMode:
    """Tests for the mode table."""

    def test_file_modes(self):
        assert ConversionMode.UNSCRAMBLE.input_mode == "r"
        assert ConversionMode.UNSCRAMBLE.output_mode == "wb"
        assert ConversionMode.SCRAMBLE.input_mode == "rb"
        assert ConversionMode.SCRAMBLE.output_mode == "w"
        assert ConversionMode.DUMP.input_mode == "r"
        assert ConversionMode.DUMP.output_mode == "w"

    def test_descriptions(self):
        for mode in ConversionMode:
            assert "PROM hex file" in mode.get_description()


class TestUnscramble:
    """Tests for hex -> absolute binary."""

    def test_words_recovered(self, prom_hex, rom_words):
        out = io.BytesIO()
        words = unscramble_hex_to_binary(io.StringIO(prom_hex), out)
        assert words == rom_words

        out.seek(0)
        image = load_absolute_binary(out)
        assert image.words == rom_words
        assert image.origin == BOOT_ORIGIN
        assert image.transfer_address == BOOT_ORIGIN

    def test_config_origin_and_padding(self, prom_hex):
        config = ConversionConfig().with_overrides(origin=0o1000, transfer_address=0o1002, leader=8)
        out = io.BytesIO()
        unscramble_hex_to_binary(io.StringIO(prom_hex), out, config)
        assert out.getvalue()[:8] == bytes(8)

        out.seek(0)
        image = load_absolute_binary(out)
        assert image.origin == 0o1000
        assert image.transfer_address == 0o1002

    def test_bad_input_writes_nothing(self, prom_hex):
        lines = prom_hex.splitlines()
        lines[3] = lines[3][:-2] + ("00" if not lines[3].endswith("00") else "01")
        out = io.BytesIO()
        with pytest.raises(ChecksumMismatchError):
            unscramble_hex_to_binary(io.StringIO("\n".join(lines)), out)
        assert out.getvalue() == b""


class TestScramble:
    """Tests for absolute binary -> hex."""

    def test_whole_prom_written(self, rom_binary, rom_words):
        out = io.StringIO()
        prom = scramble_binary_to_hex(io.BytesIO(rom_binary), out)

        lines = out.getvalue().splitlines()
        # 512 locations in 32-byte records, then the end record
        assert len(lines) == PROM_BYTES // 32 + 1
        assert lines[-1] == ":00000001FF"

        loaded = read_hex_records(io.StringIO(out.getvalue()))
        assert loaded == prom
        assert loaded[ROM_NIBBLES:] == bytes(ROM_NIBBLES)
        assert unscramble(loaded) == rom_words

    def test_origin_mismatch_warns(self, rom_words, caplog):
        binary = io.BytesIO()
        write_absolute_binary(binary, rom_words, origin=0o1000)
        binary.seek(0)
        with caplog.at_level(logging.WARNING, logger="m9312_prom.convert"):
            scramble_binary_to_hex(binary, io.StringIO())
        assert "differs from expected" in caplog.text

    def test_round_trip_through_both_pipelines(self, prom_hex):
        binary = io.BytesIO()
        unscramble_hex_to_binary(io.StringIO(prom_hex), binary)
        binary.seek(0)
        out = io.StringIO()
        scramble_binary_to_hex(binary, out)
        assert out.getvalue() == prom_hex


class TestDump:
    """Tests for hex -> octal dump."""

    def test_dump_lines(self, prom_hex):
        out = io.StringIO()
        dump_hex(io.StringIO(prom_hex), out)
        lines = out.getvalue().splitlines()
        assert len(lines) == ROM_WORDS // 8
        assert lines[0].startswith("173000: 012700 012703 012706")

    def test_run_conversion_dispatch(self, prom_hex, rom_words):
        words = run_conversion(ConversionMode.DUMP, io.StringIO(prom_hex), io.StringIO())
        assert words == rom_words
