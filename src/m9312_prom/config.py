"""
Conversion Configuration
========================

Settings shared by the three conversion pipelines. Configuration can come
from:
- Default values (defined here)
- Environment variables
- Command-line options (which override the environment)

Environment variables (all optional):
    M9312_ORIGIN       Load origin of the ROM words (octal by default)
    M9312_TRANSFER     Transfer address for absolute binary output
    M9312_LEADER       Null bytes before the first absolute binary record
    M9312_INTERRECORD  Null bytes after each absolute binary data record
    M9312_TRAILER      Null bytes after the absolute binary end record
"""

from dataclasses import dataclass, field, replace
from typing import Mapping, Optional
import os

from m9312_prom.constants import BOOT_ORIGIN, PROM_BYTES, ROM_WORDS
from m9312_prom.formats.absbin import BinaryPadding


def parse_address(text: str) -> int:
    """
    Parse a 16-bit address.

    PDP-11 addresses are conventionally octal, so a bare number is read as
    octal. A 0o, 0x or 0b prefix selects the base explicitly, and a trailing
    '.' marks a decimal number as in MACRO-11.

    Example:
        >>> parse_address("173000")
        62976
        >>> parse_address("0xF600")
        62976

    Raises:
        ValueError: If the text is not a number or exceeds 16 bits
    """
    text = text.strip()
    if text.endswith("."):
        value = int(text[:-1], 10)
    elif text[:2].lower() in ("0o", "0x", "0b"):
        value = int(text, 0)
    else:
        value = int(text, 8)
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"address {text!r} does not fit in 16 bits")
    return value


def _env_count(env: Mapping[str, str], name: str) -> int:
    value = env.get(name)
    if value is None:
        return 0
    count = int(value, 10)
    if count < 0:
        raise ValueError(f"{name} cannot be negative")
    return count


@dataclass
class ConversionConfig:
    """
    Settings for a single conversion.

    Attributes:
        origin: Bus address of the first ROM word (default: 173000 octal)
        transfer_address: Start address written to absolute binary output.
            None means use the origin.
        padding: Null padding around absolute binary records
        word_count: Number of ROM words converted
        prom_bytes: Capacity of the PROM image read from hex files
    """
    origin: int = BOOT_ORIGIN
    transfer_address: Optional[int] = None
    padding: BinaryPadding = field(default_factory=BinaryPadding)
    word_count: int = ROM_WORDS
    prom_bytes: int = PROM_BYTES

    @property
    def effective_transfer_address(self) -> int:
        if self.transfer_address is None:
            return self.origin
        return self.transfer_address

    def validate(self) -> None:
        """
        Check that the ROM words fit the 16-bit address space at the origin.

        Raises:
            ValueError: If the last word would lie above 177776
        """
        end = self.origin + 2 * self.word_count
        if end > 0x10000:
            raise ValueError(
                f"{self.word_count} words at origin {self.origin:06o} "
                f"exceed the 16-bit address space"
            )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ConversionConfig":
        """
        Create a configuration from environment variables.

        Args:
            env: Mapping to read instead of os.environ

        Raises:
            ValueError: If a variable holds an invalid value
        """
        if env is None:
            env = os.environ

        config = cls()
        if "M9312_ORIGIN" in env:
            config.origin = parse_address(env["M9312_ORIGIN"])
        if "M9312_TRANSFER" in env:
            config.transfer_address = parse_address(env["M9312_TRANSFER"])
        config.padding = BinaryPadding(
            leader=_env_count(env, "M9312_LEADER"),
            interrecord=_env_count(env, "M9312_INTERRECORD"),
            trailer=_env_count(env, "M9312_TRAILER"),
        )
        return config

    def with_overrides(
        self,
        origin: Optional[int] = None,
        transfer_address: Optional[int] = None,
        leader: Optional[int] = None,
        interrecord: Optional[int] = None,
        trailer: Optional[int] = None,
    ) -> "ConversionConfig":
        """Return a copy with every non-None argument replacing the current value."""
        padding = replace(
            self.padding,
            **{
                name: value
                for name, value in (
                    ("leader", leader),
                    ("interrecord", interrecord),
                    ("trailer", trailer),
                )
                if value is not None
            },
        )
        return replace(
            self,
            origin=self.origin if origin is None else origin,
            transfer_address=(
                self.transfer_address if transfer_address is None else transfer_address
            ),
            padding=padding,
        )
