"""
M9312 Bootstrap PROM Constants
==============================

Fixed geometry of the M9312 Bootstrap/Terminator boot PROMs.

Each boot PROM is a 512 x 4 part. A 16-bit PDP-11 word is spread over four
consecutive 4-bit locations, low nibble first, so the 64 words of a boot
PROM occupy the first 256 locations and the upper half of the part is
unused.
"""

from typing import Final

# =============================================================================
# ROM Geometry
# =============================================================================

# Words of boot code held in one PROM
ROM_WORDS: Final[int] = 64

# Physical 4-bit locations used per 16-bit word
NIBBLES_PER_WORD: Final[int] = 4

# Locations actually holding boot code
ROM_NIBBLES: Final[int] = ROM_WORDS * NIBBLES_PER_WORD

# Total locations in the 512 x 4 PROM
PROM_BYTES: Final[int] = 2 * ROM_NIBBLES

# =============================================================================
# Addresses
# =============================================================================

# Bus address at which the M9312 maps the boot PROM sockets (octal 173000)
BOOT_ORIGIN: Final[int] = 0o173000

# =============================================================================
# Wiring
# =============================================================================

# Data lines 10-12 are inverted between the PROM outputs and the bus
SCRAMBLE_XOR: Final[int] = 0x1C00

# Bits 0 and 8 are crossed over between the PROM outputs and the bus
SWAP_KEEP_MASK: Final[int] = 0xFEFE

# =============================================================================
# Record Sizes
# =============================================================================

# Data bytes per hex record written
HEX_BYTES_PER_RECORD: Final[int] = 32

# Data words per absolute binary record written
BINARY_WORDS_PER_RECORD: Final[int] = 16
