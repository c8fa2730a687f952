#!/usr/bin/env python3
"""
Checksum routines for GTA: Vice City PC save files
==================================================

Every VC save ends with a 4-byte checksum covering everything before it:

| Offset            | Size | Content                               |
|-------------------|------|---------------------------------------|
| 0x00000-0x3145F   | ...  | Save data (23 blocks + padding)       |
| 0x31460-0x31463   | 4    | Checksum (read/written big-endian)    |

The checksum is the plain 32-bit sum of every save-data byte. The game keeps
the sum in native (little-endian) order, but tools have historically read the
slot as big-endian, so the value is packed LE and read back BE before it is
compared with or written into the slot. Both steps are needed to stay
byte-compatible with existing saves.
"""

import struct


# =============================================================================
# CONSTANTS
# =============================================================================

FILE_SIZE = 0x31464

# Checksum slot, the last 4 bytes of the file
CHECKSUM_OFFSET = 0x31460

# Save data covered by the checksum (0x0000..=0x3145F)
SAVE_DATA = slice(0x0000, CHECKSUM_OFFSET)


# =============================================================================
# CHECKSUM
# =============================================================================

def calculate_checksum(data: bytes) -> int:
    """
    Calculate the save checksum.

    Args:
        data: Save data bytes (normally buffer[SAVE_DATA])

    Returns:
        32-bit checksum in the byte order used by the checksum slot
    """
    total = 0
    for byte in data:
        total = (total + byte) & 0xFFFFFFFF

    # LE accumulation, BE storage
    raw = struct.pack('<I', total)
    return struct.unpack('>I', raw)[0]


def checksum_is_valid(data: bytes, checksum: int) -> tuple:
    """
    Compare a stored checksum against the one calculated from data.

    Returns:
        Tuple of (valid, calculated_checksum)
    """
    calculated = calculate_checksum(data)
    return calculated == checksum, calculated


def read_checksum(buffer: bytes) -> int:
    """Read the stored checksum from the last 4 bytes of a full save buffer."""
    return struct.unpack_from('>I', buffer, CHECKSUM_OFFSET)[0]


def write_checksum(buffer: bytearray, checksum: int):
    """Write a checksum into the checksum slot of a full save buffer."""
    struct.pack_into('>I', buffer, CHECKSUM_OFFSET, checksum)
