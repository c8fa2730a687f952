#!/usr/bin/env python3
"""
Retail <-> Steam conversion for GTA: Vice City PC saves
=======================================================

The only structural difference between the two PC builds is the 4-byte
marker FD 00 00 00 that Steam saves carry at offset 0x58, inside block 0.

To convert a Retail save to the Steam version:
    1) Insert FD 00 00 00 at 0x58. Everything after it shifts 4 bytes right.
    2) The first 2 bytes of the save are block 0's size (u16 LE). Add 4.
    3) The u32 LE right after block 22 is the padding size. It now sits at
       (Block_22.end + 4) and must shrink by 4.
    4) Drop the last 4 bytes (the old checksum, pushed past FILE_SIZE).
    5) A new checksum is written on export.

To convert a Steam save to the Retail version:
    1) Remove the 4 marker bytes at 0x58. Everything after shifts 4 bytes left.
    2) Subtract 4 from block 0's size.
    3) The padding size now sits at (Block_22.end - 4) and must grow by 4.
    4) The old checksum is now the last 4 bytes of the padding. Zero it and
       append 4 bytes for the new checksum slot.
    5) A new checksum is written on export.

Every other block is located by walking the size prefixes from the front of
the (already shifted) buffer, so only these two size fields need patching.
The block table passed in must come from the buffer *before* conversion.
"""

import struct

from vc_blocks import (
    BLOCK_COUNT,
    PLATFORM_MARKER_OFFSET,
    STEAM_MARKER,
    SaveType,
)
from vc_checksum import FILE_SIZE
from vc_errors import ConversionNotSupportedError, UnsupportedVariantError

MARKER_SIZE = len(STEAM_MARKER)

# Block 0's size is patched through its low 16 bits only
BLOCK0_SIZE_OFFSET = 0x0000


def _adjust_u16(buffer: bytearray, offset: int, delta: int):
    value = struct.unpack_from('<H', buffer, offset)[0]
    struct.pack_into('<H', buffer, offset, (value + delta) & 0xFFFF)


def _adjust_u32(buffer: bytearray, offset: int, delta: int):
    value = struct.unpack_from('<I', buffer, offset)[0]
    struct.pack_into('<I', buffer, offset, (value + delta) & 0xFFFFFFFF)


# =============================================================================
# CONVERSIONS
# =============================================================================

def retail_to_steam(buffer: bytearray, blocks: list):
    """Convert a Retail save buffer to the Steam layout in place."""
    last_block = blocks[BLOCK_COUNT - 1]

    buffer[PLATFORM_MARKER_OFFSET:PLATFORM_MARKER_OFFSET] = STEAM_MARKER

    _adjust_u16(buffer, BLOCK0_SIZE_OFFSET, +MARKER_SIZE)

    # Padding size, shifted right by the insert
    padding_offset = last_block.end + MARKER_SIZE
    padding_size = struct.unpack_from('<I', buffer, padding_offset)[0]
    if padding_size < MARKER_SIZE:
        raise ConversionNotSupportedError(
            SaveType.RETAIL, SaveType.STEAM,
            f"padding size 0x{padding_size:X} at 0x{padding_offset:05X} leaves no room for the marker")
    _adjust_u32(buffer, padding_offset, -MARKER_SIZE)

    # Old checksum was pushed past the fixed file size
    del buffer[-MARKER_SIZE:]


def steam_to_retail(buffer: bytearray, blocks: list):
    """Convert a Steam save buffer to the Retail layout in place."""
    last_block = blocks[BLOCK_COUNT - 1]

    del buffer[PLATFORM_MARKER_OFFSET:PLATFORM_MARKER_OFFSET + MARKER_SIZE]

    _adjust_u16(buffer, BLOCK0_SIZE_OFFSET, -MARKER_SIZE)

    # Padding size, shifted left by the removal
    _adjust_u32(buffer, last_block.end - MARKER_SIZE, +MARKER_SIZE)

    # Old checksum becomes padding again, then room for the new one.
    # Zeroed here, so 0x3145C..0x3145F differs from saves converted by
    # earlier tools, which left the stale Steam checksum in the padding.
    buffer[-MARKER_SIZE:] = bytes(MARKER_SIZE)
    buffer.extend(bytes(MARKER_SIZE))


CONVERSIONS = {
    SaveType.RETAIL: (SaveType.STEAM, retail_to_steam),
    SaveType.STEAM: (SaveType.RETAIL, steam_to_retail),
}


def convert(buffer: bytearray, blocks: list, save_type: SaveType,
            target: SaveType = None) -> SaveType:
    """
    Convert a Retail save to Steam or a Steam save to Retail, in place.

    The transform runs on a scratch copy and is written back to buffer only
    once it has fully succeeded; on any error buffer is left untouched.

    Args:
        buffer: Full save buffer, FILE_SIZE bytes
        blocks: Block table of the buffer before conversion
        save_type: Detected type of the buffer
        target: Optional expected target type

    Returns:
        SaveType of the converted buffer

    Raises:
        UnsupportedVariantError: save_type is not RETAIL or STEAM
        ConversionNotSupportedError: target is not the opposite PC type,
            the padding size is too small, or the converted buffer is not
            FILE_SIZE bytes
        struct.error: a size field lies outside the buffer
    """
    if save_type not in CONVERSIONS:
        raise UnsupportedVariantError(save_type)

    new_type, conversion = CONVERSIONS[save_type]

    if target is not None and target != new_type:
        raise ConversionNotSupportedError(
            save_type, target, f"{save_type.label} saves can only become {new_type.label}")

    if len(buffer) != FILE_SIZE:
        raise ConversionNotSupportedError(
            save_type, new_type, f"buffer is 0x{len(buffer):X} bytes, expected 0x{FILE_SIZE:X}")

    converted = bytearray(buffer)
    conversion(converted, blocks)

    if len(converted) != FILE_SIZE:
        raise ConversionNotSupportedError(
            save_type, new_type, f"converted buffer is 0x{len(converted):X} bytes")

    buffer[:] = converted

    return new_type
