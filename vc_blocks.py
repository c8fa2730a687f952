#!/usr/bin/env python3
"""
Block layout and save type detection for GTA: Vice City PC saves
================================================================

A VC save is split into 23 blocks. Blocks have no fixed size, so each one is
preceded by a 4-byte little-endian length prefix and the blocks are found by
walking the prefixes from the start of the file:

| Offset               | Size   | Content                         |
|----------------------|--------|---------------------------------|
| 0x0000               | 4      | Block 0 size (u32 LE)           |
| 0x0004               | size0  | Block 0 data                    |
| 0x0004 + size0       | 4      | Block 1 size (u32 LE)           |
| ...                  | ...    | ...                             |
| Block 22 end         | 4      | Padding size (u32 LE)           |
| Block 22 end + 4     | ...    | Padding                         |
| 0x31460              | 4      | Checksum (see vc_checksum)      |

Save type is decided by the size of block 1, which each platform build pads
differently. Both PC builds share the same block 1 size, so the byte at 0x58
is used to tell them apart: Steam saves carry an extra 4-byte marker
(FD 00 00 00) there which Retail saves lack.

| Block 1 size | Byte at 0x58 | Save type |
|--------------|--------------|-----------|
| 0x0708       | 0xE8         | Retail    |
| 0x0708       | 0xFD         | Steam     |
| 0x0764       | any          | Android   |
| 0x075C       | any          | iOS       |
"""

import struct
from dataclasses import dataclass
from enum import Enum


# =============================================================================
# CONSTANTS
# =============================================================================

BLOCK_COUNT = 23

# Every block is preceded by its u32 size
BLOCK_PREFIX_SIZE = 4

# PC platform marker
PLATFORM_MARKER_OFFSET = 0x0058
STEAM_MARKER = bytes([0xFD, 0x00, 0x00, 0x00])
RETAIL_MARKER_BYTE = 0xE8
STEAM_MARKER_BYTE = 0xFD

# Block 1 sizes per platform
BLOCK1_SIZE_PC = 0x0708
BLOCK1_SIZE_ANDROID = 0x0764
BLOCK1_SIZE_IOS = 0x075C


class SaveType(Enum):
    """Platform variant of a save file"""
    UNKNOWN = 0
    RETAIL = 1
    STEAM = 2
    ANDROID = 3     # detected only, not convertible
    IOS = 4         # detected only, not convertible

    @property
    def label(self) -> str:
        return self.name

    @property
    def is_pc(self) -> bool:
        return self in (SaveType.RETAIL, SaveType.STEAM)


# =============================================================================
# BLOCK TABLE
# =============================================================================

@dataclass
class Block:
    """Location of one block's data inside the save"""
    index: int      # absolute start of the block's data (after its size prefix)
    size: int       # u32 size read from the prefix
    end: int        # index + size

    @property
    def prefix_offset(self) -> int:
        return self.index - BLOCK_PREFIX_SIZE

    def __str__(self):
        return f"Block(index=0x{self.index:05X}, size=0x{self.size:04X}, end=0x{self.end:05X})"


def generate_block_info(data: bytes) -> list:
    """
    Walk the size prefixes and locate all 23 blocks.

    Args:
        data: Full save buffer

    Returns:
        List of 23 Block objects in file order

    Raises:
        struct.error: a size prefix lies past the end of the buffer
    """
    blocks = []
    offset = 0x0000                 # absolute address of the next size prefix
    block_start_address = 0x0004    # absolute address of the next block's data

    for _ in range(BLOCK_COUNT):
        size = struct.unpack_from('<I', data, offset)[0]

        blocks.append(Block(index=block_start_address,
                            size=size,
                            end=block_start_address + size))

        # Skip the data and the 4-byte gap before the next block's data
        offset += size + BLOCK_PREFIX_SIZE
        block_start_address = offset + BLOCK_PREFIX_SIZE

    return blocks


# =============================================================================
# SAVE TYPE DETECTION
# =============================================================================

def find_save_type(data: bytes, blocks: list) -> SaveType:
    """
    Classify a save by block 1's size and, for PC saves, the byte at 0x58.

    Args:
        data: Full save buffer
        blocks: Block table from generate_block_info()

    Returns:
        SaveType
    """
    block1_size = blocks[1].size

    if block1_size == BLOCK1_SIZE_PC:
        value = data[PLATFORM_MARKER_OFFSET]
        if value == RETAIL_MARKER_BYTE:
            return SaveType.RETAIL
        if value == STEAM_MARKER_BYTE:
            return SaveType.STEAM
        return SaveType.UNKNOWN

    if block1_size == BLOCK1_SIZE_ANDROID:
        return SaveType.ANDROID
    if block1_size == BLOCK1_SIZE_IOS:
        return SaveType.IOS

    return SaveType.UNKNOWN
