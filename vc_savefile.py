#!/usr/bin/env python3
"""
GTA: Vice City PC save file container
=====================================

Loads a save, validates its size and checksum, locates its 23 blocks and
detects whether it is a Retail or Steam save. Converts between the two and
writes the result back out with a fresh checksum.

All multi-byte fields are little-endian except the checksum slot.

Usage:
    save = SaveFile.load("GTAVCsf1.b")
    print(save.save_type.label)
    save.convert_save()            # converts and overwrites in place
"""

import os

import vc_converter
from vc_blocks import BLOCK_COUNT, SaveType, find_save_type, generate_block_info
from vc_checksum import (
    FILE_SIZE,
    SAVE_DATA,
    calculate_checksum,
    checksum_is_valid,
    read_checksum,
    write_checksum,
)
from vc_errors import ChecksumMismatchError, SizeMismatchError


class SaveFile:
    """A loaded save: buffer plus checksum, save type and block table"""

    def __init__(self, data: bytearray, checksum: int, save_type: SaveType,
                 blocks: list, save_location: str = None):
        self.data = data
        self.checksum = checksum
        self.save_type = save_type
        self.blocks = blocks                # all 23 blocks
        self.save_location = save_location

    # =========================================================================
    # LOADING
    # =========================================================================

    @classmethod
    def load(cls, save_path: str) -> 'SaveFile':
        """
        Load and validate a save file from disk.

        Raises:
            FileNotFoundError: path does not exist
            IsADirectoryError: path is a directory
            SizeMismatchError: file is not FILE_SIZE bytes
            ChecksumMismatchError: stored checksum is wrong
        """
        if os.path.isdir(save_path):
            raise IsADirectoryError(f"Unable to read save file, path is a directory: {save_path}")

        # Make sure the file is the right size before loading it in memory
        file_size = os.path.getsize(save_path)
        if file_size != FILE_SIZE:
            raise SizeMismatchError(FILE_SIZE, file_size)

        with open(save_path, 'rb') as f:
            data = f.read()

        return cls.from_bytes(data, save_location=save_path)

    @classmethod
    def from_bytes(cls, data: bytes, save_location: str = None) -> 'SaveFile':
        """
        Build a SaveFile from an in-memory save.

        Checks run in order: size, checksum, then block walk.
        """
        if len(data) != FILE_SIZE:
            raise SizeMismatchError(FILE_SIZE, len(data))

        buffer = bytearray(data)

        stored = read_checksum(buffer)
        valid, calculated = checksum_is_valid(buffer[SAVE_DATA], stored)
        if not valid:
            raise ChecksumMismatchError(stored, calculated)

        blocks = generate_block_info(buffer)
        save_type = find_save_type(buffer, blocks)

        return cls(buffer, calculated, save_type, blocks, save_location)

    # =========================================================================
    # CONVERSION
    # =========================================================================

    def convert(self, target: SaveType = None) -> tuple:
        """
        Convert Retail to Steam or Steam to Retail in memory.

        The block table and save type are rebuilt from the converted buffer;
        the checksum is left stale until export. If the conversion raises,
        data, blocks and save type are unchanged.

        Returns:
            Tuple of (old_type, new_type)
        """
        old_type = self.save_type
        new_type = vc_converter.convert(self.data, self.blocks, old_type, target)

        self.blocks = generate_block_info(self.data)
        self.save_type = find_save_type(self.data, self.blocks)

        return old_type, new_type

    def convert_save(self, path: str = None, target: SaveType = None) -> tuple:
        """Convert, then export to path (default: where the save was loaded from)."""
        old_type, new_type = self.convert(target)
        self.export(path)
        return old_type, new_type

    # =========================================================================
    # EXPORT
    # =========================================================================

    def update_checksum(self) -> int:
        """Recalculate the checksum from the current buffer and write it in."""
        self.checksum = calculate_checksum(self.data[SAVE_DATA])
        write_checksum(self.data, self.checksum)
        return self.checksum

    def to_bytes(self) -> bytes:
        self.update_checksum()
        return bytes(self.data)

    def export(self, path: str = None) -> str:
        """
        Write the save to path with a freshly calculated checksum.

        Returns:
            Path written to
        """
        path = path or self.save_location
        if path is None:
            raise ValueError("No export path given and save was not loaded from a file")

        output = self.to_bytes()
        with open(path, 'wb') as f:
            f.write(output)

        return path

    # =========================================================================
    # INFO
    # =========================================================================

    def describe_blocks(self) -> list:
        """
        Rows describing the block table, for display.

        Returns:
            List of dicts with block number, prefix offset, index, size and end
        """
        rows = []
        for num, block in enumerate(self.blocks):
            rows.append({
                'block': num,
                'prefix_offset': block.prefix_offset,
                'index': block.index,
                'size': block.size,
                'end': block.end,
            })
        return rows

    def __repr__(self):
        return (f"SaveFile(save_type={self.save_type.label}, "
                f"checksum=0x{self.checksum:08X}, "
                f"blocks={len(self.blocks)}/{BLOCK_COUNT}, "
                f"save_location={self.save_location!r})")
