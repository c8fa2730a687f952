"""Synthetic VC save files for the tests."""

import struct

import pytest

FILE_SIZE = 0x31464
CHECKSUM_OFFSET = 0x31460

RETAIL_BLOCK_SIZES = [0x0100, 0x0708] + [0x1000] * 21


def block_fill(num: int, size: int) -> bytearray:
    return bytearray((num * 31 + k * 7 + 1) & 0xFF for k in range(size))


def stored_checksum_bytes(data: bytes) -> bytes:
    """Checksum slot contents: the byte sum, little-endian."""
    return struct.pack('<I', sum(data) & 0xFFFFFFFF)


def build_save(block_sizes=None, marker_byte=0xE8, padding_fill=0x00) -> bytes:
    """
    Build a well-formed save: 23 size-prefixed blocks, a padding-size field,
    padding up to the checksum slot, and a valid checksum.
    """
    block_sizes = block_sizes or RETAIL_BLOCK_SIZES
    assert len(block_sizes) == 23

    out = bytearray()
    for num, size in enumerate(block_sizes):
        out += struct.pack('<I', size)
        out += block_fill(num, size)

    if len(out) > 0x58:
        out[0x58] = marker_byte

    padding_size = CHECKSUM_OFFSET - len(out) - 4
    assert padding_size >= 0
    out += struct.pack('<I', padding_size)
    out += bytes([padding_fill]) * padding_size

    assert len(out) == CHECKSUM_OFFSET
    out += stored_checksum_bytes(out)
    return bytes(out)


def insert_steam_marker(retail: bytes) -> bytes:
    """Independent construction of the Steam equivalent of a retail save."""
    sizes = list(RETAIL_BLOCK_SIZES)
    data = bytearray(retail[:CHECKSUM_OFFSET])
    data[0x58:0x58] = b'\xFD\x00\x00\x00'
    struct.pack_into('<I', data, 0, sizes[0] + 4)
    padding_offset = 4 * 23 + sum(sizes) + 4
    padding_size = struct.unpack_from('<I', data, padding_offset)[0]
    struct.pack_into('<I', data, padding_offset, padding_size - 4)
    data = data[:CHECKSUM_OFFSET]
    data += stored_checksum_bytes(data)
    return bytes(data)


@pytest.fixture
def retail_bytes():
    return build_save()


@pytest.fixture
def steam_bytes(retail_bytes):
    return insert_steam_marker(retail_bytes)


@pytest.fixture
def android_bytes():
    sizes = list(RETAIL_BLOCK_SIZES)
    sizes[1] = 0x0764
    return build_save(sizes)


@pytest.fixture
def ios_bytes():
    sizes = list(RETAIL_BLOCK_SIZES)
    sizes[1] = 0x075C
    return build_save(sizes)


@pytest.fixture
def write_save(tmp_path):
    def _write(data: bytes, name: str = "GTAVCsf1.b") -> str:
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)
    return _write


def with_last_block_size(data: bytes, size: int) -> bytes:
    """Rewrite block 22's size prefix and fix up the checksum."""
    out = bytearray(data)
    offset = 0
    for _ in range(22):
        offset += struct.unpack_from('<I', out, offset)[0] + 4
    struct.pack_into('<I', out, offset, size)
    out[CHECKSUM_OFFSET:] = stored_checksum_bytes(out[:CHECKSUM_OFFSET])
    return bytes(out)
