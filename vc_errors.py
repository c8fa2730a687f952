#!/usr/bin/env python3
"""
Errors raised while loading or converting VC save files.

All of them are fatal for the file being processed: nothing here is retried,
and a bad checksum is reported, never repaired. Filesystem problems surface as
the built-in OSError family.
"""


class SaveFileError(ValueError):
    """Base class for malformed or unsupported save files."""


class SizeMismatchError(SaveFileError):
    """File is not exactly FILE_SIZE bytes long."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"INVALID SAVE FILE! ALL GTA:VC SAVES MUST BE 0x{expected:04X} BYTES LARGE.\n"
            f"FILE IS: 0x{actual:04X} BYTES LARGE.\n\n"
            f"Are you sure the loaded savefile is from GTA: Vice City?"
        )


class ChecksumMismatchError(SaveFileError):
    """Stored checksum does not match the checksum of the save data."""

    def __init__(self, stored: int, calculated: int):
        self.stored = stored
        self.calculated = calculated
        super().__init__(
            f"Save file possibly corrupted as checksum failed.\n"
            f"Expected: {stored:08X},\n"
            f"Got: {calculated:08X}"
        )


class UnsupportedVariantError(SaveFileError):
    """Save type cannot be converted (Android, iOS or unrecognised)."""

    def __init__(self, save_type):
        self.save_type = save_type
        super().__init__(f"Format not supported: {save_type.label}")


class ConversionNotSupportedError(SaveFileError):
    """Requested conversion has no meaning for this save."""

    def __init__(self, source, target, reason: str = None):
        self.source = source
        self.target = target
        message = f"Cannot convert {source.label} save to {target.label if target else 'unknown'}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
