#!/usr/bin/env python3
"""
VC Save Tool - Convert GTA: Vice City PC saves between Retail and Steam
======================================================================

Loads a save, shows the detected version and asks before converting it to
the other PC version. The original is backed up to <save>.bak before being
overwritten.

Platform Differences:
--------------------
| Aspect              | Retail          | Steam                     |
|---------------------|-----------------|---------------------------|
| Byte at 0x58        | 0xE8            | 0xFD (marker FD 00 00 00) |
| Block 0 size        | n               | n + 4                     |
| Padding size        | p               | p - 4                     |
| File size           | 0x31464         | 0x31464                   |

Android (block 1 size 0x0764) and iOS (0x075C) saves are detected but
cannot be converted.

Usage:
------
    python vc_save_tool.py GTAVCsf1.b                 # Detect, ask, convert in place
    python vc_save_tool.py GTAVCsf1.b -y              # Convert without asking
    python vc_save_tool.py GTAVCsf1.b -o out.b        # Write converted save elsewhere
    python vc_save_tool.py GTAVCsf1.b --info          # Show block table only
"""

import sys
import os
import shutil
import argparse
import traceback

from vc_blocks import SaveType
from vc_errors import SaveFileError
from vc_savefile import SaveFile


def print_block_table(save: SaveFile):
    """Print the 23-entry block table."""
    print(f"{'Block':>5}  {'Prefix':>8}  {'Data':>8}  {'Size':>8}  {'End':>8}")
    print("-" * 46)
    for row in save.describe_blocks():
        print(f"{row['block']:5d}  0x{row['prefix_offset']:06X}  0x{row['index']:06X}  "
              f"0x{row['size']:06X}  0x{row['end']:06X}")


def prompt_conversion(save_type: SaveType) -> bool:
    """
    Ask the user whether to convert. Returns True only for an answer
    starting with 'y' or 'Y'.
    """
    if save_type == SaveType.STEAM:
        question = "STEAM version detected, convert to RETAIL? y/N? "
    else:
        question = "RETAIL version detected, convert to STEAM? y/N? "

    try:
        answer = input(question)
    except (EOFError, KeyboardInterrupt):
        print()
        return False

    return answer[:1] in ('y', 'Y')


def backup_save(save_path: str) -> str:
    """Copy the original save next to itself as <save>.bak."""
    backup_location = f"{save_path}.bak"
    shutil.copy2(save_path, backup_location)
    return backup_location


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Convert GTA: Vice City saves between the Retail and Steam PC versions',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s GTAVCsf1.b                # Detect, ask, back up and convert in place
  %(prog)s GTAVCsf1.b -y             # Convert without asking
  %(prog)s GTAVCsf1.b -o GTAVCsf2.b  # Keep the original, write the converted save elsewhere
  %(prog)s GTAVCsf1.b --info         # Show save type and block table only
        """)
    parser.add_argument('savefile', help='Path to the VC save file')
    parser.add_argument('-o', '--output', help='Output save file (default: overwrite input)')
    parser.add_argument('-y', '--yes', action='store_true', help='Convert without asking')
    parser.add_argument('--no-backup', action='store_true',
                        help='Do not write <save>.bak before overwriting the input')
    parser.add_argument('-i', '--info', action='store_true',
                        help='Print save type and block table, then exit')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    args = parser.parse_args(argv)

    print("=" * 70)
    print("VC Save Tool - GTA: Vice City save converter (PC versions)")
    print("=" * 70)
    print()

    try:
        save = SaveFile.load(args.savefile)
    except (SaveFileError, OSError) as e:
        print(f"ERROR: {e}")
        if args.verbose:
            traceback.print_exc()
        return 1

    print(f"Successfully loaded: {args.savefile}")
    print(f"Save type:  {save.save_type.label}")
    print(f"Checksum:   0x{save.checksum:08X} [PASS]")
    print()

    if args.info or args.verbose:
        print_block_table(save)
        print()
    if args.info:
        return 0

    if save.save_type in (SaveType.ANDROID, SaveType.IOS):
        print("ERROR: Android and iOS saves are not supported")
        return 1
    if save.save_type == SaveType.UNKNOWN:
        print("ERROR: Cannot determine save type")
        return 1

    if not args.yes and not prompt_conversion(save.save_type):
        print("User aborted")
        return 1

    output = args.output or args.savefile
    in_place = os.path.abspath(output) == os.path.abspath(args.savefile)

    try:
        if in_place and not args.no_backup:
            backup_location = backup_save(args.savefile)
            print(f"Original save backed up to: {backup_location}")

        old_type, new_type = save.convert_save(output)
    except (SaveFileError, OSError) as e:
        print(f"ERROR: {e}")
        if args.verbose:
            traceback.print_exc()
        return 1

    print(f"Converted save from {old_type.label} to {new_type.label}")
    print(f"Checksum:   0x{save.checksum:08X}")
    print(f"Exported successfully to: {output}")

    if args.verbose:
        print()
        print_block_table(save)

    return 0


if __name__ == "__main__":
    sys.exit(main())
