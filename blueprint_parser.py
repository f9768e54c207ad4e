#!/usr/bin/env python3
"""
Dyson Sphere Program - Blueprint Parser
=======================================

Reads a blueprint .txt file and prints a report of the envelope, the hash
check and the decoded binary data.

Usage:
------
    python blueprint_parser.py factory.txt
    python blueprint_parser.py factory.txt --stations
    python blueprint_parser.py factory.txt --json
    python blueprint_parser.py factory.txt --no-verify --verbose
"""

import sys
import argparse
from collections import Counter

from blueprint import Blueprint, verify_hash
from bp_data import BlueprintData, BlueprintDataParser
from bp_errors import BlueprintError, HashMismatchError
from bp_station import StationParameters
from dsp_entities import format_item


def print_envelope(bp: Blueprint):
    layout = bp.layout_kind()
    layout_name = layout.name if layout is not None else "unknown"

    print("=" * 80)
    print("BLUEPRINT")
    print("=" * 80)
    print(f"Game version:  {bp.game_version}")
    print(f"Created:       {bp.timestamp}")
    print(f"Icon layout:   {bp.layout} ({layout_name})")
    for i, icon in enumerate(bp.icons):
        if icon:
            print(f"Icon {i}:        {format_item(icon)}")
    print(f"Short desc:    {bp.short_desc}")
    if bp.long_desc:
        print(f"Long desc:     {bp.long_desc}")
    print(f"Data size:     {len(bp.data)} bytes")
    print(f"Hash:          {bp.hash_value}")


def print_data_summary(data: BlueprintData):
    header = data.header

    print()
    print("=" * 80)
    print("DATA")
    print("=" * 80)
    print(f"Patch:         {header.patch}")
    print(f"Cursor:        ({header.cursor_offset_x}, {header.cursor_offset_y}) "
          f"area {header.cursor_target_area}")
    print(f"Drag box:      {header.dragbox_size_x} x {header.dragbox_size_y}")
    print(f"Primary area:  {header.primary_area_index}")
    print(f"Areas:         {len(data.areas)}")
    for area in data.areas:
        print(f"  {area}")

    print(f"Buildings:     {len(data.buildings)}")
    counts = Counter(b.item_id for b in data.buildings)
    for item_id, count in counts.most_common():
        print(f"  {count:5d} x {format_item(item_id)}")


def print_stations(data: BlueprintData):
    print()
    print("=" * 80)
    print("LOGISTICS STATIONS")
    print("=" * 80)

    found = 0
    for building in data.buildings:
        params = building.get_parameters()
        if not isinstance(params, StationParameters):
            continue
        found += 1
        kind = "Interstellar" if params.is_interstellar() else "Planetary"
        print(f"\n{kind} station #{building.index}")
        print("-" * 40)
        for i, entry in enumerate(params.storage):
            if entry is None:
                print(f"  Storage {i}: empty")
                continue
            print(f"  Storage {i}: {format_item(entry.item_id)} "
                  f"local={entry.local_logic} remote={entry.remote_logic} "
                  f"max={entry.max_count}")
        for i, slot in enumerate(params.slots):
            if slot is not None:
                print(f"  Slot {i:2d}: {slot.direction.name} -> storage {slot.storage_index}")
        settings = params.parameters
        print(f"  Drones: {settings.drone_count}  Vessels: {settings.vessel_count}  "
              f"Warper: {'yes' if settings.equip_warper else 'no'}")

    if not found:
        print("No logistics stations")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Dyson Sphere Program blueprint parser',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python blueprint_parser.py factory.txt
  python blueprint_parser.py factory.txt --stations
  python blueprint_parser.py factory.txt --json > factory.json
"""
    )
    parser.add_argument('blueprint', help='Blueprint text file')
    parser.add_argument('--no-verify', action='store_true',
                        help='Skip the MD5F hash check')
    parser.add_argument('--json', action='store_true',
                        help='Print the decoded blueprint as JSON')
    parser.add_argument('--stations', action='store_true',
                        help='Print logistics station configuration')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Trace every decoded record with its offset')

    args = parser.parse_args(argv)

    try:
        with open(args.blueprint, 'r', encoding='utf-8') as f:
            text = f.read().strip()

        if args.json:
            bp = Blueprint.from_blueprint_string(text, validate_hash=not args.no_verify)
            print(bp.to_json(indent=2))
            return 0

        bp = Blueprint.from_blueprint_string(text, validate_hash=False)
        print_envelope(bp)
        if args.no_verify:
            print("Hash check:    SKIPPED")
        else:
            try:
                verify_hash(text)
                print("Hash check:    PASS")
            except HashMismatchError as e:
                print("Hash check:    FAIL")
                print(f"ERROR: {e}")
                return 1

        data = BlueprintDataParser(verbose=args.verbose).parse(bp.data)
        print_data_summary(data)
        if args.stations:
            print_stations(data)
    except (BlueprintError, OSError) as e:
        print(f"ERROR: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
