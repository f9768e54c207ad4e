#!/usr/bin/env python3
"""
Blueprint JSON Converter
========================

Converts Dyson Sphere Program blueprint strings to JSON and back. The JSON
tree holds the envelope fields and the fully decoded binary data, so edits
to buildings or areas are re-encoded when converting back.

Usage:
    # Blueprint to JSON
    python blueprint_json.py factory.txt -o factory.json --pretty

    # JSON back to a blueprint string (hash is recomputed)
    python blueprint_json.py factory.json -o factory_new.txt --to-blueprint
"""

import sys
import os
import json
import argparse

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from blueprint import Blueprint
from bp_errors import BlueprintError


def blueprint_to_json(input_path: str, validate_hash: bool = True) -> dict:
    bp = Blueprint.read_from_file(input_path, validate_hash=validate_hash)
    return bp.to_dict()


def json_to_blueprint(json_data: dict, output_path: str) -> str:
    bp = Blueprint.from_dict(json_data)
    text = bp.serialize()
    Blueprint.write_text(text, output_path)
    return text


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Convert Dyson Sphere Program blueprints to/from JSON',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python blueprint_json.py factory.txt -o factory.json --pretty
  python blueprint_json.py factory.json --to-blueprint -o factory_new.txt
        """
    )

    parser.add_argument('input', help='Input file (blueprint text or JSON)')
    parser.add_argument('-o', '--output', required=True, help='Output file')
    parser.add_argument('--to-blueprint', action='store_true',
                        help='Convert JSON to a blueprint string')
    parser.add_argument('--pretty', action='store_true',
                        help='Pretty-print JSON output with indentation')
    parser.add_argument('--no-verify', action='store_true',
                        help='Skip the MD5F hash check when reading a blueprint')

    args = parser.parse_args(argv)

    try:
        if args.to_blueprint:
            print("Converting JSON to blueprint")
            print(f"  Input: {args.input}")

            with open(args.input, 'r', encoding='utf-8') as f:
                json_data = json.load(f)

            text = json_to_blueprint(json_data, args.output)
            print(f"  Buildings: {len(json_data['data'].get('buildings', []))}")
            print(f"  Output: {args.output}")
            print(f"  Length: {len(text)} characters")
        else:
            print("Converting blueprint to JSON")
            print(f"  Input: {args.input}")

            json_data = blueprint_to_json(args.input, validate_hash=not args.no_verify)

            print(f"  Game version: {json_data['game_version']}")
            print(f"  Areas: {len(json_data['data']['areas'])}")
            print(f"  Buildings: {len(json_data['data']['buildings'])}")

            with open(args.output, 'w', encoding='utf-8') as f:
                if args.pretty:
                    json.dump(json_data, f, indent=2)
                else:
                    json.dump(json_data, f)

            print(f"  Output: {args.output}")
    except (BlueprintError, OSError, KeyError, TypeError) as e:
        print(f"ERROR: {e}")
        return 1

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
