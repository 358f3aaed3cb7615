"""
Entry point for the legacy content → Portable Text conversion tool.

Usage:
  python main.py --input docs/reviews-export.csv --output reports/converted
  python main.py --html docs/article.html --drop-column-breaks
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import List, Optional

from legacy_migrator.config import DEFAULT_CONFIG_FILE, ConfigError, load_config
from legacy_migrator.migration_tool import ContentMigrationTool


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert legacy CMS HTML content into Portable Text JSON documents."
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_FILE,
        help=f"Path to the JSON config file (default: {DEFAULT_CONFIG_FILE})",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", help="CSV export with one record per row")
    source.add_argument("--html", help="Single HTML file; the result is printed to stdout")
    parser.add_argument("--output", help="Output directory (default: migration.output_dir)")
    parser.add_argument(
        "--drop-column-breaks",
        action="store_true",
        help="Remove the pagebreak column marker instead of converting it",
    )
    parser.add_argument(
        "--heading-limit",
        type=int,
        choices=(1, 2),
        help="Number of heading levels the target schema accepts",
    )
    parser.add_argument("--limit", type=int, help="Convert at most this many records")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> dict:
    """Load the config file and apply command line overrides on top of it."""
    config = load_config(args.config)
    if args.drop_column_breaks:
        config["converter"]["drop_column_break_marker"] = True
    if args.heading_limit is not None:
        config["converter"]["heading_style_limit"] = args.heading_limit
    if args.limit is not None:
        config["migration"]["limit"] = args.limit
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function to run the conversion tool.
    """
    args = parse_args(argv)
    try:
        tool = ContentMigrationTool(build_config(args))
    except ConfigError as e:
        print(f"[ERROR] {e}")
        return 2

    if args.html:
        if not os.path.exists(args.html):
            tool.log_message(f"HTML file not found: {args.html}", level="ERROR")
            return 1
        with open(args.html, "r", encoding="utf-8") as f:
            record = {"ID": os.path.splitext(os.path.basename(args.html))[0], "ContentHTML": f.read()}
        result = tool.convert_record(record)
        json.dump(result.to_payload(), sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
        return 0

    tool.log_message("Starting legacy content conversion.")
    records = tool.extract_records(args.input)
    if not records:
        tool.log_message(f"No records found in '{args.input}'.", level="ERROR")
        return 1

    tool.log_message(f"Found a total of {len(records)} records to convert.")
    tool.convert_records(records, args.output)
    tool.log_message("Conversion process finished.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
