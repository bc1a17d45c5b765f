"""
Command-line interface for the item text parser.

Reads item text copied from the game (from a file or stdin), parses it and
prints the result as JSON.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.config import Config
from core.item_models import ItemRecord
from core.item_parser import ItemParser
from core.logging_setup import setup_logging
from data_sources.reference_loader import ReferenceDataError, ReferenceDataLoader

logger = logging.getLogger(__name__)


def item_to_json(item: ItemRecord, include_mods: bool = False) -> Dict[str, Any]:
    """Serialize an item, optionally with its matched mods and pseudo stats."""
    result = item.to_dict()

    if include_mods:
        result["filters"] = [m.to_dict() for m in item.filters.values()]
        result["pseudos"] = [m.to_dict() for m in item.pseudos.values()]
        if item.errors:
            result["errors"] = list(item.errors)

    return result


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="PoE Item Parser - Convert copied item text to JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m core.cli item.txt                  # Parse one item
  python -m core.cli < item.txt                # Read from stdin
  python -m core.cli --all item.txt            # Include mods and pseudo stats
  python -m core.cli --multiple stash.txt      # Several items in one file
  python -m core.cli --data-dir ~/poe-data     # Use downloaded reference data
        """
    )

    parser.add_argument("file", nargs="?", help="File with item text (default: stdin)")
    parser.add_argument("--data-dir", help="Directory holding the reference data files")
    parser.add_argument("--config", help="Config file (default: ~/.poe_item_parser/config.json)")
    parser.add_argument("--all", action="store_true", help="Include matched mods and pseudo stats")
    parser.add_argument("--multiple", action="store_true", help="Parse every item in the input")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser


def cli_main(argv: Optional[List[str]] = None) -> int:
    """Command-line interface for the item parser. Returns the exit code."""
    args = build_arg_parser().parse_args(argv)

    config = Config(Path(args.config) if args.config else None)
    if args.data_dir:
        config.data["data"]["dir"] = args.data_dir

    setup_logging(debug=args.debug or config.debug)

    if args.file:
        try:
            text = Path(args.file).read_text(encoding="utf-8")
        except OSError as e:
            print(f"Cannot read {args.file}: {e}", file=sys.stderr)
            return 1
    else:
        text = sys.stdin.read()

    try:
        reference_data = ReferenceDataLoader(config).load_all()
    except ReferenceDataError as e:
        logger.error(f"Failed to load reference data: {e}")
        print(f"Failed to load reference data: {e}", file=sys.stderr)
        return 1

    parser = ItemParser(reference_data, strict_merge=config.strict_merge)

    if args.multiple:
        items = parser.parse_multiple(text)
    else:
        item = parser.parse(text)
        items = [item] if item is not None else []

    if not items:
        print("No item found in input.", file=sys.stderr)
        return 1

    output: Any = [item_to_json(i, args.all) for i in items]
    if not args.multiple:
        output = output[0]

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(cli_main())
