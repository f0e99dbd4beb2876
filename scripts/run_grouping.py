#!/usr/bin/env python3
"""
Run the grouping engine over a roster file.

The roster is JSON: either a list of camper records, or an object with a
"campers" list and an optional "camp_start_date". Output is the full
GroupingOutput as JSON, written to --output or printed to stdout.

Usage:
    python scripts/run_grouping.py --roster roster.json --camp-start 2025-06-16
    python scripts/run_grouping.py --roster roster.json --camp-start 2025-06-16 --num-groups 6 --output groups.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import Any

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pydantic import TypeAdapter, ValidationError

from grouping.config import GroupingError, resolve_grouping_config
from grouping.logging_config import configure_logging
from grouping.models import RawCamper
from grouping.pipeline import run_camp_grouping

logger = logging.getLogger(__name__)

_roster_adapter = TypeAdapter(list[RawCamper])


def load_roster(path: Path) -> tuple[list[RawCamper], str | None]:
    """Read a roster file. Returns the campers and the camp start date if the file has one."""
    data: Any = json.loads(path.read_text())
    camp_start = None
    if isinstance(data, dict):
        camp_start = data.get("camp_start_date")
        data = data.get("campers", [])
    return _roster_adapter.validate_python(data), camp_start


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Place campers into groups")
    parser.add_argument("--roster", type=Path, required=True, help="Roster JSON file")
    parser.add_argument("--camp-start", help="First day of camp (YYYY-MM-DD); defaults to the roster's camp_start_date")
    parser.add_argument("--num-groups", type=int, help="Number of groups")
    parser.add_argument("--max-group-size", type=int, help="Maximum campers per group")
    parser.add_argument("--max-grade-spread", type=int, help="Maximum grade spread inside a group")
    parser.add_argument("--preserve-overrides", action="store_true", help="Keep manual placements from the roster")
    parser.add_argument("--output", type=Path, help="Write output JSON here instead of stdout")
    parser.add_argument("--debug", action="store_true", help="Debug logging and per-decision phase log")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(source="cli", debug=args.debug, stream=sys.stderr)

    try:
        campers, roster_start = load_roster(args.roster)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Could not read roster {args.roster}: {e}")
        return 1

    camp_start_text = args.camp_start or roster_start
    if not camp_start_text:
        logger.error("No camp start date: pass --camp-start or set camp_start_date in the roster")
        return 1
    try:
        camp_start = date.fromisoformat(camp_start_text)
    except ValueError:
        logger.error(f"Invalid camp start date: {camp_start_text}")
        return 1

    try:
        config = resolve_grouping_config(
            {
                "num_groups": args.num_groups,
                "max_group_size": args.max_group_size,
                "max_grade_spread": args.max_grade_spread,
            }
        )
        output = run_camp_grouping(
            campers,
            camp_start,
            config,
            preserve_manual_overrides=args.preserve_overrides,
            debug_mode=args.debug,
        )
    except GroupingError as e:
        logger.error(f"Grouping failed: {e}")
        return 1

    payload = output.model_dump_json(indent=2)
    if args.output:
        args.output.write_text(payload)
        logger.info(f"Wrote {len(output.groups)} groups to {args.output}")
    else:
        print(payload)

    if not output.success:
        logger.warning(f"Grouping finished with {output.stats.constraint_violations} hard violation(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
