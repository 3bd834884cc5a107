#!/usr/bin/env python3
"""Command line entry point: summarize one access log file."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from access_stats.services.aggregator import analyze_lines
from access_stats.services.parser import DEFAULT_FORMAT, PARSERS, get_parser
from access_stats.services.renderer import render_text
from access_stats.services.storage import LogStore


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="access-stats",
        description="Status codes, body-size statistics and notable endpoints of an access log",
    )
    p.add_argument("input", help="Path to the access log file")
    p.add_argument(
        "--format",
        choices=sorted(PARSERS),
        default=DEFAULT_FORMAT,
        help=f"Log line format (default: {DEFAULT_FORMAT})",
    )
    p.add_argument("--json", action="store_true", help="Print the report as JSON")
    p.add_argument("-v", "--verbose", action="store_true", help="Log every skipped line")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    store = LogStore(args.input)
    try:
        report = analyze_lines(store.read_lines(), get_parser(args.format))
    except OSError as e:
        print(f"Error reading log file: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report.as_dict(), indent=2))
    else:
        print(render_text(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
