"""
Command line interface printing river conditions as JSON.

Usage:
    riverconditions rivers
    riverconditions record mckenzie_hayden
    riverconditions conditions willamette_eugene
    riverconditions report
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .conditions import get_fishing_conditions
from .config import Config
from .engine import get_river_record
from .reports import get_fly_shop_report
from .rivers import list_rivers


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="riverconditions",
        description="Report real-time river fishing conditions",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("rivers", help="List configured rivers")

    record = subparsers.add_parser("record", help="Flow and temperature for a river")
    record.add_argument("river", help="River identifier (e.g. mckenzie_hayden)")
    record.add_argument(
        "--sources", action="store_true", help="Include per-source fetch status"
    )

    conditions = subparsers.add_parser(
        "conditions", help="Flow, weather and fly advice for a river"
    )
    conditions.add_argument("river", help="River identifier (e.g. mckenzie_hayden)")

    subparsers.add_parser("report", help="Latest fly-shop report")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    config = Config.load()

    if args.command == "rivers":
        output = list_rivers()
    elif args.command == "record":
        record = get_river_record.sync(args.river, config=config.upstream)
        output = record.to_dict(include_sources=args.sources)
    elif args.command == "conditions":
        output = get_fishing_conditions.sync(
            args.river,
            weather_config=config.weather,
            upstream_config=config.upstream,
        ).to_dict()
    else:
        output = get_fly_shop_report.sync(config.report).to_dict()

    json.dump(output, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
