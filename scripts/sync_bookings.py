"""Run one RevSport sync and print boats and bookings as JSON or a table.

Standalone CLI script for checking a club's RevSport credentials and the
parser output without the API server. Logs in, reads the boat list and each
boat's calendar, and writes the result to stdout or a file.

Run with: python scripts/sync_bookings.py
Table:    python scripts/sync_bookings.py --table
Range:    python scripts/sync_bookings.py --start 2025-11-21 --days 3
Output:   python scripts/sync_bookings.py --output data/sync.json
Debug:    python scripts/sync_bookings.py --debug

Credentials come from REVSPORT_URL / REVSPORT_USER / REVSPORT_PASS in .env.

Exit codes:
  0 = sync succeeded (possibly with warnings)
  1 = sync failed (message on stderr)
"""

import argparse
import asyncio
import json
import os
import sys
from datetime import date, timedelta
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.boatsync.adapter import RevSportAdapter  # noqa: E402
from src.boatsync.config import get_config  # noqa: E402
from src.boatsync.logging import setup_logging  # noqa: E402
from src.boatsync.models import DateRange, SyncResult  # noqa: E402


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Sync boats and bookings from RevSport.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--start",
        type=date.fromisoformat,
        default=None,
        help="First day to sync, YYYY-MM-DD (default: today).",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Number of days to sync (default: DAYS_AHEAD from config).",
    )
    parser.add_argument(
        "--table",
        action="store_true",
        help="Output a human-readable table of boats to stdout.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the JSON result to this file instead of stdout.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log every login/request step.",
    )
    return parser.parse_args()


def _format_table(result: SyncResult) -> str:
    """Format boats as a human-readable table.

    Columns: ID | Type | Class | Name | Bookings | Damaged
    """
    if not result.boats:
        return "(no boats)"

    headers = ["ID", "Type", "Class", "Name", "Bookings", "Damaged"]

    rows = []
    for boat in result.boats:
        rows.append(
            [
                boat.external_id,
                boat.boat_type or boat.category,
                boat.classification or "-",
                boat.name,
                str(len(result.bookings_for(boat.external_id))),
                "yes" if boat.is_damaged else "",
            ]
        )

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    header_line = " | ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    separator = "-+-".join("-" * w for w in widths)

    row_lines = []
    for row in rows:
        row_lines.append(
            " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(row))
        )

    return "\n".join([header_line, separator, *row_lines])


async def main(args: argparse.Namespace) -> int:
    config = get_config()
    setup_logging(
        json_output=config.log_json,
        log_level=config.log_level,
        debug=args.debug or config.debug,
    )

    if not config.revsport_user or not config.revsport_pass:
        _log("  ERROR: REVSPORT_USER / REVSPORT_PASS missing from environment")
        return 1

    start = args.start or date.today()
    days = args.days or config.days_ahead
    date_range = DateRange(start=start, end=start + timedelta(days=days - 1))

    _log(f"sync_bookings: starting ({config.revsport_url}, {date_range.start} to {date_range.end})")

    adapter_config = config.adapter_config()
    if args.debug:
        adapter_config.debug = True

    async with RevSportAdapter(adapter_config) as adapter:
        result = await adapter.sync(date_range)

    for warning in result.warnings:
        _log(f"  WARNING: {warning}")

    if not result.success:
        _log(f"  ERROR: {result.error}")
        return 1

    _log(f"  {result.boats_count} boats, {result.bookings_count} bookings in {result.duration_ms} ms")

    if args.table:
        print(_format_table(result))
    else:
        output = json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False)
        if args.output:
            output_file = Path(args.output)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(output, encoding="utf-8")
            _log(f"  Wrote {args.output}")
        else:
            print(output)

    _log("sync_bookings: done")
    return 0


if __name__ == "__main__":
    args = _parse_args()
    try:
        sys.exit(asyncio.run(main(args)))
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
