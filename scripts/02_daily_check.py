"""
scripts/02_daily_check.py
Daily check, meant for cron (e.g. `0 7 * * * python scripts/02_daily_check.py --today-only`).
Without flags it back-fills every drawing date of the current year that is not stored yet.
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.pipeline.runner import run
from src.utils.logger import get_logger

log = get_logger("daily_check")


def iso_date(text: str) -> str:
    try:
        return datetime.strptime(text, "%Y-%m-%d").strftime("%Y-%m-%d")
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {text!r}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Lotto Max daily results check")
    parser.add_argument("--today-only", action="store_true", help="Only check today's date")
    parser.add_argument("--date", type=iso_date, action="append", dest="dates",
                        help="Check a specific date (YYYY-MM-DD); repeatable")
    parser.add_argument("--dry-run", action="store_true", help="Extract and check only, no DB writes")
    parser.add_argument("--backup-csv", action="store_true", help="Write extracted draws to data/*.csv")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    args = parser.parse_args()

    if args.dates and args.today_only:
        parser.error("--date and --today-only are exclusive")

    mode = "dates" if args.dates else "daily"
    kwargs = {"headless": False} if args.headed else {}
    code = asyncio.run(run(
        mode,
        dates=args.dates,
        today_only=args.today_only,
        dry_run=args.dry_run,
        backup_csv=args.backup_csv,
        **kwargs,
    ))
    log.info(f"Run finished with exit code {code}")
    return code


if __name__ == "__main__":
    sys.exit(main())
