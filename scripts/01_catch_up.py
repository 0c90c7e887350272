"""
scripts/01_catch_up.py
Manual historical catch-up: scrape each yearly archive page and insert missing draws.
Default range: first archive year (config) → last calendar year.
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.pipeline.runner import run
from src.utils.logger import get_logger

log = get_logger("catch_up")


def main() -> int:
    parser = argparse.ArgumentParser(description="Lotto Max historical catch-up")
    parser.add_argument("--from-year", type=int, default=None, help="First year (default: config first_archive_year)")
    parser.add_argument("--to-year", type=int, default=None, help="Last year (default: previous calendar year)")
    parser.add_argument("--dry-run", action="store_true", help="Extract and check only, no DB writes")
    parser.add_argument("--backup-csv", action="store_true", help="Write extracted draws to data/*.csv")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    args = parser.parse_args()

    if args.from_year and args.to_year and args.from_year > args.to_year:
        parser.error("--from-year must be <= --to-year")

    kwargs = {"headless": False} if args.headed else {}
    code = asyncio.run(run(
        "catch_up",
        from_year=args.from_year,
        to_year=args.to_year,
        dry_run=args.dry_run,
        backup_csv=args.backup_csv,
        **kwargs,
    ))
    log.info(f"Run finished with exit code {code}")
    return code


if __name__ == "__main__":
    sys.exit(main())
