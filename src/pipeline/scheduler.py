"""
src/pipeline/scheduler.py
Run modes for the ingestion pipeline.

- catch-up: one yearly archive page per year, ascending
- daily:    one single-date page per drawing day of the current year not yet stored

Targets run one after another. A failing target is logged and the run moves on.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from src.crawlers.base_crawler import BaseCrawler
from src.pipeline.ingest import DRY_RUN, FAILED, INSERTED, SKIPPED, persist_draw
from src.utils.logger import get_logger
from src.utils.supabase_client import STORE_ERRORS, DrawStore

log = get_logger("pipeline.scheduler")

DEFAULT_FIRST_YEAR = 2009
DEFAULT_WEEKDAYS = [1, 4]  # Tuesday, Friday


@dataclass
class RunContext:
    """Everything one run needs, passed down explicitly."""

    store: DrawStore
    crawler: BaseCrawler
    first_archive_year: int = DEFAULT_FIRST_YEAR
    draw_weekdays: list[int] = field(default_factory=lambda: list(DEFAULT_WEEKDAYS))
    dry_run: bool = False


def new_summary(mode: str) -> dict[str, Any]:
    return {
        "mode": mode,
        "targets": 0,
        "fetched": 0,
        "inserted": 0,
        "skipped": 0,
        "failed": 0,
        "errors": [],
        "records": [],
    }


def drawing_dates(year: int, weekdays: list[int], until: date | None = None) -> list[str]:
    """All YYYY-MM-DD dates of `year` falling on `weekdays`, up to `until` inclusive."""
    day = date(year, 1, 1)
    last = date(year, 12, 31)
    if until is not None and until < last:
        last = until
    dates = []
    while day <= last:
        if day.weekday() in weekdays:
            dates.append(day.isoformat())
        day += timedelta(days=1)
    return dates


async def _ingest(ctx: RunContext, records: list[dict[str, Any]], summary: dict[str, Any]) -> None:
    for record in records:
        summary["fetched"] += 1
        summary["records"].append(record)
        outcome = await persist_draw(ctx.store, record, dry_run=ctx.dry_run)
        if outcome == INSERTED:
            summary["inserted"] += 1
        elif outcome in (SKIPPED, DRY_RUN):
            summary["skipped"] += 1
        elif outcome == FAILED:
            summary["failed"] += 1


# ── Catch-up mode ─────────────────────────────────────────────────

async def run_catch_up(
    ctx: RunContext,
    from_year: int | None = None,
    to_year: int | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    """Scrape every archive year in [from_year, to_year] (default: first year .. last year)."""
    today = today or date.today()
    from_year = from_year or ctx.first_archive_year
    to_year = to_year or today.year - 1
    summary = new_summary("catch_up")
    log.info(f"[CATCH-UP] years {from_year} → {to_year} | dry_run={ctx.dry_run}")

    for i, year in enumerate(range(from_year, to_year + 1)):
        if i:
            await ctx.crawler.pause()
        summary["targets"] += 1
        try:
            records = await ctx.crawler.fetch_year(year)
            await _ingest(ctx, records, summary)
        except Exception as exc:
            log.error(f"Year {year} failed: {exc}")
            summary["errors"].append(str(year))

    log.info(
        f"[CATCH-UP DONE] years={summary['targets']} fetched={summary['fetched']} "
        f"inserted={summary['inserted']} skipped={summary['skipped']} errors={summary['errors']}"
    )
    return summary


# ── Daily mode ────────────────────────────────────────────────────

async def run_dates(ctx: RunContext, dates: list[str], mode: str = "dates") -> dict[str, Any]:
    """Run the single-date pipeline for each date, in the given order."""
    summary = new_summary(mode)

    for i, draw_date in enumerate(dates):
        if i:
            await ctx.crawler.pause()
        summary["targets"] += 1
        try:
            record = await ctx.crawler.fetch_date(draw_date)
            if record is None:
                log.info(f"No draw published for {draw_date}")
                continue
            await _ingest(ctx, [record], summary)
        except Exception as exc:
            log.error(f"Date {draw_date} failed: {exc}")
            summary["errors"].append(draw_date)

    log.info(
        f"[{mode.upper()} DONE] dates={summary['targets']} fetched={summary['fetched']} "
        f"inserted={summary['inserted']} skipped={summary['skipped']} errors={summary['errors']}"
    )
    return summary


async def run_daily(
    ctx: RunContext,
    today: date | None = None,
    today_only: bool = False,
) -> dict[str, Any]:
    """Fetch each drawing date of the current year (or just today) that is not stored yet."""
    today = today or date.today()

    if today_only:
        dates = [today.isoformat()] if today.weekday() in ctx.draw_weekdays else []
        if not dates:
            log.info(f"{today.isoformat()} is not a drawing day, nothing to check")
    else:
        dates = drawing_dates(today.year, ctx.draw_weekdays, until=today)

    try:
        present = await asyncio.to_thread(ctx.store.existing_dates, today.year)
    except STORE_ERRORS as exc:
        # the per-record pre-check and unique constraint still stop duplicates
        log.warning(f"Could not list stored dates for {today.year}: {exc}, checking every drawing date")
        present = set()
    pending = [d for d in dates if d not in present]
    log.info(f"[DAILY] {len(dates)} drawing dates, {len(pending)} not stored yet | dry_run={ctx.dry_run}")

    return await run_dates(ctx, pending, mode="daily")
