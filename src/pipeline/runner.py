"""
src/pipeline/runner.py
Process-level entry: build the run context, run one mode, report.

Exit codes: 0 when the run completed (even with per-target failures),
1 when the store is unreachable or the browser cannot start.
"""
from __future__ import annotations

import asyncio
import csv
from datetime import date, datetime
from pathlib import Path
from typing import Any

from playwright.async_api import Error as PlaywrightError

from src.crawlers.lottomax_crawler import LottoMaxCrawler
from src.crawlers.page_fetcher import PageFetcher, launch_browser
from src.notifications.telegram_notifier import notify_run
from src.pipeline.scheduler import RunContext, run_catch_up, run_daily, run_dates
from src.utils.config import (
    BROWSER_HEADLESS,
    CRAWL_DELAY_MAX,
    CRAWL_DELAY_MIN,
    get_draw_weekdays,
    get_first_archive_year,
    get_source_config,
)
from src.utils.logger import get_logger
from src.utils.supabase_client import DrawStore, StoreUnavailableError, get_client

log = get_logger("runner")

MODES = ("catch_up", "daily", "dates")


def write_csv_backup(records: list[dict[str, Any]], mode: str, out_dir: str = "data") -> Path:
    Path(out_dir).mkdir(exist_ok=True)
    path = Path(out_dir) / f"lotto_max_{mode}_{datetime.now():%Y%m%d_%H%M%S}.csv"
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=["date", "numbers", "bonus", "bonus_game_sets"])
        writer.writeheader()
        for row in records:
            writer.writerow({
                "date": row["date"],
                "numbers": " ".join(str(n) for n in row["numbers"]),
                "bonus": row.get("bonus") if row.get("bonus") is not None else "",
                "bonus_game_sets": "|".join(" ".join(str(n) for n in s) for s in row.get("bonus_game_sets", [])),
            })
    log.info(f"CSV backup saved to {path}")
    return path


async def run_mode(
    ctx: RunContext,
    mode: str,
    from_year: int | None = None,
    to_year: int | None = None,
    dates: list[str] | None = None,
    today_only: bool = False,
    today: date | None = None,
) -> dict[str, Any]:
    if mode == "catch_up":
        return await run_catch_up(ctx, from_year=from_year, to_year=to_year, today=today)
    if mode == "daily":
        return await run_daily(ctx, today=today, today_only=today_only)
    if mode == "dates":
        return await run_dates(ctx, sorted(dates or []))
    raise ValueError(f"Unknown mode: {mode}")


async def run(
    mode: str,
    from_year: int | None = None,
    to_year: int | None = None,
    dates: list[str] | None = None,
    today_only: bool = False,
    dry_run: bool = False,
    backup_csv: bool = False,
    headless: bool = BROWSER_HEADLESS,
) -> int:
    source = get_source_config("lotto_max")

    try:
        store = DrawStore(get_client())
        await asyncio.to_thread(store.ping)
    except StoreUnavailableError as exc:
        log.critical(f"Store unavailable, aborting: {exc}")
        return 1

    try:
        async with launch_browser(headless=headless) as browser:
            fetcher = PageFetcher(
                browser,
                navigation_timeout_ms=source["navigation_timeout_ms"],
                selector_timeout_ms=source["selector_timeout_ms"],
                attempts=source["ready_attempts"],
                retry_pause_ms=source["retry_pause_ms"],
            )
            crawler = LottoMaxCrawler(fetcher, source, delay_min=CRAWL_DELAY_MIN, delay_max=CRAWL_DELAY_MAX)
            ctx = RunContext(
                store=store,
                crawler=crawler,
                first_archive_year=get_first_archive_year(),
                draw_weekdays=get_draw_weekdays(),
                dry_run=dry_run,
            )
            summary = await run_mode(
                ctx, mode, from_year=from_year, to_year=to_year, dates=dates, today_only=today_only
            )
    except PlaywrightError as exc:
        log.critical(f"Browser failure, aborting: {exc}")
        return 1

    if backup_csv and summary["records"]:
        write_csv_backup(summary["records"], mode)
    notify_run(summary)
    return 0
