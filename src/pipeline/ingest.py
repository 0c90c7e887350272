"""
src/pipeline/ingest.py
Dedup + persistence gate: one extracted record in, one outcome out.

The draw row is the unit of success. Bonus game sets are written after it,
best-effort: a failed set never removes the draw.
"""
from __future__ import annotations

import asyncio
from typing import Any

from src.utils.logger import get_logger
from src.utils.supabase_client import STORE_ERRORS, DrawStore, DuplicateDrawError, row_numbers

log = get_logger("pipeline.ingest")

INSERTED = "inserted"
SKIPPED = "skipped"
FAILED = "failed"
DRY_RUN = "dry_run"

SET_SIZE = 7


async def persist_draw(store: DrawStore, record: dict[str, Any], dry_run: bool = False) -> str:
    """
    1. Skip when a draw already exists for the date (pre-check, saves work)
    2. Insert the draw; a unique violation is a concurrent insert, skip it
    3. Insert each 7-number bonus game set under the new draw id

    Store errors are logged and reported as FAILED, never raised.
    """
    draw_date = record["date"]

    try:
        existing = await asyncio.to_thread(store.get_draw_by_date, draw_date)
    except STORE_ERRORS as exc:
        log.error(f"Lookup failed for {draw_date}: {exc}")
        return FAILED
    if existing:
        log.info(f"Draw {draw_date} already present (id={existing.get('id')}), skipping")
        stored = row_numbers(existing)
        if stored and stored != list(record["numbers"]):
            log.warning(f"{draw_date}: stored numbers {stored} differ from scraped {record['numbers']}, keeping stored")
        return SKIPPED

    sets = record.get("bonus_game_sets") or []
    if dry_run:
        log.info(f"[DRY RUN] Would insert {draw_date}: {record['numbers']} bonus={record.get('bonus')} sets={len(sets)}")
        return DRY_RUN

    try:
        row = await asyncio.to_thread(store.insert_draw, record)
    except DuplicateDrawError:
        log.info(f"Draw {draw_date} inserted concurrently, skipping")
        return SKIPPED
    except STORE_ERRORS as exc:
        log.error(f"Insert failed for {draw_date}: {exc}")
        return FAILED

    draw_id = row["id"]
    saved = 0
    for numbers in sets:
        if len(numbers) != SET_SIZE:
            log.warning(f"{draw_date}: bonus game set with {len(numbers)} numbers dropped: {numbers}")
            continue
        try:
            await asyncio.to_thread(store.insert_bonus_game_set, draw_id, numbers)
            saved += 1
        except STORE_ERRORS as exc:
            log.warning(f"{draw_date}: bonus game set {numbers} not saved: {exc}")

    log.info(f"✔ Draw {draw_date} inserted (id={draw_id}) with {saved}/{len(sets)} bonus game sets")
    return INSERTED
