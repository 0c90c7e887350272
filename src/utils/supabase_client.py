"""
src/utils/supabase_client.py
Supabase access for the `draws` and `bonus_game_sets` tables.
"""
from __future__ import annotations

from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from src.utils.config import SUPABASE_KEY, SUPABASE_URL
from src.utils.logger import get_logger

log = get_logger("supabase")

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"

NUMBER_COLUMNS = [f"num{i}" for i in range(1, 8)]

# Errors a single query can raise once the client is up
STORE_ERRORS = (APIError, httpx.HTTPError)


class StoreUnavailableError(RuntimeError):
    """The store cannot be reached or is not configured."""


class DuplicateDrawError(Exception):
    """A draw for this date already exists (unique constraint on draws.date)."""

    def __init__(self, draw_date: str):
        super().__init__(f"Draw {draw_date} already exists")
        self.draw_date = draw_date


def get_client(url: str = SUPABASE_URL, key: str = SUPABASE_KEY) -> Client:
    if not url or not key:
        raise StoreUnavailableError("SUPABASE_URL and SUPABASE_KEY must be set")
    return create_client(url, key)


def _numbers_payload(numbers: list[int]) -> dict[str, int | None]:
    padded = list(numbers[:7]) + [None] * (7 - len(numbers[:7]))
    return dict(zip(NUMBER_COLUMNS, padded))


def row_numbers(row: dict[str, Any]) -> list[int]:
    """Collect num1..num7 from a stored row, skipping nulls."""
    return [row[c] for c in NUMBER_COLUMNS if row.get(c) is not None]


class DrawStore:
    """Read/insert access to draws; never updates or deletes."""

    def __init__(self, client: Client):
        self.client = client

    def ping(self) -> None:
        """Fail fast when the table is unreachable."""
        try:
            self.client.table("draws").select("id").limit(1).execute()
        except Exception as exc:
            raise StoreUnavailableError(f"Cannot reach draws table: {exc}") from exc

    # ── draws ─────────────────────────────────────────────────────

    def get_draw_by_date(self, draw_date: str) -> dict | None:
        resp = (
            self.client.table("draws")
            .select("*")
            .eq("date", draw_date)
            .limit(1)
            .execute()
        )
        return resp.data[0] if resp.data else None

    def existing_dates(self, year: int) -> set[str]:
        """Canonical YYYY-MM-DD dates already stored for a year."""
        resp = (
            self.client.table("draws")
            .select("date")
            .gte("date", f"{year}-01-01")
            .lte("date", f"{year}-12-31")
            .execute()
        )
        return {row["date"] for row in resp.data or []}

    def insert_draw(self, record: dict[str, Any]) -> dict:
        """Insert one draw row and return it (with its generated id)."""
        payload: dict[str, Any] = {
            "date": record["date"],
            **_numbers_payload(record["numbers"]),
            "bonus": record.get("bonus"),
        }
        log.debug(f"INSERT draws {payload}")
        try:
            resp = self.client.table("draws").insert(payload).execute()
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise DuplicateDrawError(record["date"]) from exc
            raise
        return resp.data[0]

    # ── bonus_game_sets ───────────────────────────────────────────

    def insert_bonus_game_set(self, draw_id: int, numbers: list[int]) -> dict:
        if len(numbers) != 7:
            raise ValueError(f"Bonus game set needs 7 numbers, got {len(numbers)}")
        payload = {"draw_id": draw_id, **_numbers_payload(numbers)}
        resp = self.client.table("bonus_game_sets").insert(payload).execute()
        return resp.data[0]
