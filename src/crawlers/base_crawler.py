"""
src/crawlers/base_crawler.py
Abstract base crawler: browser fetcher, polite pacing, and draw validation.
"""
from __future__ import annotations

import asyncio
import random
from abc import ABC, abstractmethod
from typing import Any

from bs4 import BeautifulSoup

from src.crawlers.page_fetcher import PageFetcher
from src.utils.logger import get_logger

log = get_logger("crawler")


class BaseCrawler(ABC):
    """Abstract base class for results-page crawlers."""

    MAIN_COUNT = 7
    SET_SIZE = 7

    def __init__(
        self,
        lottery_type: str,
        fetcher: PageFetcher | None,
        delay_min: float = 1.0,
        delay_max: float = 2.5,
    ):
        self.lottery_type = lottery_type
        self.fetcher = fetcher
        self.delay_min = delay_min
        self.delay_max = delay_max
        self.main_count = self.MAIN_COUNT

    # ── Helpers ───────────────────────────────────────────────────

    async def pause(self) -> None:
        """Polite delay between targets."""
        await asyncio.sleep(random.uniform(self.delay_min, self.delay_max))

    def _parse_html(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "lxml")

    # ── Validation ────────────────────────────────────────────────

    def validate_draw(self, record: dict[str, Any]) -> bool:
        """
        Validate an extracted record before it reaches the store.
        Main numbers must be complete; a bad bonus or bonus game set is
        dropped in place without rejecting the draw.
        """
        required = {"date", "numbers"}
        if not required.issubset(record.keys()):
            log.error(f"Missing fields: {required - record.keys()}")
            return False
        if not record["date"]:
            log.error("Empty draw date")
            return False

        nums = record["numbers"]
        lo, hi = self.number_range

        if len(nums) != self.main_count:
            log.error(f"{record['date']}: expected {self.main_count} numbers, got {len(nums)}: {nums}")
            return False
        if len(set(nums)) != len(nums):
            log.error(f"{record['date']}: duplicate numbers: {nums}")
            return False
        if not all(lo <= n <= hi for n in nums):
            log.error(f"{record['date']}: numbers out of range [{lo},{hi}]: {nums}")
            return False

        bonus = record.get("bonus")
        if bonus is not None and not lo <= bonus <= hi:
            log.warning(f"{record['date']}: bonus {bonus} out of range, dropped")
            record["bonus"] = None

        sets = []
        for numbers in record.get("bonus_game_sets", []):
            if len(numbers) == self.SET_SIZE and all(lo <= n <= hi for n in numbers):
                sets.append(numbers)
            else:
                log.warning(f"{record['date']}: invalid bonus game set dropped: {numbers}")
        record["bonus_game_sets"] = sets

        return True

    # ── Abstract interface ────────────────────────────────────────

    @property
    @abstractmethod
    def number_range(self) -> tuple[int, int]:
        """Return (min_num, max_num)."""
        ...

    @abstractmethod
    async def fetch_year(self, year: int) -> list[dict[str, Any]]:
        """Fetch every draw listed on a year's archive page."""
        ...

    @abstractmethod
    async def fetch_date(self, draw_date: str) -> dict[str, Any] | None:
        """Fetch the draw published for one date (YYYY-MM-DD), if any."""
        ...
