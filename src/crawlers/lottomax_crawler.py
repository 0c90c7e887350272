"""
src/crawlers/lottomax_crawler.py
Crawler for Loto-Québec Lotto Max.
Draw schedule: Tuesday and Friday evenings.
Numbers: 7 from 1–50 + 1 complementary, plus optional Maxmillions sets of 7.
"""
from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from bs4 import BeautifulSoup, Tag

from src.crawlers.base_crawler import BaseCrawler
from src.crawlers.layouts import DAY_STRATEGIES, ROW_STRATEGIES, extract_record
from src.crawlers.page_fetcher import PageFetcher
from src.utils.config import get_source_config
from src.utils.logger import get_logger

log = get_logger("crawler.lottomax")

ROW_SELECTOR = "table tbody tr, .item.resultats"


class LottoMaxCrawler(BaseCrawler):
    """Scrape Lotto Max results from the yearly archive and single-date pages."""

    def __init__(self, fetcher: PageFetcher | None = None, source: dict[str, Any] | None = None, **kwargs):
        super().__init__(lottery_type="lotto_max", fetcher=fetcher, **kwargs)
        self.source = source or get_source_config("lotto_max")
        self.main_count = self.source.get("main_count", self.MAIN_COUNT)

    @property
    def number_range(self) -> tuple[int, int]:
        lo, hi = self.source["number_range"]
        return (lo, hi)

    # ── Locators ──────────────────────────────────────────────────

    def year_url(self, year: int) -> str:
        params = {**self.source["year_params"], self.source["year_param_name"]: year}
        return f"{self.source['year_url']}?{urlencode(params)}"

    def date_url(self, draw_date: str) -> str:
        params = {self.source["date_param_name"]: draw_date}
        return f"{self.source['date_url']}?{urlencode(params)}"

    # ── Core fetch ────────────────────────────────────────────────

    async def fetch_year(self, year: int) -> list[dict[str, Any]]:
        html = await self.fetcher.fetch(
            self.year_url(year),
            self.source["year_ready_selectors"],
            label=f"year_{year}",
            wait_until="networkidle",
            selector_timeout_ms=self.source.get("year_selector_timeout_ms"),
        )
        if html is None:
            return []
        draws = self.parse_year_page(self._parse_html(html))
        log.info(f"{year}: {len(draws)} draws extracted")
        return draws

    async def fetch_date(self, draw_date: str) -> dict[str, Any] | None:
        html = await self.fetcher.fetch(
            self.date_url(draw_date),
            self.source["date_ready_selectors"],
            label=f"date_{draw_date}",
        )
        if html is None:
            return None
        return self.parse_date_page(self._parse_html(html), draw_date)

    # ── Page parsing ──────────────────────────────────────────────

    def parse_year_page(self, soup: BeautifulSoup) -> list[dict[str, Any]]:
        """Parse every dated row of a yearly archive page."""
        draws = []
        for row in soup.select(ROW_SELECTOR):
            if self._is_header(row) or self._inside_row(row):
                continue
            draw_date = self._row_date(row)
            if not draw_date:
                continue

            record = extract_record(row, ROW_STRATEGIES, min_numbers=self.main_count)
            if record is None:
                log.info(f"{draw_date}: no known layout matched, row skipped")
                continue

            record = {"date": draw_date, **record}
            if self.validate_draw(record):
                draws.append(record)
        return draws

    def parse_date_page(self, soup: BeautifulSoup, draw_date: str) -> dict[str, Any] | None:
        """Parse a single-date page; the locator date is the record date."""
        record = None
        row = self._first_data_row(soup)
        if row is not None:
            record = extract_record(row, ROW_STRATEGIES, min_numbers=self.main_count)
        if record is None:
            record = extract_record(soup, DAY_STRATEGIES, min_numbers=self.main_count)
        if record is None:
            log.info(f"{draw_date}: no valid numbers extracted")
            return None

        record = {"date": draw_date, **record}
        return record if self.validate_draw(record) else None

    @staticmethod
    def _is_header(row: Tag) -> bool:
        return "titre" in (row.get("class") or []) or row.find("th") is not None

    @staticmethod
    def _inside_row(node: Tag) -> bool:
        """A results block nested in a table row is parsed with that row."""
        return node.name != "tr" and node.find_parent("tr") is not None

    @staticmethod
    def _row_date(row: Tag) -> str | None:
        node = row.select_one(".date")
        if node is None:
            return None
        text = node.get_text(" ", strip=True)
        return text or None

    def _first_data_row(self, soup: BeautifulSoup) -> Tag | None:
        for row in soup.select("table tbody tr"):
            if not self._is_header(row):
                return row
        return None
