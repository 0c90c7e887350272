"""
src/crawlers/page_fetcher.py
Render client-side pages with a shared Playwright browser.
One tab per fetch; the tab is always closed before returning.
"""
from __future__ import annotations

import asyncio
import re
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from playwright.async_api import Browser, Error as PlaywrightError, Page, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.utils.logger import LOG_DIR, get_logger

log = get_logger("crawler.fetcher")

SNAPSHOT_CHARS = 4000


class FetchError(Exception):
    """Navigation or network failure for a single target."""


@asynccontextmanager
async def launch_browser(headless: bool = True) -> AsyncIterator[Browser]:
    """Start Chromium once per run and close it exactly once."""
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless, args=["--no-sandbox"])
        log.info(f"Browser started (headless={headless})")
        try:
            yield browser
        finally:
            await browser.close()
            log.info("Browser closed")


class PageFetcher:
    """Fetch fully rendered HTML, waiting for any of several readiness selectors."""

    def __init__(
        self,
        browser: Browser,
        navigation_timeout_ms: int = 60_000,
        selector_timeout_ms: int = 4_000,
        attempts: int = 4,
        retry_pause_ms: int = 800,
        snapshot_dir: str | Path | None = None,
    ):
        self.browser = browser
        self.navigation_timeout_ms = navigation_timeout_ms
        self.selector_timeout_ms = selector_timeout_ms
        self.attempts = attempts
        self.retry_pause_ms = retry_pause_ms
        self.snapshot_dir = Path(snapshot_dir) if snapshot_dir else Path(LOG_DIR) / "snapshots"

    async def fetch(
        self,
        url: str,
        ready_selectors: list[str],
        label: str | None = None,
        wait_until: str = "domcontentloaded",
        selector_timeout_ms: int | None = None,
    ) -> str | None:
        """
        Return rendered HTML, or None when no readiness selector shows up
        (e.g. no draw published that day). Raises FetchError on navigation failure.
        """
        label = label or url
        page = await self.browser.new_page()
        try:
            log.debug(f"GOTO {url}")
            try:
                await page.goto(url, wait_until=wait_until, timeout=self.navigation_timeout_ms)
            except PlaywrightError as exc:
                raise FetchError(f"Navigation failed for {label}: {exc}") from exc

            selector = await self._wait_for_any(page, ready_selectors, selector_timeout_ms)
            if selector is None:
                log.warning(f"No results content for {label} (tried {len(ready_selectors)} selectors)")
                await self._save_snapshot(page, label)
                return None

            log.debug(f"{label}: ready on '{selector}'")
            return await page.content()
        finally:
            await page.close()

    async def _wait_for_any(
        self, page: Page, selectors: list[str], timeout_ms: int | None = None
    ) -> str | None:
        timeout_ms = timeout_ms or self.selector_timeout_ms
        for attempt in range(1, self.attempts + 1):
            for selector in selectors:
                try:
                    await page.wait_for_selector(selector, timeout=timeout_ms)
                    return selector
                except PlaywrightTimeoutError:
                    continue
            log.debug(f"Readiness attempt {attempt}/{self.attempts} found nothing")
            if attempt < self.attempts:
                await asyncio.sleep(self.retry_pause_ms / 1000)
        return None

    async def _save_snapshot(self, page: Page, label: str) -> None:
        try:
            html = await page.content()
        except PlaywrightError as exc:
            log.debug(f"Snapshot unavailable for {label}: {exc}")
            return
        self.snapshot_dir.mkdir(parents=True, exist_ok=True)
        path = self.snapshot_dir / f"{re.sub(r'[^A-Za-z0-9_.-]+', '_', label)}.html"
        path.write_text(html[:SNAPSHOT_CHARS], encoding="utf-8")
        log.info(f"HTML snapshot saved to {path}")
