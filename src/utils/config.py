"""
src/utils/config.py
Load env vars and the source config JSON (URLs, selectors, schedule).
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = ROOT / "config"

# ── Supabase ──────────────────────────────────────────────────────
# Checked at startup by the runner, not at import, so tests can import freely.
SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")

# ── Telegram (optional run summaries) ─────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
TELEGRAM_CHAT_ID: str = os.getenv("TELEGRAM_CHAT_ID", "")

# ── Browser / crawl pacing ────────────────────────────────────────
BROWSER_HEADLESS: bool = os.getenv("BROWSER_HEADLESS", "true").lower() not in ("0", "false", "no")
CRAWL_DELAY_MIN: float = float(os.getenv("CRAWL_DELAY_MIN", "1.0"))
CRAWL_DELAY_MAX: float = float(os.getenv("CRAWL_DELAY_MAX", "2.5"))

# ── Sources ───────────────────────────────────────────────────────
SOURCE_CONFIG_FILES: dict[str, str] = {
    "lotto_max": "source_lotto_max.json",
}

WEEKDAY_NAMES: dict[str, int] = {
    "monday": 0, "tuesday": 1, "wednesday": 2, "thursday": 3,
    "friday": 4, "saturday": 5, "sunday": 6,
}

_source_config_cache: dict[str, Any] = {}


def get_source_config(source: str = "lotto_max") -> dict[str, Any]:
    """Load and cache the source config JSON, with env overrides applied."""
    if source in _source_config_cache:
        return _source_config_cache[source]
    filename = SOURCE_CONFIG_FILES.get(source)
    if not filename:
        raise ValueError(f"Unknown source: {source}")
    path = CONFIG_DIR / filename
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        config = json.load(f)

    if os.getenv("FIRST_ARCHIVE_YEAR"):
        config["first_archive_year"] = int(os.environ["FIRST_ARCHIVE_YEAR"])
    if os.getenv("DRAW_WEEKDAYS"):
        config["draw_weekdays"] = os.environ["DRAW_WEEKDAYS"].split(",")

    _source_config_cache[source] = config
    return config


def parse_weekdays(values: list[str | int]) -> list[int]:
    """Turn ["tuesday", "friday"] / ["2", "5"] (ISO) into date.weekday() ints."""
    days: list[int] = []
    for value in values:
        text = str(value).strip().lower()
        if text in WEEKDAY_NAMES:
            days.append(WEEKDAY_NAMES[text])
        elif text.isdigit() and 1 <= int(text) <= 7:
            days.append(int(text) - 1)
        else:
            raise ValueError(f"Invalid weekday: {value!r}")
    return sorted(set(days))


def get_first_archive_year(source: str = "lotto_max") -> int:
    return int(get_source_config(source)["first_archive_year"])


def get_draw_weekdays(source: str = "lotto_max") -> list[int]:
    return parse_weekdays(get_source_config(source)["draw_weekdays"])
