"""
src/notifications/telegram_notifier.py
Telegram push notifications for ingestion runs (optional).
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

import requests

from src.utils.config import TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID
from src.utils.logger import get_logger

log = get_logger("telegram")

MODE_LABELS = {
    "catch_up": "CATCH-UP",
    "daily": "DAILY",
    "dates": "DATES",
}


def is_enabled(token: str = TELEGRAM_BOT_TOKEN, chat_id: str = TELEGRAM_CHAT_ID) -> bool:
    return bool(token and chat_id)


def _send(text: str, token: str = TELEGRAM_BOT_TOKEN, chat_id: str = TELEGRAM_CHAT_ID) -> bool:
    """Send a Markdown message via Telegram Bot API."""
    url = f"https://api.telegram.org/bot{token}/sendMessage"
    payload = {
        "chat_id": chat_id,
        "text": text,
        "parse_mode": "Markdown",
    }
    try:
        resp = requests.post(url, json=payload, timeout=10)
        resp.raise_for_status()
        return True
    except requests.RequestException as exc:
        log.error(f"Telegram send failed: {exc}")
        return False


def _now_str() -> str:
    return datetime.now().strftime("%H:%M %Y-%m-%d")


def _fmt_numbers(nums: list[int]) -> str:
    return " - ".join(f"{n:02d}" for n in nums)


def format_run_summary(summary: dict[str, Any]) -> str:
    mode = MODE_LABELS.get(summary.get("mode", ""), summary.get("mode", "?").upper())
    errors = summary.get("errors", [])
    icon = "⚠️" if errors or summary.get("failed") else "✅"

    lines = [
        f"{icon} *[{mode}] Lotto Max ingestion*",
        f"📅 {_now_str()}",
        "──────────────────────────────",
        f"Targets : {summary.get('targets', 0)}",
        f"Fetched : {summary.get('fetched', 0)}",
        f"Inserted: {summary.get('inserted', 0)}",
        f"Skipped : {summary.get('skipped', 0)}",
        f"Failed  : {summary.get('failed', 0)}",
    ]

    # Only list new draws for small runs; a full catch-up would flood the chat
    records = summary.get("records", [])
    if summary.get("inserted") and len(records) <= 5:
        lines.append("──────────────────────────────")
        for record in records:
            bonus = record.get("bonus")
            bonus_str = f" ({bonus:02d})" if bonus is not None else ""
            lines.append(f"{record['date']}: `{_fmt_numbers(record['numbers'])}`{bonus_str}")

    if errors:
        lines.append("──────────────────────────────")
        lines.append(f"Failed targets: {', '.join(errors)}")
    return "\n".join(lines)


def notify_run(summary: dict[str, Any]) -> bool:
    """Send the run summary if Telegram is configured. Returns True when sent."""
    if not is_enabled():
        log.debug("Telegram not configured, summary not sent")
        return False
    return _send(format_run_summary(summary))
