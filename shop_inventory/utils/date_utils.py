# shop_inventory/utils/date_utils.py
from datetime import datetime
from typing import Optional


def now_iso() -> str:
    """Current local time as a sortable ISO-8601 string."""
    return datetime.now().isoformat(timespec='seconds')


def newest_first_key(value: Optional[str]) -> str:
    """Sort key for newest-first ordering of ISO timestamps.

    ISO strings sort chronologically, so the raw string is used; records
    without a date sort last when combined with ``reverse=True``.
    """
    return value or ''
