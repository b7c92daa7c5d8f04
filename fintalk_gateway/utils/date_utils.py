"""Date manipulation utilities"""

from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo


def today_in(timezone_name: str) -> date:
    """Current calendar day in the given IANA timezone"""
    return datetime.now(tz=ZoneInfo(timezone_name)).date()


def parse_iso_date(value: Any, default: date) -> date:
    """Parse a YYYY-MM-DD value, falling back to default when absent or invalid"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return default
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return default
