"""
ISO-8601 week helpers.

Weeks start on Monday and belong to the ISO year that contains their
Thursday, so 2024-12-30 is in "2025-W01" and 2021-01-03 is in "2020-W53".
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional

WEEK_KEY_RE = re.compile(r"^(\d{4})-W(\d{2})$")


def to_date(value) -> Optional[date]:
    """Coerce a date, datetime or ISO string to a date; None when it can't be parsed."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def iso_week_key(d: date) -> str:
    iso_year, iso_week, _ = d.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def week_start(d: date) -> date:
    """Monday of the week containing d."""
    return d - timedelta(days=d.weekday())


def parse_week_key(key: str) -> Optional[date]:
    """Monday of the ISO week named by key, or None for a malformed key."""
    m = WEEK_KEY_RE.match(str(key or "").strip())
    if not m:
        return None
    try:
        return date.fromisocalendar(int(m.group(1)), int(m.group(2)), 1)
    except ValueError:
        return None


def week_bounds(key: str) -> Optional[tuple[date, date]]:
    monday = parse_week_key(key)
    if monday is None:
        return None
    return monday, monday + timedelta(days=6)
