from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Optional

WEEKDAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value[:10], "%Y-%m-%d").date()


def to_iso_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO timestamp into a naive local datetime.

    Values written by the browser build carry a trailing ``Z``; those are
    converted to local time so they can be subtracted from naive values.
    """
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def weekday_key(day: date) -> str:
    """Locale independent weekday key (mon..sun)."""
    return WEEKDAY_KEYS[day.weekday()]


def week_start_monday(day: date) -> date:
    return day - timedelta(days=day.weekday())


def week_dates(week_start: date) -> list[date]:
    return [week_start + timedelta(days=i) for i in range(7)]


def round_minutes(delta: timedelta) -> int:
    """Round a duration to whole minutes, half up."""
    return int(math.floor(delta.total_seconds() / 60 + 0.5))


def minutes_to_hhmm(minutes: int, *, signed: bool = False) -> str:
    """Format minutes as HH:MM.

    Unsigned output clamps negatives to 00:00; signed output prefixes '-'.
    """
    value = int(round(minutes))
    sign = ""
    if value < 0:
        if not signed:
            value = 0
        else:
            sign = "-"
            value = -value
    elif signed:
        sign = "+"
    return f"{sign}{value // 60:02d}:{value % 60:02d}"


def month_key(day: date) -> str:
    """Reporting month key (YYYY-MM)."""
    return f"{day.year:04d}-{day.month:02d}"


def parse_month_key(value: str) -> tuple[int, int]:
    year_s, month_s = value.split("-")[:2]
    return int(year_s), int(month_s)


def shift_month_key(value: str, months: int) -> str:
    year, month = parse_month_key(value)
    index = year * 12 + (month - 1) + months
    return f"{index // 12:04d}-{index % 12 + 1:02d}"
