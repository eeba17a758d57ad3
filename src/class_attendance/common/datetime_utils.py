from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..core.exceptions import ValidationError


def parse_iso_date(value: Optional[str]) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Date must be formatted as YYYY-MM-DD")


def parse_iso_datetime(value: str, *, tz_name: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive local datetime.

    Aware timestamps are converted to `tz_name` first; naive ones are taken as local.
    """
    try:
        text = value.strip()
        # fromisoformat only learned the 'Z' suffix in 3.11.
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    except (AttributeError, ValueError):
        raise ValidationError("Timestamp must be ISO-8601")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(ZoneInfo(tz_name)).replace(tzinfo=None)
    return parsed


def now_local(tz_name: Optional[str] = None) -> datetime:
    """Current local time (naive).

    Note: Wrapped so tests can patch/mocked easier.
    """
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
    return datetime.now()


def day_of_week(d: date) -> int:
    """Weekday with Sunday=0 ... Saturday=6."""
    return (d.weekday() + 1) % 7


def at(d: date, t: time) -> datetime:
    return datetime.combine(d, t)


def whole_minutes(delta: timedelta) -> int:
    """Floor a duration to whole minutes."""
    return int(delta.total_seconds() // 60)


def fmt_time(t: Optional[time]) -> Optional[str]:
    return t.strftime("%H:%M:%S") if t else None
