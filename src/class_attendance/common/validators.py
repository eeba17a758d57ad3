from __future__ import annotations

from datetime import datetime, time
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_time_range(start: time, end: time, *, field_name: str = "Time range") -> None:
    if not start < end:
        raise ValidationError(f"{field_name}: start time must be before end time")


def require_day_of_week(value: int) -> int:
    if not 0 <= int(value) <= 6:
        raise ValidationError("Day of week must be between 0 (Sunday) and 6 (Saturday)")
    return int(value)


def parse_time(value: Optional[str], field_name: str) -> Optional[time]:
    """Parse HH:MM or HH:MM:SS; blank means not provided."""
    v = (value or "").strip()
    if not v:
        return None
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"{field_name} must be a time (HH:MM)")


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None
