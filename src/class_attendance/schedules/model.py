from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import OverrideKind


@dataclass(frozen=True)
class AcademicPeriod:
    """Academic year + semester a slot or enrollment belongs to."""

    academic_year_id: int
    semester_id: int


_YEAR_SUFFIX = re.compile(r"^\s*(\d+)\s*(st|nd|rd|th)?\s*(year)?\s*$", re.IGNORECASE)


def normalize_year_level(value: Optional[str]) -> Optional[str]:
    """'1st Year' -> '1', '2' -> '2'; anything else is compared as-is."""
    if value is None:
        return None
    m = _YEAR_SUFFIX.match(str(value))
    return m.group(1) if m else str(value).strip()


@dataclass(frozen=True)
class AudienceCriteria:
    """Optional filters selecting which students may scan into a slot."""

    department: Optional[str] = None
    year_level: Optional[str] = None
    section: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return not (self.department or self.year_level or self.section)

    def mismatch(self, *, department: Optional[str], year_level: Optional[str], section: Optional[str]) -> Optional[str]:
        """Return a message naming the first criterion the student fails, or None."""
        if self.department and department != self.department:
            return f"Student department ({department}) does not match schedule department ({self.department})"
        if self.year_level and normalize_year_level(year_level) != normalize_year_level(self.year_level):
            return f"Student year level ({year_level}) does not match schedule year level ({self.year_level})"
        if self.section and section != self.section:
            return f"Student section ({section}) does not match schedule section ({self.section})"
        return None


@dataclass(frozen=True)
class ScheduleSlot:
    """Recurring weekly class definition."""

    schedule_id: int
    teacher_id: int
    subject_id: int
    day_of_week: int
    start_time: time
    end_time: time
    period: AcademicPeriod
    room: Optional[str] = None
    audience: AudienceCriteria = AudienceCriteria()
    is_active: bool = True


@dataclass(frozen=True)
class NewScheduleSlot:
    teacher_id: int
    subject_id: int
    day_of_week: int
    start_time: time
    end_time: time
    period: AcademicPeriod
    room: Optional[str] = None
    audience: AudienceCriteria = AudienceCriteria()


@dataclass(frozen=True)
class OverrideRef:
    """The approved override a session was resolved with."""

    override_id: int
    kind: OverrideKind
    reason: str
    admin_notes: Optional[str] = None


@dataclass(frozen=True)
class EffectiveSession:
    """Resolved start/end/cancellation of one slot on one date."""

    schedule_id: int
    on: date
    start_time: time
    end_time: time
    original_start_time: time
    original_end_time: time
    cancelled: bool = False
    day_mismatch: bool = False
    override: Optional[OverrideRef] = None

    @property
    def is_open(self) -> bool:
        """True when scanning may be enabled for this date."""
        return not (self.cancelled or self.day_mismatch)

    def to_dict(self) -> dict:
        return {
            "schedule_id": self.schedule_id,
            "date": self.on.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "original_start_time": self.original_start_time.strftime("%H:%M"),
            "original_end_time": self.original_end_time.strftime("%H:%M"),
            "cancelled": self.cancelled,
            "day_mismatch": self.day_mismatch,
            "override": (
                {
                    "override_id": self.override.override_id,
                    "kind": self.override.kind.value,
                    "reason": self.override.reason,
                    "admin_notes": self.override.admin_notes,
                }
                if self.override
                else None
            ),
        }
