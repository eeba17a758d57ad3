from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import fmt_time
from ..core.enums import AttendanceStatus, ScanAction
from ..schedules.model import AcademicPeriod


@dataclass(frozen=True)
class Enrollment:
    """A student's registration in a subject for one academic period."""

    enrollment_id: int
    student_id: str
    subject_id: int
    period: AcademicPeriod


@dataclass(frozen=True)
class AttendanceRecord:
    """At most one per (enrollment, date)."""

    attendance_id: int
    enrollment_id: int
    schedule_id: int
    on: date
    time_in: Optional[time]
    time_out: Optional[time]
    status: AttendanceStatus
    late_minutes: int = 0
    scanned_by: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return self.time_in is not None and self.time_out is not None


@dataclass(frozen=True)
class ScanRequest:
    student_id: str
    schedule_id: int
    period: AcademicPeriod
    scanned_at: Optional[datetime] = None
    scanned_by: Optional[int] = None


@dataclass(frozen=True)
class ScanResult:
    action: ScanAction
    record_id: int
    status: AttendanceStatus
    late_minutes: int
    time_in: Optional[time]
    time_out: Optional[time]

    def to_dict(self) -> dict:
        return {
            "action": self.action.value,
            "record_id": self.record_id,
            "status": self.status.value,
            "late_minutes": self.late_minutes,
            "time_in": fmt_time(self.time_in),
            "time_out": fmt_time(self.time_out),
        }


@dataclass(frozen=True)
class AttendanceHistoryRow:
    """Read-model for the per-slot attendance listing."""

    attendance_id: int
    enrollment_id: int
    student_id: str
    full_name: Optional[str]
    on: date
    time_in: Optional[time]
    time_out: Optional[time]
    status: AttendanceStatus
    late_minutes: int

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "enrollment_id": self.enrollment_id,
            "student_id": self.student_id,
            "full_name": self.full_name,
            "date": self.on.isoformat(),
            "time_in": fmt_time(self.time_in),
            "time_out": fmt_time(self.time_out),
            "status": self.status.value,
            "late_minutes": self.late_minutes,
        }
