from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from ..schedules.model import AcademicPeriod
from .model import AttendanceHistoryRow, AttendanceRecord, Enrollment


class EnrollmentRepository(Protocol):
    def find(self, *, student_id: str, subject_id: int, period: AcademicPeriod) -> Optional[Enrollment]:
        raise NotImplementedError


class AttendanceRepository(Protocol):
    def get_for_enrollment_and_date(self, enrollment_id: int, on: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_time_in(
        self,
        *,
        enrollment_id: int,
        schedule_id: int,
        on: date,
        time_in: time,
        status: AttendanceStatus,
        late_minutes: int,
        scanned_by: Optional[int] = None,
    ) -> Optional[int]:
        """Insert the day's record. Returns None when one already exists for (enrollment, date)."""
        raise NotImplementedError

    def set_time_out(self, *, attendance_id: int, time_out: time) -> bool:
        """Set time_out only while it is still empty. Returns False when nothing was updated."""
        raise NotImplementedError

    def list_for_slot_and_date(self, *, schedule_id: int, on: date) -> Sequence[AttendanceHistoryRow]:
        """Records taken against one slot on one date, earliest time-in first."""
        raise NotImplementedError
