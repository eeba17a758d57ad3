from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.audit import audit
from ..common.datetime_utils import fmt_time, now_local
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import ScanAction
from ..core.exceptions import (
    AlreadyCompleteError,
    AudienceMismatchError,
    AuthorizationError,
    ConflictError,
    DuplicateEnrollmentMissing,
    NoActiveSessionError,
    NotFoundError,
    OutsideWindowError,
    SessionCancelledError,
)
from ..schedules.model import AcademicPeriod, EffectiveSession, ScheduleSlot
from ..schedules.repository import ScheduleRepository
from ..schedules.resolver import ScheduleResolver
from ..students.repository import StudentRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceHistoryRow, AttendanceRecord, Enrollment, ScanRequest, ScanResult
from .policy import ScanPolicy
from .repository import AttendanceRepository, EnrollmentRepository

logger = logging.getLogger(__name__)


class AttendanceRecorder:
    """Turn one credential scan into a time-in or a time-out.

    The session is resolved again on every scan. The (enrollment, date) unique key in
    the store decides races; this class only re-reads and reports what won.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        enrollments: EnrollmentRepository,
        schedules: ScheduleRepository,
        students: StudentRepository,
        resolver: ScheduleResolver,
        *,
        policy: ScanPolicy | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        timezone: str = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] | None = None,
    ):
        self._attendance = attendance
        self._enrollments = enrollments
        self._schedules = schedules
        self._students = students
        self._resolver = resolver
        self._policy = policy or ScanPolicy()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._clock = clock or (lambda: now_local(timezone))

    def record_scan(self, request: ScanRequest) -> ScanResult:
        server_now = self._clock()
        if request.scanned_at is None:
            scanned_at = server_now
        else:
            scanned_at = request.scanned_at
            self._policy.check_clock(scanned_at=scanned_at, server_now=server_now)
        stamp = {
            "scanned_at": scanned_at.isoformat(timespec="seconds"),
            "server_now": server_now.isoformat(timespec="seconds"),
            "timestamp_source": "server" if request.scanned_at is None else "caller",
        }

        slot = self._load_slot(request.schedule_id, period=request.period)
        if request.scanned_by is not None and int(request.scanned_by) != slot.teacher_id:
            raise AuthorizationError("You are not assigned to this schedule")

        enrollment = self._enrollments.find(student_id=request.student_id, subject_id=slot.subject_id, period=request.period)
        if not enrollment:
            raise DuplicateEnrollmentMissing("Student is not enrolled in this subject for the academic period")

        self._check_audience(slot, request.student_id)

        session = self._resolver.resolve_slot(slot, scanned_at.date())
        if session.day_mismatch:
            raise NoActiveSessionError("This class does not meet today")
        if session.cancelled:
            reason = session.override.reason if session.override else ""
            raise SessionCancelledError(f"Class is cancelled today: {reason}".rstrip(": "))

        self._policy.check_window(session=session, scanned_at=scanned_at)

        existing = self._attendance.get_for_enrollment_and_date(enrollment.enrollment_id, session.on)
        if existing is None:
            result = self._time_in(enrollment, session, scanned_at, scanned_by=request.scanned_by, stamp=stamp)
            if result is not None:
                return result
            # Lost the insert race; whatever won is now the day's record.
            existing = self._attendance.get_for_enrollment_and_date(enrollment.enrollment_id, session.on)
            if existing is None:
                raise ConflictError("Attendance record changed while scanning; try again")

        return self._time_out(existing, scanned_at, scanned_by=request.scanned_by, stamp=stamp)

    def history(self, *, schedule_id: int, on: date, period: AcademicPeriod) -> Sequence[AttendanceHistoryRow]:
        # Deactivated slots keep their records readable.
        slot = self._schedules.get_by_id(int(schedule_id))
        if not slot or slot.period != period:
            raise NotFoundError("Schedule not found in the given academic period")
        return self._attendance.list_for_slot_and_date(schedule_id=slot.schedule_id, on=on)

    def _load_slot(self, schedule_id: int, *, period: AcademicPeriod) -> ScheduleSlot:
        slot = self._schedules.get_by_id(int(schedule_id))
        if not slot:
            raise NotFoundError("Schedule not found")
        if not slot.is_active:
            raise NoActiveSessionError("Schedule is no longer active")
        if slot.period != period:
            raise NoActiveSessionError("Schedule does not belong to the current academic period")
        return slot

    def _check_audience(self, slot: ScheduleSlot, student_id: str) -> None:
        if slot.audience.is_open:
            return
        profile = self._students.get_by_student_id(student_id)
        if not profile:
            raise NotFoundError("Student not found")
        problem = slot.audience.mismatch(
            department=profile.department,
            year_level=profile.year_level,
            section=profile.section,
        )
        if problem:
            raise AudienceMismatchError(problem)

    def _time_in(
        self,
        enrollment: Enrollment,
        session: EffectiveSession,
        scanned_at: datetime,
        *,
        scanned_by: Optional[int],
        stamp: dict,
    ) -> Optional[ScanResult]:
        late = self._policy.late_minutes(session=session, scanned_at=scanned_at)
        decision = self._factory.for_time_in(late_minutes=late).decide_time_in(late_minutes=late)

        time_in = scanned_at.time().replace(microsecond=0)
        record_id = self._attendance.create_time_in(
            enrollment_id=enrollment.enrollment_id,
            schedule_id=session.schedule_id,
            on=session.on,
            time_in=time_in,
            status=decision.status,
            late_minutes=decision.late_minutes,
            scanned_by=scanned_by,
        )
        if record_id is None:
            return None

        audit(
            "attendance.time_in",
            entity="AttendanceRecord",
            entity_id=record_id,
            actor_id=scanned_by,
            enrollment_id=enrollment.enrollment_id,
            schedule_id=session.schedule_id,
            status=decision.status.value,
            late_minutes=decision.late_minutes,
            **stamp,
        )
        return ScanResult(
            action=ScanAction.TIME_IN,
            record_id=record_id,
            status=decision.status,
            late_minutes=decision.late_minutes,
            time_in=time_in,
            time_out=None,
        )

    def _time_out(
        self,
        record: AttendanceRecord,
        scanned_at: datetime,
        *,
        scanned_by: Optional[int],
        stamp: dict,
    ) -> ScanResult:
        if record.time_out is not None:
            raise AlreadyCompleteError("Attendance for today is already complete")

        time_out = scanned_at.time().replace(microsecond=0)
        if record.time_in is not None and time_out < record.time_in:
            raise OutsideWindowError(f"Time-out cannot be earlier than time-in ({fmt_time(record.time_in)})")

        decision = self._factory.for_time_out(current=record).decide_time_out(current=record)

        if not self._attendance.set_time_out(attendance_id=record.attendance_id, time_out=time_out):
            latest = self._attendance.get_for_enrollment_and_date(record.enrollment_id, record.on)
            logger.info(
                "time-out for record %s was already written (time_out=%s)",
                record.attendance_id,
                fmt_time(latest.time_out) if latest else None,
            )
            raise AlreadyCompleteError("Attendance for today is already complete")

        audit(
            "attendance.time_out",
            entity="AttendanceRecord",
            entity_id=record.attendance_id,
            actor_id=scanned_by,
            enrollment_id=record.enrollment_id,
            schedule_id=record.schedule_id,
            **stamp,
        )
        return ScanResult(
            action=ScanAction.TIME_OUT,
            record_id=record.attendance_id,
            status=decision.status,
            late_minutes=decision.late_minutes,
            time_in=record.time_in,
            time_out=time_out,
        )
