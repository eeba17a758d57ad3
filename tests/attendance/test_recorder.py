from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, time, timedelta

import pytest

from class_attendance.attendance.model import ScanRequest
from class_attendance.attendance.policy import ScanPolicy
from class_attendance.core.enums import AttendanceStatus, OverrideKind, Role, ScanAction
from class_attendance.core.exceptions import (
    AlreadyCompleteError,
    AudienceMismatchError,
    AuthorizationError,
    DuplicateEnrollmentMissing,
    NoActiveSessionError,
    NotFoundError,
    OutsideWindowError,
    SessionCancelledError,
    TimestampOutOfBoundsError,
)
from class_attendance.schedules.model import AcademicPeriod, AudienceCriteria
from class_attendance.students.model import StudentProfile

from fakes import PERIOD, TEACHER_ID, World, make_slot


def scan(world, at: datetime, *, student_id: str = "S-1", schedule_id: int = 1, **kw):
    return world.recorder.record_scan(
        ScanRequest(student_id=student_id, schedule_id=schedule_id, period=PERIOD, scanned_at=at, **kw)
    )


def test_late_time_in(world):
    # 09:20 against 09:00 start with a 15 minute grace.
    result = scan(world, datetime(2025, 6, 2, 9, 20))

    assert result.action == ScanAction.TIME_IN
    assert result.status == AttendanceStatus.LATE
    assert result.late_minutes == 5
    rec = world.attendance.get_for_enrollment_and_date(1, datetime(2025, 6, 2).date())
    assert rec.attendance_id == result.record_id
    assert rec.time_in == time(9, 20)


def test_time_change_moves_window(world, monday):
    world.overrides.add(schedule_id=1, on=monday, kind=OverrideKind.TIME_CHANGE, start=time(10, 0), end=time(11, 0))

    with pytest.raises(OutsideWindowError):
        scan(world, datetime(2025, 6, 2, 9, 20))

    result = scan(world, datetime(2025, 6, 2, 10, 10))
    assert result.status == AttendanceStatus.PRESENT


def test_cancelled_session_then_next_week(world, monday):
    world.overrides.add(schedule_id=1, on=monday, kind=OverrideKind.CANCEL, reason="Campus fair")

    with pytest.raises(SessionCancelledError) as exc:
        scan(world, datetime(2025, 6, 2, 9, 5))
    assert "Campus fair" in str(exc.value)
    assert world.attendance.by_key == {}

    result = scan(world, datetime(2025, 6, 9, 9, 5))
    assert result.action == ScanAction.TIME_IN
    assert result.status == AttendanceStatus.PRESENT
    assert result.late_minutes == 0


def test_time_in_time_out_then_complete(world):
    first = scan(world, datetime(2025, 6, 2, 9, 0))
    second = scan(world, datetime(2025, 6, 2, 9, 50))

    assert first.action == ScanAction.TIME_IN
    assert first.status == AttendanceStatus.PRESENT
    assert second.action == ScanAction.TIME_OUT
    assert second.record_id == first.record_id
    assert second.time_in == time(9, 0)
    assert second.time_out == time(9, 50)

    with pytest.raises(AlreadyCompleteError):
        scan(world, datetime(2025, 6, 2, 9, 55))
    assert len(world.attendance.by_key) == 1


def test_time_out_keeps_late_status(world):
    scan(world, datetime(2025, 6, 2, 9, 40))
    out = scan(world, datetime(2025, 6, 2, 10, 0))

    assert out.status == AttendanceStatus.LATE
    assert out.late_minutes == 25


def test_wrong_weekday_has_no_session(world, monday):
    tuesday = monday + timedelta(days=1)
    world.overrides.add(schedule_id=1, on=tuesday, kind=OverrideKind.TIME_CHANGE, start=time(9, 0), end=time(10, 0))

    with pytest.raises(NoActiveSessionError):
        scan(world, datetime(2025, 6, 3, 9, 5))


@pytest.mark.parametrize(
    "at, ok",
    [
        (datetime(2025, 6, 2, 8, 45, 0), True),
        (datetime(2025, 6, 2, 8, 44, 59), False),
        (datetime(2025, 6, 2, 10, 30, 0), True),
        (datetime(2025, 6, 2, 10, 30, 1), False),
    ],
)
def test_window_edges_are_inclusive(world, at, ok):
    if ok:
        assert scan(world, at).action == ScanAction.TIME_IN
    else:
        with pytest.raises(OutsideWindowError):
            scan(world, at)


def test_lateness_is_monotonic(fixed_now):
    previous = -1
    for minute in range(0, 61, 3):
        w = World(now=fixed_now)
        w.schedules.add(make_slot())
        w.enrollments.enroll("S-1")

        result = scan(w, datetime(2025, 6, 2, 9, 0) + timedelta(minutes=minute))

        assert result.late_minutes >= previous
        assert (result.status == AttendanceStatus.LATE) == (result.late_minutes > 0)
        previous = result.late_minutes
    assert previous == 45


def test_lateness_floors_partial_minutes(world):
    result = scan(world, datetime(2025, 6, 2, 9, 15, 59))

    assert result.late_minutes == 0
    assert result.status == AttendanceStatus.PRESENT


def test_student_not_enrolled(world):
    with pytest.raises(DuplicateEnrollmentMissing):
        scan(world, datetime(2025, 6, 2, 9, 5), student_id="S-2")


def test_enrollment_in_another_period_does_not_count(world):
    world.enrollments.enroll("S-2", period=AcademicPeriod(academic_year_id=2, semester_id=1))

    with pytest.raises(DuplicateEnrollmentMissing):
        scan(world, datetime(2025, 6, 2, 9, 5), student_id="S-2")


def test_unknown_slot(world):
    with pytest.raises(NotFoundError):
        scan(world, datetime(2025, 6, 2, 9, 5), schedule_id=404)


def test_inactive_slot_has_no_session(world):
    world.schedules.set_active(1, is_active=False)

    with pytest.raises(NoActiveSessionError):
        scan(world, datetime(2025, 6, 2, 9, 5))


def test_slot_from_other_period_has_no_session(world):
    world.schedules.add(make_slot(2, period=AcademicPeriod(academic_year_id=2, semester_id=2)))

    with pytest.raises(NoActiveSessionError):
        scan(world, datetime(2025, 6, 2, 9, 5), schedule_id=2)


def test_scanner_must_own_the_slot(world):
    with pytest.raises(AuthorizationError):
        scan(world, datetime(2025, 6, 2, 9, 5), scanned_by=TEACHER_ID + 1)

    scan(world, datetime(2025, 6, 2, 9, 5), scanned_by=TEACHER_ID)
    assert world.attendance.get_for_enrollment_and_date(1, datetime(2025, 6, 2).date()).scanned_by == TEACHER_ID


def test_audience_accepts_normalised_year_level(world):
    slot = world.schedules.get_by_id(1)
    world.schedules.add(replace(slot, audience=AudienceCriteria(department="BSIT", year_level="1", section="A")))

    assert scan(world, datetime(2025, 6, 2, 9, 5)).action == ScanAction.TIME_IN


def test_audience_mismatch(world):
    slot = world.schedules.get_by_id(1)
    world.schedules.add(replace(slot, audience=AudienceCriteria(department="BSIT", section="B")))

    with pytest.raises(AudienceMismatchError) as exc:
        scan(world, datetime(2025, 6, 2, 9, 5))
    assert "section" in str(exc.value)


def test_audience_requires_known_student(world):
    slot = world.schedules.get_by_id(1)
    world.schedules.add(replace(slot, audience=AudienceCriteria(department="BSIT")))
    world.enrollments.enroll("S-9")

    with pytest.raises(NotFoundError):
        scan(world, datetime(2025, 6, 2, 9, 5), student_id="S-9")


def test_time_out_before_time_in_is_rejected(world):
    scan(world, datetime(2025, 6, 2, 9, 30))

    with pytest.raises(OutsideWindowError):
        scan(world, datetime(2025, 6, 2, 9, 10))


def test_missing_timestamp_uses_server_clock(world):
    world.now = datetime(2025, 6, 2, 9, 17, 30)

    result = world.recorder.record_scan(ScanRequest(student_id="S-1", schedule_id=1, period=PERIOD))

    assert result.time_in == time(9, 17, 30)
    assert result.late_minutes == 2


def test_clock_tolerance_rejects_skewed_timestamps(fixed_now):
    w = World(now=fixed_now, policy=ScanPolicy(clock_tolerance_minutes=10))
    w.schedules.add(make_slot())
    w.enrollments.enroll("S-1")

    with pytest.raises(TimestampOutOfBoundsError):
        scan(w, fixed_now + timedelta(minutes=11))

    assert scan(w, fixed_now + timedelta(minutes=5)).action == ScanAction.TIME_IN


def test_history_lists_records_for_the_slot(world):
    world.enrollments.enroll("S-2")
    scan(world, datetime(2025, 6, 2, 9, 20), student_id="S-2")
    scan(world, datetime(2025, 6, 2, 9, 1))

    rows = world.recorder.history(schedule_id=1, on=datetime(2025, 6, 2).date(), period=PERIOD)

    assert [r.student_id for r in rows] == ["S-1", "S-2"]
    assert rows[1].to_dict()["status"] == "LATE"
    assert rows[0].full_name == "Maria Santos"


def test_history_only_lists_the_requested_slot(world, monday):
    # Same subject, same day, afternoon section.
    world.schedules.add(make_slot(2, start=time(13, 0), end=time(14, 0)))
    world.enrollments.enroll("S-2")
    scan(world, datetime(2025, 6, 2, 13, 5), student_id="S-2", schedule_id=2)

    morning = world.recorder.history(schedule_id=1, on=monday, period=PERIOD)
    afternoon = world.recorder.history(schedule_id=2, on=monday, period=PERIOD)

    assert morning == []
    assert [r.student_id for r in afternoon] == ["S-2"]


def test_history_survives_deactivation(world, monday):
    scan(world, datetime(2025, 6, 2, 9, 5))
    world.schedule_service.deactivate_slot(current_role=Role.ADMIN, schedule_id=1)

    rows = world.recorder.history(schedule_id=1, on=monday, period=PERIOD)

    assert [r.student_id for r in rows] == ["S-1"]
    with pytest.raises(NotFoundError):
        world.recorder.history(schedule_id=1, on=monday, period=AcademicPeriod(academic_year_id=2, semester_id=1))
    with pytest.raises(NotFoundError):
        world.recorder.history(schedule_id=99, on=monday, period=PERIOD)


def _audit_lines(caplog):
    return [r.getMessage() for r in caplog.records if r.name == "class_attendance.audit"]


def test_audit_carries_caller_timestamp(world, caplog):
    caplog.set_level(logging.INFO, logger="class_attendance.audit")

    scan(world, datetime(2025, 6, 2, 9, 5))
    scan(world, datetime(2025, 6, 2, 9, 50))

    time_in, time_out = _audit_lines(caplog)
    assert "attendance.time_in" in time_in
    assert "scanned_at=2025-06-02T09:05:00" in time_in
    assert "server_now=2025-06-02T09:00:00" in time_in
    assert "timestamp_source=caller" in time_in
    assert "attendance.time_out" in time_out
    assert "scanned_at=2025-06-02T09:50:00" in time_out
    assert "timestamp_source=caller" in time_out


def test_audit_marks_server_timestamp(world, caplog):
    caplog.set_level(logging.INFO, logger="class_attendance.audit")
    world.now = datetime(2025, 6, 2, 9, 7)

    world.recorder.record_scan(ScanRequest(student_id="S-1", schedule_id=1, period=PERIOD))

    (line,) = _audit_lines(caplog)
    assert "scanned_at=2025-06-02T09:07:00" in line
    assert "server_now=2025-06-02T09:07:00" in line
    assert "timestamp_source=server" in line


def test_audience_year_level_requires_a_known_year(world):
    slot = world.schedules.get_by_id(1)
    world.schedules.add(replace(slot, audience=AudienceCriteria(year_level="1")))
    world.students.by_id["S-3"] = StudentProfile(
        student_id="S-3", full_name="Ana Cruz", department="BSIT", year_level=None, section="A"
    )
    world.enrollments.enroll("S-3")

    with pytest.raises(AudienceMismatchError) as exc:
        scan(world, datetime(2025, 6, 2, 9, 5), student_id="S-3")
    assert "year" in str(exc.value).lower()
