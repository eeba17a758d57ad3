from __future__ import annotations

import threading
from datetime import date, datetime, time

import pytest

from class_attendance.attendance.model import AttendanceRecord, ScanRequest
from class_attendance.core.enums import AttendanceStatus, ScanAction
from class_attendance.core.exceptions import AlreadyCompleteError

from fakes import PERIOD

DAY = date(2025, 6, 2)


def test_concurrent_scans_create_one_record(world):
    barrier = threading.Barrier(8)
    results, errors = [], []

    def worker():
        barrier.wait()
        try:
            results.append(
                world.recorder.record_scan(
                    ScanRequest(student_id="S-1", schedule_id=1, period=PERIOD, scanned_at=datetime(2025, 6, 2, 9, 5))
                )
            )
        except AlreadyCompleteError as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(world.attendance.by_key) == 1
    assert [r.action for r in results].count(ScanAction.TIME_IN) == 1
    assert [r.action for r in results].count(ScanAction.TIME_OUT) <= 1
    assert len(results) + len(errors) == 8


def test_lost_insert_race_becomes_time_out(world):
    # The row appears between the recorder's read and its insert.
    world.attendance.by_key[(1, DAY)] = AttendanceRecord(
        attendance_id=7,
        enrollment_id=1,
        schedule_id=1,
        on=DAY,
        time_in=time(9, 1),
        time_out=None,
        status=AttendanceStatus.PRESENT,
    )
    real_get = world.attendance.get_for_enrollment_and_date
    calls = []

    def stale_first_read(enrollment_id, on):
        calls.append(on)
        return None if len(calls) == 1 else real_get(enrollment_id, on)

    world.attendance.get_for_enrollment_and_date = stale_first_read

    result = world.recorder.record_scan(
        ScanRequest(student_id="S-1", schedule_id=1, period=PERIOD, scanned_at=datetime(2025, 6, 2, 9, 50))
    )

    assert result.action == ScanAction.TIME_OUT
    assert result.record_id == 7
    assert real_get(1, DAY).time_out == time(9, 50)


def test_lost_time_out_race_reports_complete(world):
    world.recorder.record_scan(
        ScanRequest(student_id="S-1", schedule_id=1, period=PERIOD, scanned_at=datetime(2025, 6, 2, 9, 0))
    )
    world.attendance.set_time_out = lambda **kwargs: False

    with pytest.raises(AlreadyCompleteError):
        world.recorder.record_scan(
            ScanRequest(student_id="S-1", schedule_id=1, period=PERIOD, scanned_at=datetime(2025, 6, 2, 9, 50))
        )
