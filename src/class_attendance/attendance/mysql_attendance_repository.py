from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, normalize_mysql_time
from ..schedules.model import AcademicPeriod
from .model import AttendanceHistoryRow, AttendanceRecord, Enrollment
from .repository import AttendanceRepository, EnrollmentRepository


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        enrollment_id=int(r["enrollment_id"]),
        schedule_id=int(r["schedule_id"]),
        on=r["attendance_date"],
        time_in=normalize_mysql_time(r.get("time_in")),
        time_out=normalize_mysql_time(r.get("time_out")),
        status=AttendanceStatus(r["status"]),
        late_minutes=int(r.get("late_minutes") or 0),
        scanned_by=r.get("scanned_by"),
    )


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, *, student_id: str, subject_id: int, period: AcademicPeriod) -> Optional[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT enrollment_id, student_id, subject_id, academic_year_id, semester_id
                FROM enrollments
                WHERE student_id=%s AND subject_id=%s AND academic_year_id=%s AND semester_id=%s
                """,
                (str(student_id), int(subject_id), int(period.academic_year_id), int(period.semester_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Enrollment(
                enrollment_id=int(r["enrollment_id"]),
                student_id=str(r["student_id"]),
                subject_id=int(r["subject_id"]),
                period=AcademicPeriod(academic_year_id=int(r["academic_year_id"]), semester_id=int(r["semester_id"])),
            )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_enrollment_and_date(self, enrollment_id: int, on: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, enrollment_id, schedule_id, attendance_date,
                       time_in, time_out, status, late_minutes, scanned_by
                FROM attendance_records
                WHERE enrollment_id=%s AND attendance_date=%s
                """,
                (int(enrollment_id), on),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        enrollment_id, schedule_id, attendance_date, time_in, status, late_minutes, scanned_by
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(enrollment_id),
                        int(schedule_id),
                        on,
                        time_in,
                        status.value,
                        int(late_minutes),
                        scanned_by,
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            # uq_attendance_enrollment_date: someone else recorded the time-in first.
            if is_duplicate_key(e):
                return None
            raise

    def set_time_out(self, *, attendance_id: int, time_out: time) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET time_out=%s
                WHERE attendance_id=%s AND time_out IS NULL
                """,
                (time_out, int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_for_slot_and_date(self, *, schedule_id: int, on: date) -> Sequence[AttendanceHistoryRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.attendance_id, a.enrollment_id, e.student_id, st.full_name, a.attendance_date,
                       a.time_in, a.time_out, a.status, a.late_minutes
                FROM attendance_records a
                JOIN enrollments e ON e.enrollment_id = a.enrollment_id
                LEFT JOIN students st ON st.student_id = e.student_id
                WHERE a.schedule_id=%s AND a.attendance_date=%s
                ORDER BY a.time_in ASC, a.attendance_id ASC
                """,
                (int(schedule_id), on),
            )
            return [
                AttendanceHistoryRow(
                    attendance_id=int(r["attendance_id"]),
                    enrollment_id=int(r["enrollment_id"]),
                    student_id=str(r["student_id"]),
                    full_name=r.get("full_name"),
                    on=r["attendance_date"],
                    time_in=normalize_mysql_time(r.get("time_in")),
                    time_out=normalize_mysql_time(r.get("time_out")),
                    status=AttendanceStatus(r["status"]),
                    late_minutes=int(r.get("late_minutes") or 0),
                )
                for r in fetchall(cur)
            ]
