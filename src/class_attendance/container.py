from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository, MySQLEnrollmentRepository
from .attendance.policy import ScanPolicy
from .attendance.repository import AttendanceRepository, EnrollmentRepository
from .attendance.service import AttendanceRecorder
from .core.constants import DEFAULT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .overrides.mysql_override_repository import MySQLOverrideRepository
from .overrides.repository import OverrideRepository
from .overrides.service import OverrideService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.resolver import ScheduleResolver
from .schedules.service import ScheduleService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    timezone: str

    schedules_repo: ScheduleRepository
    overrides_repo: OverrideRepository
    students_repo: StudentRepository
    enrollments_repo: EnrollmentRepository
    attendance_repo: AttendanceRepository

    resolver: ScheduleResolver
    schedule_service: ScheduleService
    override_service: OverrideService
    attendance_recorder: AttendanceRecorder


def wire(
    *,
    schedules_repo: ScheduleRepository,
    overrides_repo: OverrideRepository,
    students_repo: StudentRepository,
    enrollments_repo: EnrollmentRepository,
    attendance_repo: AttendanceRepository,
    policy: ScanPolicy | None = None,
    timezone: str = DEFAULT_TIMEZONE,
    clock: Callable[[], datetime] | None = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    resolver = ScheduleResolver(schedules_repo, overrides_repo)
    schedule_service = ScheduleService(schedules_repo, resolver)
    override_service = OverrideService(overrides_repo, schedules_repo)
    attendance_recorder = AttendanceRecorder(
        attendance_repo,
        enrollments_repo,
        schedules_repo,
        students_repo,
        resolver,
        policy=policy or ScanPolicy(),
        strategy_factory=AttendanceStrategyFactory(),
        timezone=timezone,
        clock=clock,
    )

    return Container(
        conn=conn,
        timezone=timezone,
        schedules_repo=schedules_repo,
        overrides_repo=overrides_repo,
        students_repo=students_repo,
        enrollments_repo=enrollments_repo,
        attendance_repo=attendance_repo,
        resolver=resolver,
        schedule_service=schedule_service,
        override_service=override_service,
        attendance_recorder=attendance_recorder,
    )


def build_container(*, db_config: dict, settings: object = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        schedules_repo=MySQLScheduleRepository(conn),
        overrides_repo=MySQLOverrideRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        enrollments_repo=MySQLEnrollmentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        policy=ScanPolicy.from_settings(settings),
        timezone=str(getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE)),
        conn=conn,
    )
