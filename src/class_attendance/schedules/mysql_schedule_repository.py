from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import AcademicPeriod, AudienceCriteria, NewScheduleSlot, ScheduleSlot
from .repository import ScheduleRepository

_COLUMNS = """
    schedule_id, teacher_id, subject_id, day_of_week, start_time, end_time, room,
    department, year_level, section, academic_year_id, semester_id, is_active
"""


def _to_slot(r: dict) -> ScheduleSlot:
    return ScheduleSlot(
        schedule_id=int(r["schedule_id"]),
        teacher_id=int(r["teacher_id"]),
        subject_id=int(r["subject_id"]),
        day_of_week=int(r["day_of_week"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        period=AcademicPeriod(academic_year_id=int(r["academic_year_id"]), semester_id=int(r["semester_id"])),
        room=r.get("room"),
        audience=AudienceCriteria(
            department=r.get("department"),
            year_level=r.get("year_level"),
            section=r.get("section"),
        ),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, schedule_id: int) -> Optional[ScheduleSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM schedule_slots WHERE schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _to_slot(r) if r else None

    def create(self, slot: NewScheduleSlot) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedule_slots(
                    teacher_id, subject_id, day_of_week, start_time, end_time, room,
                    department, year_level, section, academic_year_id, semester_id, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    int(slot.teacher_id),
                    int(slot.subject_id),
                    int(slot.day_of_week),
                    slot.start_time,
                    slot.end_time,
                    slot.room,
                    slot.audience.department,
                    slot.audience.year_level,
                    slot.audience.section,
                    int(slot.period.academic_year_id),
                    int(slot.period.semester_id),
                ),
            )
            return int(cur.lastrowid)

    def set_active(self, schedule_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE schedule_slots SET is_active=%s WHERE schedule_id=%s",
                (1 if is_active else 0, int(schedule_id)),
            )
            return cur.rowcount > 0

    def list_for_teacher(
        self,
        *,
        teacher_id: int,
        period: AcademicPeriod,
        day_of_week: Optional[int] = None,
    ) -> Sequence[ScheduleSlot]:
        clauses = ["teacher_id=%s", "academic_year_id=%s", "semester_id=%s", "is_active=1"]
        params: list[object] = [int(teacher_id), int(period.academic_year_id), int(period.semester_id)]
        if day_of_week is not None:
            clauses.append("day_of_week=%s")
            params.append(int(day_of_week))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM schedule_slots
                WHERE {where}
                ORDER BY day_of_week ASC, start_time ASC
                """,
                tuple(params),
            )
            return [_to_slot(r) for r in fetchall(cur)]
