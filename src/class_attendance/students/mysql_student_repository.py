from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import StudentProfile
from .repository import StudentRepository


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_student_id(self, student_id: str) -> Optional[StudentProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, full_name, department, year_level, section
                FROM students
                WHERE student_id=%s
                """,
                (str(student_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return StudentProfile(
                student_id=str(r["student_id"]),
                full_name=r["full_name"],
                department=r.get("department"),
                year_level=r.get("year_level"),
                section=r.get("section"),
            )
