from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import OverrideKind, OverrideStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, normalize_mysql_time
from .model import NewOverrideRequest, ScheduleOverride
from .repository import OverrideRepository

_COLUMNS = """
    o.override_id, o.schedule_id, o.override_date, o.kind,
    o.requested_start_time, o.requested_end_time, o.reason, o.status,
    o.requested_by, o.created_at, o.admin_notes, o.decided_by, o.decided_at
"""


def _to_override(r: dict) -> ScheduleOverride:
    return ScheduleOverride(
        override_id=int(r["override_id"]),
        schedule_id=int(r["schedule_id"]),
        on=r["override_date"],
        kind=OverrideKind(r["kind"]),
        requested_start_time=normalize_mysql_time(r.get("requested_start_time")),
        requested_end_time=normalize_mysql_time(r.get("requested_end_time")),
        reason=r["reason"],
        status=OverrideStatus(r["status"]),
        requested_by=int(r["requested_by"]),
        created_at=r["created_at"],
        admin_notes=r.get("admin_notes"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
    )


class MySQLOverrideRepository(OverrideRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, request: NewOverrideRequest, requested_by: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedule_overrides(
                    schedule_id, override_date, kind, requested_start_time, requested_end_time,
                    reason, status, requested_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(request.schedule_id),
                    request.on,
                    request.kind.value,
                    request.requested_start_time,
                    request.requested_end_time,
                    request.reason,
                    OverrideStatus.PENDING.value,
                    int(requested_by),
                ),
            )
            return int(cur.lastrowid)

    def get(self, override_id: int) -> Optional[ScheduleOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM schedule_overrides o WHERE o.override_id=%s", (int(override_id),))
            r = fetchone(cur)
            return _to_override(r) if r else None

    def get_approved(self, *, schedule_id: int, on: date) -> Optional[ScheduleOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM schedule_overrides o
                WHERE o.schedule_id=%s AND o.override_date=%s AND o.status=%s
                """,
                (int(schedule_id), on, OverrideStatus.APPROVED.value),
            )
            r = fetchone(cur)
            return _to_override(r) if r else None

    def decide(
        self,
        *,
        override_id: int,
        status: OverrideStatus,
        decided_by: int,
        admin_notes: Optional[str] = None,
    ) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                if status is OverrideStatus.APPROVED:
                    # Serialize approvals per slot; the unique key on approved rows backs this up.
                    cur.execute(
                        """
                        SELECT s.schedule_id
                        FROM schedule_slots s
                        JOIN schedule_overrides o ON o.schedule_id = s.schedule_id
                        WHERE o.override_id=%s
                        FOR UPDATE
                        """,
                        (int(override_id),),
                    )
                    fetchall(cur)
                    cur.execute(
                        """
                        SELECT COUNT(*) AS n
                        FROM schedule_overrides other
                        JOIN schedule_overrides o
                          ON o.schedule_id = other.schedule_id AND o.override_date = other.override_date
                        WHERE o.override_id=%s AND other.override_id<>o.override_id AND other.status=%s
                        """,
                        (int(override_id), OverrideStatus.APPROVED.value),
                    )
                    r = fetchone(cur)
                    if r and int(r["n"]) > 0:
                        raise ConflictError("An approved override already exists for this schedule on this date")

                cur.execute(
                    """
                    UPDATE schedule_overrides
                    SET status=%s, decided_by=%s, decided_at=NOW(), admin_notes=%s
                    WHERE override_id=%s AND status=%s
                    """,
                    (
                        status.value,
                        int(decided_by),
                        admin_notes,
                        int(override_id),
                        OverrideStatus.PENDING.value,
                    ),
                )
                return cur.rowcount > 0
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError("An approved override already exists for this schedule on this date") from e
            raise

    def list_overrides(
        self,
        *,
        status: Optional[OverrideStatus] = None,
        teacher_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[ScheduleOverride]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("o.status=%s")
            params.append(status.value)
        if teacher_id is not None:
            clauses.append("s.teacher_id=%s")
            params.append(int(teacher_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM schedule_overrides o
                JOIN schedule_slots s ON s.schedule_id = o.schedule_id
                WHERE {where}
                ORDER BY o.created_at DESC, o.override_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_override(r) for r in fetchall(cur)]
