from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role used by the workflow guards."""

    ADMIN = "admin"
    TEACHER = "teacher"


class OverrideKind(str, Enum):
    """What a schedule override does to one class occurrence."""

    TIME_CHANGE = "TIME_CHANGE"
    CANCEL = "CANCEL"


class OverrideStatus(str, Enum):
    """Approval lifecycle of an override request. APPROVED/REJECTED are terminal."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self is not OverrideStatus.PENDING


class AttendanceStatus(str, Enum):
    """Attendance status stored per enrollment and date."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"


class ScanAction(str, Enum):
    TIME_IN = "TIME_IN"
    TIME_OUT = "TIME_OUT"
