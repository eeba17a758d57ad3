from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """Arrived within the late grace."""

    def decide_time_in(self, *, late_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, late_minutes=0)
