from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_time_in(self, *, late_minutes: int) -> AttendanceStrategy:
        if late_minutes > 0:
            return LateStrategy()
        return PresentStrategy()

    def for_time_out(self, *, current: AttendanceRecord) -> AttendanceStrategy:
        if current.status == AttendanceStatus.LATE:
            return LateStrategy()
        return PresentStrategy()
