from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...core.enums import AttendanceStatus
from ..model import AttendanceRecord


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    late_minutes: int = 0


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide_time_in(self, *, late_minutes: int) -> StatusDecision:
        raise NotImplementedError

    def decide_time_out(self, *, current: AttendanceRecord) -> StatusDecision:
        # Leaving never changes what the arrival decided.
        return StatusDecision(status=current.status, late_minutes=current.late_minutes)
