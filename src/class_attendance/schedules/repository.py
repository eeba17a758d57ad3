from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AcademicPeriod, NewScheduleSlot, ScheduleSlot


class ScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: int) -> Optional[ScheduleSlot]:
        """Return the slot whether active or not."""

        raise NotImplementedError

    def create(self, slot: NewScheduleSlot) -> int:
        raise NotImplementedError

    def set_active(self, schedule_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def list_for_teacher(
        self,
        *,
        teacher_id: int,
        period: AcademicPeriod,
        day_of_week: Optional[int] = None,
    ) -> Sequence[ScheduleSlot]:
        """Active slots of a teacher in a period, ordered by day and start time."""

        raise NotImplementedError
