from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..common.audit import audit
from ..common.datetime_utils import day_of_week
from ..common.validators import optional_text, require_day_of_week, require_time_range
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import AcademicPeriod, EffectiveSession, NewScheduleSlot, ScheduleSlot
from .repository import ScheduleRepository
from .resolver import ScheduleResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotSession:
    """One row of a teacher's day view."""

    slot: ScheduleSlot
    session: EffectiveSession

    def to_dict(self) -> dict:
        return {
            "schedule_id": self.slot.schedule_id,
            "subject_id": self.slot.subject_id,
            "room": self.slot.room,
            "day_of_week": self.slot.day_of_week,
            "audience": {
                "department": self.slot.audience.department,
                "year_level": self.slot.audience.year_level,
                "section": self.slot.audience.section,
            },
            "session": self.session.to_dict(),
        }


class ScheduleService:
    def __init__(self, schedules: ScheduleRepository, resolver: ScheduleResolver):
        self._schedules = schedules
        self._resolver = resolver

    def create_slot(self, *, current_role: Role, slot: NewScheduleSlot) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can create schedules")

        if int(slot.teacher_id) <= 0:
            raise ValidationError("Teacher is invalid")
        if int(slot.subject_id) <= 0:
            raise ValidationError("Subject is invalid")
        require_day_of_week(slot.day_of_week)
        require_time_range(slot.start_time, slot.end_time, field_name="Schedule")

        schedule_id = self._schedules.create(
            NewScheduleSlot(
                teacher_id=int(slot.teacher_id),
                subject_id=int(slot.subject_id),
                day_of_week=int(slot.day_of_week),
                start_time=slot.start_time,
                end_time=slot.end_time,
                period=slot.period,
                room=optional_text(slot.room),
                audience=slot.audience,
            )
        )
        audit("schedule.create", entity="ScheduleSlot", entity_id=schedule_id, actor_role=current_role.value)
        return schedule_id

    def deactivate_slot(self, *, current_role: Role, schedule_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can deactivate schedules")

        slot = self._schedules.get_by_id(int(schedule_id))
        if not slot:
            raise NotFoundError("Schedule not found")
        if slot.is_active:
            self._schedules.set_active(slot.schedule_id, is_active=False)
            audit("schedule.deactivate", entity="ScheduleSlot", entity_id=slot.schedule_id, actor_role=current_role.value)

    def session_for(self, *, schedule_id: int, on: date, period: Optional[AcademicPeriod] = None) -> EffectiveSession:
        return self._resolver.resolve(int(schedule_id), on, period=period)

    def teacher_day(self, *, teacher_id: int, on: date, period: AcademicPeriod) -> list[SlotSession]:
        slots = self._schedules.list_for_teacher(teacher_id=int(teacher_id), period=period, day_of_week=day_of_week(on))
        logger.debug("teacher %s has %d slot(s) on %s", teacher_id, len(slots), on)
        return [SlotSession(slot=s, session=self._resolver.resolve_slot(s, on)) for s in slots]
