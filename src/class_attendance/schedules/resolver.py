from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional

from ..common.datetime_utils import day_of_week
from ..core.enums import OverrideKind
from ..core.exceptions import NotFoundError, ValidationError
from ..overrides.repository import OverrideRepository
from .model import AcademicPeriod, EffectiveSession, OverrideRef, ScheduleSlot
from .repository import ScheduleRepository


class ScheduleResolver:
    """Combine a recurring slot with the override ledger for one date.

    Holds no state of its own; every call reads the slot and the ledger again, so two
    calls against an unchanged ledger always return equal sessions.
    """

    def __init__(self, schedules: ScheduleRepository, overrides: OverrideRepository):
        self._schedules = schedules
        self._overrides = overrides

    def load_slot(self, schedule_id: int, *, period: Optional[AcademicPeriod] = None) -> ScheduleSlot:
        slot = self._schedules.get_by_id(int(schedule_id))
        if not slot or not slot.is_active:
            raise NotFoundError("Schedule not found")
        if period is not None and slot.period != period:
            raise NotFoundError("Schedule not found in the given academic period")
        return slot

    def resolve(self, schedule_id: int, as_of: date, *, period: Optional[AcademicPeriod] = None) -> EffectiveSession:
        return self.resolve_slot(self.load_slot(schedule_id, period=period), as_of)

    def resolve_slot(self, slot: ScheduleSlot, as_of: date) -> EffectiveSession:
        if slot.start_time >= slot.end_time:
            raise ValidationError("Schedule has an invalid time range")

        base = EffectiveSession(
            schedule_id=slot.schedule_id,
            on=as_of,
            start_time=slot.start_time,
            end_time=slot.end_time,
            original_start_time=slot.start_time,
            original_end_time=slot.end_time,
        )

        # A day mismatch means "no class today"; overrides are not consulted.
        if day_of_week(as_of) != slot.day_of_week:
            return replace(base, day_mismatch=True)

        ov = self._overrides.get_approved(schedule_id=slot.schedule_id, on=as_of)
        if ov is None:
            return base

        ref = OverrideRef(override_id=ov.override_id, kind=ov.kind, reason=ov.reason, admin_notes=ov.admin_notes)
        if ov.kind is OverrideKind.CANCEL:
            return replace(base, cancelled=True, override=ref)
        if ov.kind is OverrideKind.TIME_CHANGE:
            if not ov.requested_start_time or not ov.requested_end_time:
                raise ValidationError("Approved time change is missing its requested window")
            return replace(base, start_time=ov.requested_start_time, end_time=ov.requested_end_time, override=ref)
        raise ValidationError(f"Unsupported override kind: {ov.kind!r}")
