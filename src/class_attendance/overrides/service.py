from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.audit import audit
from ..common.datetime_utils import day_of_week
from ..common.validators import optional_text, require_non_empty, require_time_range
from ..core.constants import DAY_NAMES, DEFAULT_LIST_LIMIT
from ..core.enums import OverrideKind, OverrideStatus, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..schedules.repository import ScheduleRepository
from .model import NewOverrideRequest, OverrideDecisionRequest, ScheduleOverride
from .repository import OverrideRepository


class OverrideService:
    """Teacher requests and admin decisions for one-date schedule exceptions.

    PENDING -> APPROVED | REJECTED, exactly once. Nothing expires on its own: a PENDING
    request for a past date stays PENDING until an administrator acts on it.
    """

    def __init__(self, overrides: OverrideRepository, schedules: ScheduleRepository):
        self._overrides = overrides
        self._schedules = schedules

    def create_override(self, *, current_role: Role, teacher_id: int, request: NewOverrideRequest) -> ScheduleOverride:
        if current_role != Role.TEACHER:
            raise AuthorizationError("Only teachers can request schedule overrides")

        slot = self._schedules.get_by_id(int(request.schedule_id))
        if not slot or not slot.is_active:
            raise NotFoundError("Schedule not found")
        if slot.teacher_id != int(teacher_id):
            raise AuthorizationError("Schedule is not assigned to you")

        reason = require_non_empty(request.reason, "Reason")

        if request.kind is OverrideKind.TIME_CHANGE:
            if not request.requested_start_time or not request.requested_end_time:
                raise ValidationError("A time change needs both a new start and a new end time")
            require_time_range(request.requested_start_time, request.requested_end_time, field_name="Requested time")
        elif request.kind is OverrideKind.CANCEL:
            if request.requested_start_time or request.requested_end_time:
                raise ValidationError("A cancellation cannot carry requested times")
        else:
            raise ValidationError(f"Unsupported override kind: {request.kind!r}")

        if day_of_week(request.on) != slot.day_of_week:
            raise ValidationError(
                f"This schedule meets on {DAY_NAMES[slot.day_of_week]}, "
                f"but {request.on.isoformat()} is a {DAY_NAMES[day_of_week(request.on)]}"
            )

        if self._overrides.get_approved(schedule_id=slot.schedule_id, on=request.on):
            raise ConflictError("An approved override is already in force for this schedule on this date")

        override_id = self._overrides.create(
            request=NewOverrideRequest(
                schedule_id=slot.schedule_id,
                on=request.on,
                kind=request.kind,
                reason=reason,
                requested_start_time=request.requested_start_time,
                requested_end_time=request.requested_end_time,
            ),
            requested_by=int(teacher_id),
        )
        audit(
            "schedule.override.create",
            entity="ScheduleOverride",
            entity_id=override_id,
            actor_id=int(teacher_id),
            actor_role=current_role.value,
            schedule_id=slot.schedule_id,
            date=request.on.isoformat(),
            kind=request.kind.value,
        )

        created = self._overrides.get(override_id)
        if not created:
            raise NotFoundError("Override not found after creation")
        return created

    def decide(self, *, current_role: Role, admin_user_id: int, request: OverrideDecisionRequest) -> ScheduleOverride:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can decide schedule overrides")

        if request.decision not in (OverrideStatus.APPROVED, OverrideStatus.REJECTED):
            raise ValidationError("Decision must be APPROVED or REJECTED")

        current = self._overrides.get(int(request.override_id))
        if not current:
            raise NotFoundError("Override not found")
        if current.status.is_terminal:
            raise ConflictError(f"Override was already {current.status.value.lower()}")

        if request.decision is OverrideStatus.APPROVED:
            existing = self._overrides.get_approved(schedule_id=current.schedule_id, on=current.on)
            if existing and existing.override_id != current.override_id:
                raise ConflictError("An approved override already exists for this schedule on this date")

        decided = self._overrides.decide(
            override_id=current.override_id,
            status=request.decision,
            decided_by=int(admin_user_id),
            admin_notes=optional_text(request.admin_notes),
        )
        if not decided:
            # Another admin decided it between our read and the conditional update.
            raise ConflictError("Override was already decided")

        audit(
            f"schedule.override.{request.decision.value.lower()}",
            entity="ScheduleOverride",
            entity_id=current.override_id,
            actor_id=int(admin_user_id),
            actor_role=current_role.value,
            schedule_id=current.schedule_id,
            date=current.on.isoformat(),
        )

        updated = self._overrides.get(current.override_id)
        if not updated:
            raise NotFoundError("Override not found")
        return updated

    def approve(self, *, current_role: Role, admin_user_id: int, override_id: int, admin_notes: str = "") -> ScheduleOverride:
        return self.decide(
            current_role=current_role,
            admin_user_id=admin_user_id,
            request=OverrideDecisionRequest(override_id=override_id, decision=OverrideStatus.APPROVED, admin_notes=admin_notes),
        )

    def reject(self, *, current_role: Role, admin_user_id: int, override_id: int, admin_notes: str = "") -> ScheduleOverride:
        return self.decide(
            current_role=current_role,
            admin_user_id=admin_user_id,
            request=OverrideDecisionRequest(override_id=override_id, decision=OverrideStatus.REJECTED, admin_notes=admin_notes),
        )

    def list_for_teacher(self, *, teacher_id: int, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[ScheduleOverride]:
        return self._overrides.list_overrides(teacher_id=int(teacher_id), limit=limit)

    def list_for_admin(self, *, status: Optional[OverrideStatus] = None, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[ScheduleOverride]:
        return self._overrides.list_overrides(status=status, limit=limit)

    @staticmethod
    def rows(overrides: Sequence[ScheduleOverride], *, today: date) -> list[dict]:
        return [o.to_dict(today=today) for o in overrides]
