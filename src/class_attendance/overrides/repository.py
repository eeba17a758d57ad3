from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import OverrideStatus
from .model import NewOverrideRequest, ScheduleOverride


class OverrideRepository(Protocol):
    def create(self, *, request: NewOverrideRequest, requested_by: int) -> int:
        """Insert a PENDING override and return its id."""

        raise NotImplementedError

    def get(self, override_id: int) -> Optional[ScheduleOverride]:
        raise NotImplementedError

    def get_approved(self, *, schedule_id: int, on: date) -> Optional[ScheduleOverride]:
        raise NotImplementedError

    def decide(
        self,
        *,
        override_id: int,
        status: OverrideStatus,
        decided_by: int,
        admin_notes: Optional[str] = None,
    ) -> bool:
        """Move a PENDING override to `status`.

        Returns False when the override is no longer PENDING. Raises ConflictError when
        approving would create a second APPROVED override for the same slot and date.
        """

        raise NotImplementedError

    def list_overrides(
        self,
        *,
        status: Optional[OverrideStatus] = None,
        teacher_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[ScheduleOverride]:
        raise NotImplementedError
