from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import OverrideKind, OverrideStatus


@dataclass(frozen=True)
class ScheduleOverride:
    """One exception to one slot on one calendar date."""

    override_id: int
    schedule_id: int
    on: date
    kind: OverrideKind
    requested_start_time: Optional[time]
    requested_end_time: Optional[time]
    reason: str
    status: OverrideStatus
    requested_by: int
    created_at: datetime
    admin_notes: Optional[str] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None

    def to_dict(self, *, today: Optional[date] = None) -> dict:
        return {
            "override_id": self.override_id,
            "schedule_id": self.schedule_id,
            "date": self.on.isoformat(),
            "kind": self.kind.value,
            "requested_start_time": self.requested_start_time.strftime("%H:%M") if self.requested_start_time else None,
            "requested_end_time": self.requested_end_time.strftime("%H:%M") if self.requested_end_time else None,
            "reason": self.reason,
            "status": self.status.value,
            "requested_by": self.requested_by,
            "admin_notes": self.admin_notes,
            "decided_by": self.decided_by,
            "decided_at": self.decided_at.isoformat(timespec="seconds") if self.decided_at else None,
            "created_at": self.created_at.isoformat(timespec="seconds"),
            "is_past_date": bool(today and self.on < today),
        }


@dataclass(frozen=True)
class NewOverrideRequest:
    schedule_id: int
    on: date
    kind: OverrideKind
    reason: str
    requested_start_time: Optional[time] = None
    requested_end_time: Optional[time] = None


@dataclass(frozen=True)
class OverrideDecisionRequest:
    override_id: int
    decision: OverrideStatus
    admin_notes: Optional[str] = None
