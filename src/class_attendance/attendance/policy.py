from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import at, fmt_time, whole_minutes
from ..core.constants import (
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_POST_WINDOW_GRACE_MINUTES,
    DEFAULT_PRE_WINDOW_GRACE_MINUTES,
)
from ..core.exceptions import OutsideWindowError, TimestampOutOfBoundsError
from ..schedules.model import EffectiveSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanPolicy:
    """Timing rules applied to a scan once its session has been resolved."""

    pre_window_grace_minutes: int = DEFAULT_PRE_WINDOW_GRACE_MINUTES
    post_window_grace_minutes: int = DEFAULT_POST_WINDOW_GRACE_MINUTES
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    clock_tolerance_minutes: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: object) -> "ScanPolicy":
        tolerance = getattr(settings, "SCAN_CLOCK_TOLERANCE_MINUTES", None)
        return cls(
            pre_window_grace_minutes=int(getattr(settings, "PRE_WINDOW_GRACE_MINUTES", DEFAULT_PRE_WINDOW_GRACE_MINUTES)),
            post_window_grace_minutes=int(getattr(settings, "POST_WINDOW_GRACE_MINUTES", DEFAULT_POST_WINDOW_GRACE_MINUTES)),
            late_grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
            clock_tolerance_minutes=int(tolerance) if tolerance is not None else None,
        )

    def check_clock(self, *, scanned_at: datetime, server_now: datetime) -> None:
        skew = scanned_at - server_now
        if abs(skew) > timedelta(minutes=1):
            logger.info("scan timestamp differs from server time by %s", skew)
        if self.clock_tolerance_minutes is None:
            return
        if abs(skew) > timedelta(minutes=self.clock_tolerance_minutes):
            logger.warning("rejecting scan timestamp %s (server %s)", scanned_at.isoformat(), server_now.isoformat())
            raise TimestampOutOfBoundsError(
                f"Scan timestamp is more than {self.clock_tolerance_minutes} minutes away from server time"
            )

    def window(self, session: EffectiveSession) -> tuple[datetime, datetime]:
        opens = at(session.on, session.start_time) - timedelta(minutes=self.pre_window_grace_minutes)
        closes = at(session.on, session.end_time) + timedelta(minutes=self.post_window_grace_minutes)
        return opens, closes

    def check_window(self, *, session: EffectiveSession, scanned_at: datetime) -> None:
        opens, closes = self.window(session)
        if not opens <= scanned_at <= closes:
            raise OutsideWindowError(
                f"Scanning is open from {opens.strftime('%H:%M')} to {closes.strftime('%H:%M')} "
                f"for the class at {fmt_time(session.start_time)}-{fmt_time(session.end_time)}"
            )

    def late_minutes(self, *, session: EffectiveSession, scanned_at: datetime) -> int:
        cutoff = at(session.on, session.start_time) + timedelta(minutes=self.late_grace_minutes)
        return max(0, whole_minutes(scanned_at - cutoff))
