from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import minutes_of_day
from ...core.enums import AttendanceStatus
from ..policy import WorkPolicy
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in; the note keeps how late, since checkout overwrites the status."""

    def decide_checkin(self, *, now: datetime, policy: WorkPolicy) -> StatusDecision:
        start = policy.work_start.hour * 60 + policy.work_start.minute
        late_by = minutes_of_day(now, policy.tz) - start
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {late_by} min")
