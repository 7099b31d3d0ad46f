from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..policy import WorkPolicy
from .base import AttendanceStrategy, StatusDecision


class OnTimeStrategy(AttendanceStrategy):
    """Check-in at or before work start + grace."""

    def decide_checkin(self, *, now: datetime, policy: WorkPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ON_TIME)
