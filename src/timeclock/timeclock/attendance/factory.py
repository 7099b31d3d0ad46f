from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import minutes_of_day
from .policy import WorkPolicy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


def is_late(instant: datetime, policy: WorkPolicy) -> bool:
    """Late means strictly after start + grace, compared in local minutes-of-day."""
    return minutes_of_day(instant, policy.tz) > policy.late_after_minute


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: pick the check-in strategy for the moment of arrival."""

    def for_checkin(self, *, now: datetime, policy: WorkPolicy) -> AttendanceStrategy:
        if is_late(now, policy):
            return LateStrategy()
        return OnTimeStrategy()
