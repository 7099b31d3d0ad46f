from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time, tzinfo

from ..common.datetime_utils import parse_clock_time, parse_zone_offset
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_WORK_START, DEFAULT_ZONE_OFFSET


@dataclass(frozen=True)
class WorkPolicy:
    """Work-start rule evaluated in the fixed local zone."""

    work_start: time = field(default_factory=lambda: parse_clock_time(DEFAULT_WORK_START))
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    tz: tzinfo = field(default_factory=lambda: parse_zone_offset(DEFAULT_ZONE_OFFSET))

    @property
    def late_after_minute(self) -> int:
        """Last local minute-of-day that still counts as on time."""
        return self.work_start.hour * 60 + self.work_start.minute + int(self.grace_minutes)

    @classmethod
    def from_settings(cls, settings) -> "WorkPolicy":
        return cls(
            work_start=parse_clock_time(getattr(settings, "WORK_START_TIME", DEFAULT_WORK_START)),
            grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
            tz=parse_zone_offset(getattr(settings, "ZONE_OFFSET", DEFAULT_ZONE_OFFSET)),
        )
