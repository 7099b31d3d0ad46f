from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from ..attendance.factory import is_late
from ..attendance.policy import WorkPolicy
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import civil_day, day_range, ensure_utc, now_utc, weekdays_between
from ..common.validators import require_date_order
from ..core.constants import DURATION_PRECISION
from ..core.enums import AttendanceStatus
from .model import AttendanceAggregates


class TimesheetService:
    """Presence / absence / lateness / hours rollups for one worker over civil days."""

    def __init__(self, attendance: AttendanceRepository, *, policy: Optional[WorkPolicy] = None):
        self._attendance = attendance
        self._policy = policy or WorkPolicy()

    def compute_aggregates(
        self,
        worker_id: int,
        start: date,
        end: date,
        *,
        now: datetime | None = None,
    ) -> AttendanceAggregates:
        require_date_order(start, end)
        now = ensure_utc(now or now_utc())
        tz = self._policy.tz
        today = civil_day(now, tz)

        rows = self._attendance.list_in_range(worker_id, day_range(start, tz).start, day_range(end, tz).end)

        present = late = missing = 0
        total_hours = 0.0
        for r in rows:
            total_hours += r.duration_hours or 0.0
            if civil_day(r.check_in_time, tz) > today:
                continue
            if r.is_complete:
                present += 1
            if r.status == AttendanceStatus.MISSING_CHECKOUT:
                missing += 1
            # Check-out overwrites the status, so lateness is also read back from the check-in.
            if r.status == AttendanceStatus.LATE or (
                r.status != AttendanceStatus.ABSENT and is_late(r.check_in_time, self._policy)
            ):
                late += 1

        # Today and future days are still open, never absent.
        yesterday = today - timedelta(days=1)
        expected = weekdays_between(start, min(end, yesterday))
        absent = max(expected - present, 0)

        total_hours = round(total_hours, DURATION_PRECISION)
        return AttendanceAggregates(
            worker_id=worker_id,
            start_day=start,
            end_day=end,
            present=present,
            absent=absent,
            late=late,
            total_hours=total_hours,
            average_hours=round(total_hours / (present or 1), DURATION_PRECISION),
            missing_checkout=missing,
        )
