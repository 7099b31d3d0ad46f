from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Mapping, Optional

from ..common.datetime_utils import day_range, ensure_utc, now_utc, today_range
from ..common.validators import require_date_order, require_geolocation
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    DuplicateEntryError,
    NoActiveSession,
    ValidationError,
)
from ..timesheet.calculator.base import DurationCalculator
from ..timesheet.calculator.break_deduction import BreakDeductionCalculator
from .cache import TodayStatusCache
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .policy import WorkPolicy
from .reconciler import CarryOverReconciler
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

# Statuses that close the day even without a check-out time.
_DAY_CLOSED = {AttendanceStatus.ABSENT, AttendanceStatus.MISSING_CHECKOUT}


class AttendanceService:
    """Check-in/check-out gatekeeper: at most one open session per worker per civil day."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        policy: WorkPolicy | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        calculator: DurationCalculator | None = None,
        reconciler: CarryOverReconciler | None = None,
        cache: TodayStatusCache | None = None,
    ):
        self._attendance = attendance
        self._policy = policy or WorkPolicy()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._calculator = calculator or BreakDeductionCalculator()
        self._reconciler = reconciler or CarryOverReconciler(attendance, self._policy.tz)
        self._cache = cache or TodayStatusCache()

    @property
    def policy(self) -> WorkPolicy:
        return self._policy

    def check_in(
        self,
        worker_id: int,
        *,
        now: datetime | None = None,
        geolocation: Optional[Mapping] = None,
    ) -> AttendanceRecord:
        now = ensure_utc(now or now_utc())
        geolocation = require_geolocation(geolocation)
        today = today_range(now, self._policy.tz)

        existing = self._attendance.find_latest_in_range(worker_id, today.start, today.end)
        if existing:
            if existing.check_out_time is not None or existing.status in _DAY_CLOSED:
                raise AlreadyCheckedOut("You have already checked out today")
            raise AlreadyCheckedIn("You have already checked in today")

        # Close out earlier days first so the worker is never open on two civil days.
        for stale in self._attendance.find_open_before(worker_id, today.start):
            self._reconciler.reconcile(stale, today=today.day)

        strategy = self._factory.for_checkin(now=now, policy=self._policy)
        decision = strategy.decide_checkin(now=now, policy=self._policy)

        try:
            attendance_id = self._attendance.create_checkin(
                worker_id=worker_id,
                work_date=today.day,
                check_in_time=now,
                status=decision.status,
                note=decision.note,
                geolocation=geolocation,
            )
        except DuplicateEntryError:
            self._cache.invalidate(worker_id)
            raise AlreadyCheckedIn("You have already checked in today")

        self._cache.invalidate(worker_id)
        logger.info(f"Worker {worker_id} checked in ({decision.status.value}) for {today.key}")
        return AttendanceRecord(
            attendance_id=attendance_id,
            worker_id=worker_id,
            work_date=today.day,
            check_in_time=now,
            check_out_time=None,
            status=decision.status,
            note=decision.note,
            geolocation=geolocation,
        )

    def check_out(self, worker_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = ensure_utc(now or now_utc())
        today = today_range(now, self._policy.tz)

        # Only today's session; carry-overs are closed through reconciliation or corrections.
        record = self._attendance.find_open_in_range(worker_id, today.start, today.end)
        if not record:
            raise NoActiveSession("You have not checked in today")

        # Check-out always closes the day; a late start is still readable from the note.
        duration = self._calculator.worked_hours(record.check_in_time, now)

        ok = self._attendance.update_checkout(
            attendance_id=record.attendance_id,
            check_out_time=now,
            duration_hours=duration,
            status=AttendanceStatus.CHECKED_OUT,
            note=record.note,
        )
        self._cache.invalidate(worker_id)
        if not ok:
            raise NoActiveSession("The session was already closed")

        logger.info(f"Worker {worker_id} checked out after {duration}h for {today.key}")
        return AttendanceRecord(
            attendance_id=record.attendance_id,
            worker_id=record.worker_id,
            work_date=record.work_date,
            check_in_time=record.check_in_time,
            check_out_time=now,
            status=AttendanceStatus.CHECKED_OUT,
            duration_hours=duration,
            note=record.note,
            geolocation=record.geolocation,
            created_at=record.created_at,
        )

    def get_today_attendance(self, worker_id: int, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        now = ensure_utc(now or now_utc())
        today = today_range(now, self._policy.tz)

        cached = self._cache.get(worker_id, today.day)
        if cached is not TodayStatusCache.MISS:
            return cached

        # A write landing during the read bumps the version and the stale answer is not kept.
        version = self._cache.version(worker_id)
        record = self._attendance.find_latest_in_range(worker_id, today.start, today.end)
        self._cache.put(worker_id, today.day, record, version=version)
        return record

    def get_attendance_range(self, worker_id: int, start: date, end: date) -> list[AttendanceRecord]:
        require_date_order(start, end)
        first = day_range(start, self._policy.tz)
        last = day_range(end, self._policy.tz)
        rows = self._attendance.list_in_range(worker_id, first.start, last.end)
        return sorted(rows, key=lambda r: r.check_in_time, reverse=True)

    def get_history(self, worker_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[AttendanceRecord]:
        if int(limit) <= 0:
            raise ValidationError("limit must be positive")
        return list(self._attendance.get_recent_for_worker(worker_id, int(limit)))
