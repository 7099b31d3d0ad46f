from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance store.

    Range arguments are UTC instants compared against ``check_in_time`` (inclusive).
    ``create_checkin`` must raise ``DuplicateEntryError`` when the
    (worker_id, work_date) unique key is already taken.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_worker(self, worker_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def find_latest_in_range(self, worker_id: int, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_open_in_range(self, worker_id: int, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_open_before(self, worker_id: int, before: datetime) -> Sequence[AttendanceRecord]:
        """Open records checked in before ``before`` that are not yet flagged missing-checkout."""

        raise NotImplementedError

    def list_in_range(self, worker_id: int, start: datetime, end: datetime) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        worker_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        note: Optional[str] = None,
        geolocation: Optional[dict] = None,
    ) -> int:
        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        duration_hours: float,
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> bool:
        """Close an open record; returns False if it was already closed."""

        raise NotImplementedError

    def update_status(self, *, attendance_id: int, status: AttendanceStatus, note: Optional[str] = None) -> bool:
        raise NotImplementedError
