from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one worker's attendance for one civil day.

    Instants are timezone-aware UTC datetimes; ``work_date`` is the civil-day key
    the check-in falls on in the configured zone.
    """

    attendance_id: int
    worker_id: int
    work_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    duration_hours: Optional[float] = None
    note: Optional[str] = None
    geolocation: Optional[dict] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    @property
    def is_complete(self) -> bool:
        return self.check_in_time is not None and self.check_out_time is not None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "worker_id": self.worker_id,
            "work_date": self.work_date.isoformat(),
            "check_in_time": self.check_in_time.isoformat(),
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "duration_hours": self.duration_hours,
            "status": self.status.value,
            "note": self.note,
            "geolocation": self.geolocation,
        }
