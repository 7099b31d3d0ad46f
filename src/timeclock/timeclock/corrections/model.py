from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import MissingField, RequestStatus


@dataclass(frozen=True)
class CorrectionRequest:
    """A worker's proposal to backfill a missing check-in or check-out.

    ``requested_time`` is local wall-clock time on ``target_day``;
    ``original_time`` is the UTC value the field held at submission, if any.
    """

    request_id: int
    worker_id: int
    attendance_id: Optional[int]
    target_day: date
    missing_field: MissingField
    requested_time: time
    reason: str
    status: RequestStatus
    original_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    approver_id: Optional[int] = None
    approved_at: Optional[datetime] = None
    remarks: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "worker_id": self.worker_id,
            "attendance_id": self.attendance_id,
            "target_day": self.target_day.isoformat(),
            "missing_field": self.missing_field.value,
            "requested_time": self.requested_time.strftime("%H:%M:%S"),
            "original_time": self.original_time.isoformat() if self.original_time else None,
            "reason": self.reason,
            "status": self.status.value,
            "approver_id": self.approver_id,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class ApprovalResult:
    request: CorrectionRequest
    record: AttendanceRecord
