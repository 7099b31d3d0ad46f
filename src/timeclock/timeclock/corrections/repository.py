from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence

from ..attendance.model import AttendanceRecord
from ..core.enums import MissingField, RequestStatus
from .model import CorrectionRequest


class CorrectionRepository(Protocol):
    def create(
        self,
        *,
        worker_id: int,
        attendance_id: Optional[int],
        target_day: date,
        missing_field: MissingField,
        requested_time: time,
        original_time: Optional[datetime],
        reason: str,
    ) -> int:
        """Insert a pending request.

        Raises ``DuplicateEntryError`` if a non-rejected request exists for the day.
        """

        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[CorrectionRequest]:
        raise NotImplementedError

    def find_active_for_day(self, *, worker_id: int, target_day: date) -> Optional[CorrectionRequest]:
        """Pending or approved request for (worker, day)."""

        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        worker_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approver_id: int,
        decided_at: datetime,
        remarks: Optional[str] = None,
        attendance_id: Optional[int] = None,
        patch: Optional[AttendanceRecord] = None,
        create: Optional[AttendanceRecord] = None,
    ) -> bool:
        """Move a pending request to a terminal state; False if it was not pending.

        The attendance side effect commits in the same transaction as the claim:
        ``patch`` rewrites an existing record, ``create`` inserts a new one (its
        ``attendance_id`` is ignored) and links it to the request. Nothing is written
        when the request was not pending; a failed write leaves it pending. ``create``
        raises ``DuplicateEntryError`` if the day already has a record.
        """

        raise NotImplementedError
