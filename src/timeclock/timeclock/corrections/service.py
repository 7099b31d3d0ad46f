from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

from ..attendance.cache import TodayStatusCache
from ..attendance.model import AttendanceRecord
from ..attendance.policy import WorkPolicy
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import civil_day, compose_instant, day_range, ensure_utc, now_utc, parse_clock_time
from ..common.validators import require_choice, require_non_empty
from ..core.enums import AttendanceStatus, MissingField, RequestStatus
from ..core.exceptions import DuplicateEntryError, DuplicateRequest, NotFound, ValidationError
from ..timesheet.calculator.base import DurationCalculator
from ..timesheet.calculator.break_deduction import BreakDeductionCalculator
from .model import ApprovalResult, CorrectionRequest
from .notifier import CorrectionNotifier, LoggingNotifier
from .repository import CorrectionRepository

logger = logging.getLogger(__name__)


class CorrectionService:
    """Submit / approve / reject workflow for retroactive attendance corrections.

    pending -> approved | rejected; both terminal. Approval patches the attendance
    record and recomputes derived fields from scratch, so a record is never
    patched twice by the same request.
    """

    def __init__(
        self,
        corrections: CorrectionRepository,
        attendance: AttendanceRepository,
        *,
        policy: WorkPolicy | None = None,
        calculator: DurationCalculator | None = None,
        cache: TodayStatusCache | None = None,
        notifier: CorrectionNotifier | None = None,
    ):
        self._corrections = corrections
        self._attendance = attendance
        self._policy = policy or WorkPolicy()
        self._calculator = calculator or BreakDeductionCalculator()
        self._cache = cache
        self._notifier = notifier or LoggingNotifier()

    def submit(
        self,
        worker_id: int,
        target_day: date,
        missing_field: MissingField | str,
        requested_time: time | str,
        reason: str,
        *,
        now: datetime | None = None,
    ) -> CorrectionRequest:
        now = ensure_utc(now or now_utc())
        field = require_choice(missing_field, MissingField, "missing_field")
        if not isinstance(requested_time, time):
            requested_time = parse_clock_time(requested_time)
        reason = require_non_empty(reason, "Reason")

        today = civil_day(now, self._policy.tz)
        if target_day >= today:
            raise ValidationError("Corrections can only be requested for past days")

        if self._corrections.find_active_for_day(worker_id=worker_id, target_day=target_day):
            raise DuplicateRequest(f"A correction for {target_day} is already pending or approved")

        record = self._resolve_record(worker_id, target_day, None)
        original_time = None
        if record:
            original_time = record.check_in_time if field == MissingField.CHECK_IN else record.check_out_time

        try:
            request_id = self._corrections.create(
                worker_id=worker_id,
                attendance_id=record.attendance_id if record else None,
                target_day=target_day,
                missing_field=field,
                requested_time=requested_time,
                original_time=original_time,
                reason=reason,
            )
        except DuplicateEntryError:
            raise DuplicateRequest(f"A correction for {target_day} is already pending or approved")

        request = CorrectionRequest(
            request_id=request_id,
            worker_id=worker_id,
            attendance_id=record.attendance_id if record else None,
            target_day=target_day,
            missing_field=field,
            requested_time=requested_time,
            original_time=original_time,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=now,
        )
        self._notify("submitted", request)
        return request

    def approve(
        self,
        request_id: int,
        approver_id: int,
        remarks: Optional[str] = None,
        *,
        now: datetime | None = None,
    ) -> ApprovalResult:
        now = ensure_utc(now or now_utc())
        req = self._get_pending(request_id)

        record = self._resolve_record(req.worker_id, req.target_day, req.attendance_id)
        instant = compose_instant(req.target_day, req.requested_time, self._policy.tz)

        if record is None and req.missing_field == MissingField.CHECK_OUT:
            # Nothing to pair the check-out with; the approver has to reject instead.
            raise ValidationError(f"No attendance on {req.target_day} to attach a check-out to")

        remarks = (remarks or "").strip() or None

        # Claim and attendance write commit together; a second approver loses the claim.
        if record is not None:
            patched = self._patched(record, req, instant)
            self._claim(req, RequestStatus.APPROVED, approver_id, now, remarks, patch=patched)
        else:
            try:
                skeleton = self._skeleton(req, instant)
                self._claim(req, RequestStatus.APPROVED, approver_id, now, remarks, create=skeleton)
            except DuplicateEntryError:
                # A check-in landed for the day after the lookup; patch that one instead.
                patched = self._patched(self._resolve_record(req.worker_id, req.target_day, None), req, instant)
                self._claim(req, RequestStatus.APPROVED, approver_id, now, remarks, patch=patched)
            else:
                patched = self._resolve_record(req.worker_id, req.target_day, None)

        decided = replace(
            req,
            attendance_id=patched.attendance_id,
            status=RequestStatus.APPROVED,
            approver_id=approver_id,
            approved_at=now,
            remarks=remarks,
        )
        logger.info(f"Correction {request_id} approved; attendance {patched.attendance_id} patched")
        self._invalidate(req.worker_id)
        self._notify("decided", decided)
        return ApprovalResult(request=decided, record=patched)

    def reject(
        self,
        request_id: int,
        approver_id: int,
        remarks: Optional[str] = None,
        *,
        now: datetime | None = None,
    ) -> CorrectionRequest:
        now = ensure_utc(now or now_utc())
        req = self._get_pending(request_id)
        record = self._resolve_record(req.worker_id, req.target_day, req.attendance_id)
        remarks = (remarks or "").strip() or None

        # An incomplete day should not stay silently open in the aggregates.
        if record is not None and record.check_out_time is None:
            absent = replace(record, status=AttendanceStatus.ABSENT)
            self._claim(req, RequestStatus.REJECTED, approver_id, now, remarks, patch=absent)
        else:
            self._claim(
                req,
                RequestStatus.REJECTED,
                approver_id,
                now,
                remarks,
                attendance_id=record.attendance_id if record else None,
            )

        decided = replace(
            req,
            attendance_id=record.attendance_id if record else None,
            status=RequestStatus.REJECTED,
            approver_id=approver_id,
            approved_at=now,
            remarks=remarks,
        )
        logger.info(f"Correction {request_id} rejected by approver {approver_id}")
        self._invalidate(req.worker_id)
        self._notify("decided", decided)
        return decided

    def get(self, request_id: int) -> CorrectionRequest:
        req = self._corrections.get(request_id=int(request_id))
        if not req:
            raise NotFound(f"Correction {request_id} not found")
        return req

    def list_for_worker(self, worker_id: int, *, limit: int = 200) -> list[CorrectionRequest]:
        return list(self._corrections.list_requests(worker_id=worker_id, limit=limit))

    def list_pending(self, *, limit: int = 500) -> list[CorrectionRequest]:
        return list(self._corrections.list_requests(status=RequestStatus.PENDING, limit=limit))

    def _get_pending(self, request_id: int) -> CorrectionRequest:
        req = self._corrections.get(request_id=int(request_id))
        if not req or not req.is_pending:
            raise NotFound(f"Correction {request_id} not found or already decided")
        return req

    def _resolve_record(self, worker_id: int, day: date, attendance_id: Optional[int]) -> Optional[AttendanceRecord]:
        """Resolve-then-patch: the stored reference first, then a day-range lookup."""
        if attendance_id is not None:
            record = self._attendance.get_by_id(attendance_id)
            if record is None:
                raise NotFound(f"Attendance {attendance_id} not found")
            return record

        rng = day_range(day, self._policy.tz)
        return self._attendance.find_latest_in_range(worker_id, rng.start, rng.end)

    def _patched(self, record: AttendanceRecord, req: CorrectionRequest, instant: datetime) -> AttendanceRecord:
        check_in = record.check_in_time
        check_out = record.check_out_time
        if req.missing_field == MissingField.CHECK_IN:
            check_in = instant
        else:
            check_out = instant

        if check_out is not None and check_out < check_in:
            raise ValidationError("Check-out cannot be earlier than check-in")

        if check_out is None:
            status, duration = AttendanceStatus.CHECKED_IN, None
        else:
            status = AttendanceStatus.CHECKED_OUT
            duration = self._calculator.worked_hours(check_in, check_out)

        note = f"Corrected {req.missing_field.value} via request {req.request_id}"
        return replace(
            record,
            check_in_time=check_in,
            check_out_time=check_out,
            duration_hours=duration,
            status=status,
            note=f"{record.note}; {note}" if record.note else note,
        )

    def _claim(
        self,
        req: CorrectionRequest,
        status: RequestStatus,
        approver_id: int,
        now: datetime,
        remarks: Optional[str],
        *,
        attendance_id: Optional[int] = None,
        patch: Optional[AttendanceRecord] = None,
        create: Optional[AttendanceRecord] = None,
    ) -> None:
        claimed = self._corrections.decide(
            request_id=req.request_id,
            status=status,
            approver_id=approver_id,
            decided_at=now,
            remarks=remarks,
            attendance_id=attendance_id,
            patch=patch,
            create=create,
        )
        if not claimed:
            raise NotFound(f"Correction {req.request_id} is no longer pending")

    def _skeleton(self, req: CorrectionRequest, check_in: datetime) -> AttendanceRecord:
        """Approved check-in for a day with no record at all: start the day from the correction."""
        return AttendanceRecord(
            attendance_id=0,
            worker_id=req.worker_id,
            work_date=req.target_day,
            check_in_time=check_in,
            check_out_time=None,
            status=AttendanceStatus.CHECKED_IN,
            note=f"Created from correction request {req.request_id}",
        )

    def _invalidate(self, worker_id: int) -> None:
        if self._cache is not None:
            self._cache.invalidate(worker_id)

    def _notify(self, event: str, request: CorrectionRequest) -> None:
        try:
            getattr(self._notifier, event)(request)
        except Exception:
            logger.exception(f"Notifier failed on {event} for correction {request.request_id}")
