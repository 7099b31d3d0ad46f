from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, tzinfo

from ..common.datetime_utils import civil_day
from ..core.constants import MISSING_CHECKOUT_NOTE
from ..core.enums import AttendanceStatus
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class CarryOverReconciler:
    """Flags sessions left open from an earlier civil day as missing-checkout.

    Only the status and note change; no check-out time is invented, so durations
    and aggregates are not affected.
    """

    def __init__(self, attendance: AttendanceRepository, tz: tzinfo):
        self._attendance = attendance
        self._tz = tz

    def needs_reconcile(self, record: AttendanceRecord, *, today: date) -> bool:
        if not record.is_open:
            return False
        if record.status in {AttendanceStatus.MISSING_CHECKOUT, AttendanceStatus.ABSENT}:
            return False
        return civil_day(record.check_in_time, self._tz) < today

    def reconcile(self, record: AttendanceRecord, *, today: date) -> AttendanceRecord:
        if not self.needs_reconcile(record, today=today):
            return record

        day = civil_day(record.check_in_time, self._tz)
        flag = MISSING_CHECKOUT_NOTE.format(day=day.isoformat())
        note = f"{record.note}; {flag}" if record.note else flag

        self._attendance.update_status(
            attendance_id=record.attendance_id,
            status=AttendanceStatus.MISSING_CHECKOUT,
            note=note,
        )
        logger.warning(
            f"Worker {record.worker_id} left attendance {record.attendance_id} open on {day}; marked missing-checkout"
        )
        return replace(record, status=AttendanceStatus.MISSING_CHECKOUT, note=note)
