import logging
from datetime import date, time

import pytest

from fakes import InMemoryAttendance, InMemoryCorrections, local
from timeclock.attendance.model import AttendanceRecord
from timeclock.corrections.service import CorrectionService
from timeclock.core.enums import AttendanceStatus, MissingField, RequestStatus
from timeclock.core.exceptions import DuplicateRequest, NotFound, ValidationError

NOW = local(2024, 1, 12, 10, 0)
DAY = date(2024, 1, 10)


def _service(corrections_repo, attendance_repo, policy, **kwargs) -> CorrectionService:
    return CorrectionService(corrections_repo, attendance_repo, policy=policy, **kwargs)


def _open_record(attendance_id=1, check_in=None, check_out=None, status=AttendanceStatus.ON_TIME) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=attendance_id,
        worker_id=1,
        work_date=DAY,
        check_in_time=check_in or local(2024, 1, 10, 9, 0),
        check_out_time=check_out,
        status=status,
    )


def test_approved_missing_checkout_closes_the_day(corrections_repo, attendance_repo, policy):
    attendance_repo.add(_open_record(status=AttendanceStatus.MISSING_CHECKOUT))
    svc = _service(corrections_repo, attendance_repo, policy)

    req = svc.submit(1, DAY, "check_out", "18:00", "Forgot to clock out", now=NOW)
    assert req.status == RequestStatus.PENDING
    assert req.attendance_id == 1
    assert req.original_time is None

    result = svc.approve(req.request_id, 99, "ok", now=NOW)

    stored = attendance_repo.get_by_id(1)
    assert stored.check_out_time == local(2024, 1, 10, 18, 0)
    assert stored.duration_hours == 8.0
    assert stored.status == AttendanceStatus.CHECKED_OUT
    assert result.record == stored
    decided = corrections_repo.get(request_id=req.request_id)
    assert decided.status == RequestStatus.APPROVED
    assert decided.approver_id == 99
    assert decided.remarks == "ok"


def test_check_in_correction_recomputes_duration(corrections_repo, attendance_repo, policy):
    attendance_repo.add(
        _open_record(check_out=local(2024, 1, 10, 18, 0), status=AttendanceStatus.CHECKED_OUT)
    )
    svc = _service(corrections_repo, attendance_repo, policy)

    req = svc.submit(1, DAY, MissingField.CHECK_IN, time(10, 0), "Badge reader down", now=NOW)
    assert req.original_time == local(2024, 1, 10, 9, 0)
    svc.approve(req.request_id, 99, now=NOW)

    stored = attendance_repo.get_by_id(1)
    assert stored.check_in_time == local(2024, 1, 10, 10, 0)
    assert stored.duration_hours == 7.0
    assert stored.status == AttendanceStatus.CHECKED_OUT


def test_duplicate_active_request_is_rejected(corrections_repo, attendance_repo, policy):
    attendance_repo.add(_open_record())
    svc = _service(corrections_repo, attendance_repo, policy)
    svc.submit(1, DAY, "check_out", "18:00", "first", now=NOW)

    with pytest.raises(DuplicateRequest):
        svc.submit(1, DAY, "check_out", "18:30", "second", now=NOW)


def test_resubmission_allowed_after_rejection(corrections_repo, attendance_repo, policy):
    svc = _service(corrections_repo, attendance_repo, policy)
    first = svc.submit(1, DAY, "check_in", "09:00", "first", now=NOW)
    svc.reject(first.request_id, 99, "no evidence", now=NOW)

    second = svc.submit(1, DAY, "check_in", "09:00", "with evidence", now=NOW)

    assert second.request_id != first.request_id
    assert second.status == RequestStatus.PENDING


@pytest.mark.parametrize(
    "target_day, field, requested, reason",
    [
        (date(2024, 1, 12), "check_out", "18:00", "today"),
        (date(2024, 1, 13), "check_out", "18:00", "future"),
        (DAY, "lunch", "18:00", "bad field"),
        (DAY, "check_out", "6pm", "bad time"),
        (DAY, "check_out", "18:00", "   "),
        (DAY, "check_out", 18, "number instead of a time"),
        (DAY, "check_out", "18:00", 5),
    ],
)
def test_submit_validation(corrections_repo, attendance_repo, policy, target_day, field, requested, reason):
    with pytest.raises(ValidationError):
        _service(corrections_repo, attendance_repo, policy).submit(1, target_day, field, requested, reason, now=NOW)
    assert corrections_repo.list_requests() == []


def test_second_approval_is_not_found(corrections_repo, attendance_repo, policy):
    attendance_repo.add(_open_record())
    svc = _service(corrections_repo, attendance_repo, policy)
    req = svc.submit(1, DAY, "check_out", "18:00", "forgot", now=NOW)
    svc.approve(req.request_id, 99, now=NOW)
    patched = attendance_repo.get_by_id(1)

    with pytest.raises(NotFound):
        svc.approve(req.request_id, 98, now=NOW)
    with pytest.raises(NotFound):
        svc.reject(req.request_id, 98, now=NOW)
    assert attendance_repo.get_by_id(1) == patched


class _SnapshotCorrections(InMemoryCorrections):
    """Serves the first read of each request, as two approvers loading the same page would see it."""

    def __init__(self, attendance):
        super().__init__(attendance)
        self._seen = {}

    def get(self, *, request_id):
        return self._seen.setdefault(int(request_id), super().get(request_id=request_id))


def test_racing_approvers_patch_once(attendance_repo, policy):
    corrections = _SnapshotCorrections(attendance_repo)
    attendance_repo.add(_open_record())
    svc = _service(corrections, attendance_repo, policy)
    req = svc.submit(1, DAY, "check_out", "18:00", "forgot", now=NOW)

    svc.approve(req.request_id, 99, now=NOW)
    with pytest.raises(NotFound):
        svc.approve(req.request_id, 98, now=NOW)

    assert attendance_repo.get_by_id(1).note.count("Corrected") == 1


def test_reject_marks_incomplete_day_absent(corrections_repo, attendance_repo, policy):
    attendance_repo.add(_open_record())
    svc = _service(corrections_repo, attendance_repo, policy)
    req = svc.submit(1, DAY, "check_out", "18:00", "forgot", now=NOW)

    decided = svc.reject(req.request_id, 99, " not approved ", now=NOW)

    assert decided.status == RequestStatus.REJECTED
    assert decided.remarks == "not approved"
    assert attendance_repo.get_by_id(1).status == AttendanceStatus.ABSENT


def test_reject_leaves_complete_day_untouched(corrections_repo, attendance_repo, policy):
    attendance_repo.add(_open_record(check_out=local(2024, 1, 10, 18, 0), status=AttendanceStatus.CHECKED_OUT))
    svc = _service(corrections_repo, attendance_repo, policy)
    req = svc.submit(1, DAY, "check_in", "08:45", "was earlier", now=NOW)

    svc.reject(req.request_id, 99, now=NOW)

    assert attendance_repo.get_by_id(1).status == AttendanceStatus.CHECKED_OUT


def test_attendance_reference_resolved_at_approval(corrections_repo, attendance_repo, policy):
    svc = _service(corrections_repo, attendance_repo, policy)
    req = svc.submit(1, DAY, "check_out", "17:30", "forgot", now=NOW)
    assert req.attendance_id is None

    attendance_repo.add(_open_record(attendance_id=5))
    result = svc.approve(req.request_id, 99, now=NOW)

    assert result.record.attendance_id == 5
    assert corrections_repo.get(request_id=req.request_id).attendance_id == 5
    assert attendance_repo.get_by_id(5).check_out_time == local(2024, 1, 10, 17, 30)


def test_check_in_for_day_without_record_creates_one(corrections_repo, attendance_repo, policy):
    svc = _service(corrections_repo, attendance_repo, policy)
    req = svc.submit(1, DAY, "check_in", "09:05", "was on site", now=NOW)

    result = svc.approve(req.request_id, 99, now=NOW)

    stored = attendance_repo.get_by_id(result.record.attendance_id)
    assert stored.work_date == DAY
    assert stored.check_in_time == local(2024, 1, 10, 9, 5)
    assert stored.status == AttendanceStatus.CHECKED_IN
    assert corrections_repo.get(request_id=req.request_id).attendance_id == stored.attendance_id


def test_check_out_for_day_without_record_stays_pending(corrections_repo, attendance_repo, policy):
    svc = _service(corrections_repo, attendance_repo, policy)
    req = svc.submit(1, DAY, "check_out", "18:00", "forgot", now=NOW)

    with pytest.raises(ValidationError):
        svc.approve(req.request_id, 99, now=NOW)

    assert corrections_repo.get(request_id=req.request_id).status == RequestStatus.PENDING
    assert attendance_repo.all() == []


def test_check_out_before_check_in_is_rejected(corrections_repo, attendance_repo, policy):
    attendance_repo.add(_open_record())
    svc = _service(corrections_repo, attendance_repo, policy)
    req = svc.submit(1, DAY, "check_out", "08:00", "typo", now=NOW)

    with pytest.raises(ValidationError):
        svc.approve(req.request_id, 99, now=NOW)

    assert corrections_repo.get(request_id=req.request_id).is_pending
    assert attendance_repo.get_by_id(1).check_out_time is None


class _BrokenNotifier:
    def submitted(self, request):
        raise RuntimeError("mail server down")

    def decided(self, request):
        raise RuntimeError("mail server down")


def test_notifier_failure_does_not_undo_transition(corrections_repo, attendance_repo, policy, caplog):
    attendance_repo.add(_open_record())
    svc = _service(corrections_repo, attendance_repo, policy, notifier=_BrokenNotifier())

    with caplog.at_level(logging.ERROR, logger="timeclock.corrections.service"):
        req = svc.submit(1, DAY, "check_out", "18:00", "forgot", now=NOW)
        svc.approve(req.request_id, 99, now=NOW)

    assert corrections_repo.get(request_id=req.request_id).status == RequestStatus.APPROVED
    assert "Notifier failed" in caplog.text


def test_approval_invalidates_today_cache(container):
    container.attendance_repo.add(_open_record())
    container.today_cache.put(1, date(2024, 1, 12), None)
    svc = container.correction_service

    req = svc.submit(1, DAY, "check_out", "18:00", "forgot", now=NOW)
    svc.approve(req.request_id, 99, now=NOW)

    assert container.today_cache.get(1, date(2024, 1, 12)) is container.today_cache.MISS


def test_listing(corrections_repo, attendance_repo, policy):
    svc = _service(corrections_repo, attendance_repo, policy)
    a = svc.submit(1, date(2024, 1, 8), "check_in", "09:00", "a", now=NOW)
    b = svc.submit(1, date(2024, 1, 9), "check_in", "09:00", "b", now=NOW)
    svc.submit(2, date(2024, 1, 9), "check_in", "09:00", "c", now=NOW)
    svc.reject(a.request_id, 99, now=NOW)

    assert [r.request_id for r in svc.list_for_worker(1)] == [b.request_id, a.request_id]
    assert {r.worker_id for r in svc.list_pending()} == {1, 2}
    assert len(svc.list_pending()) == 2
    with pytest.raises(NotFound):
        svc.get(404)


class _FailingWrites(InMemoryAttendance):
    failing = False

    def add(self, record):
        if self.failing:
            raise RuntimeError("lost connection to MySQL server")
        return super().add(record)


def test_failed_patch_leaves_request_pending(policy):
    attendance = _FailingWrites()
    corrections = InMemoryCorrections(attendance)
    attendance.add(_open_record())
    svc = _service(corrections, attendance, policy)
    req = svc.submit(1, DAY, "check_out", "18:00", "forgot", now=NOW)

    attendance.failing = True
    with pytest.raises(RuntimeError):
        svc.approve(req.request_id, 99, now=NOW)

    assert corrections.get(request_id=req.request_id).is_pending
    assert attendance.get_by_id(1).check_out_time is None

    attendance.failing = False
    svc.approve(req.request_id, 99, now=NOW)
    assert attendance.get_by_id(1).check_out_time == local(2024, 1, 10, 18, 0)


def test_failed_absent_mark_leaves_request_pending(policy):
    attendance = _FailingWrites()
    corrections = InMemoryCorrections(attendance)
    attendance.add(_open_record())
    svc = _service(corrections, attendance, policy)
    req = svc.submit(1, DAY, "check_out", "18:00", "forgot", now=NOW)

    attendance.failing = True
    with pytest.raises(RuntimeError):
        svc.reject(req.request_id, 99, now=NOW)

    assert corrections.get(request_id=req.request_id).is_pending
    assert attendance.get_by_id(1).status == AttendanceStatus.ON_TIME


def test_day_started_by_correction_takes_no_further_requests(corrections_repo, attendance_repo, policy):
    svc = _service(corrections_repo, attendance_repo, policy)
    req = svc.submit(1, DAY, "check_in", "09:00", "was on site", now=NOW)
    svc.approve(req.request_id, 99, now=NOW)

    # The approved request keeps the day's single active slot.
    with pytest.raises(DuplicateRequest):
        svc.submit(1, DAY, "check_out", "18:00", "and left at six", now=NOW)
