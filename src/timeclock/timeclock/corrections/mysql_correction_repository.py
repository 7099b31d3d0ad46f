from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.mysql_attendance_repository import insert_checkin, rewrite_record
from ..core.enums import MissingField, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    from_db_datetime,
    normalize_mysql_time,
    to_db_datetime,
)
from .model import CorrectionRequest
from .repository import CorrectionRepository

_COLUMNS = """
    request_id, worker_id, attendance_id, target_day, missing_field,
    requested_time, original_time, reason, status, created_at,
    approver_id, approved_at, remarks
"""


def _to_request(r: dict) -> CorrectionRequest:
    return CorrectionRequest(
        request_id=int(r["request_id"]),
        worker_id=int(r["worker_id"]),
        attendance_id=int(r["attendance_id"]) if r.get("attendance_id") is not None else None,
        target_day=r["target_day"],
        missing_field=MissingField(r["missing_field"]),
        requested_time=normalize_mysql_time(r["requested_time"]),
        original_time=from_db_datetime(r.get("original_time")),
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=from_db_datetime(r.get("created_at")),
        approver_id=int(r["approver_id"]) if r.get("approver_id") is not None else None,
        approved_at=from_db_datetime(r.get("approved_at")),
        remarks=r.get("remarks"),
    )


class MySQLCorrectionRepository(CorrectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_corrections(
                    worker_id, attendance_id, target_day, missing_field,
                    requested_time, original_time, reason, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(worker_id),
                    attendance_id,
                    target_day,
                    missing_field.value,
                    requested_time,
                    to_db_datetime(original_time),
                    reason,
                    RequestStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get(self, *, request_id: int) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_corrections WHERE request_id=%s",
                (int(request_id),),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def find_active_for_day(self, *, worker_id: int, target_day: date) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_corrections
                WHERE worker_id=%s AND target_day=%s AND status<>%s
                LIMIT 1
                """,
                (int(worker_id), target_day, RequestStatus.REJECTED.value),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        worker_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if worker_id is not None:
            clauses.append("worker_id=%s")
            params.append(int(worker_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_corrections
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_request(r) for r in fetchall(cur)]

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
        if patch is not None:
            attendance_id = patch.attendance_id

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_corrections
                SET status=%s, approver_id=%s, approved_at=%s, remarks=%s,
                    attendance_id=COALESCE(%s, attendance_id)
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(approver_id),
                    to_db_datetime(decided_at),
                    remarks,
                    attendance_id,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            if cur.rowcount == 0:
                return False

            if patch is not None:
                rewrite_record(cur, patch)
            elif create is not None:
                new_id = insert_checkin(
                    cur,
                    worker_id=create.worker_id,
                    work_date=create.work_date,
                    check_in_time=create.check_in_time,
                    status=create.status,
                    note=create.note,
                )
                cur.execute(
                    "UPDATE attendance_corrections SET attendance_id=%s WHERE request_id=%s",
                    (new_id, int(request_id)),
                )
            return True
