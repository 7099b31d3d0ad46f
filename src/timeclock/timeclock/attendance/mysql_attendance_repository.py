from __future__ import annotations

import json
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, worker_id, work_date, check_in_time, check_out_time,
    duration_hours, status, note, geolocation, created_at, updated_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    duration = r.get("duration_hours")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        worker_id=int(r["worker_id"]),
        work_date=r["work_date"],
        check_in_time=from_db_datetime(r["check_in_time"]),
        check_out_time=from_db_datetime(r.get("check_out_time")),
        duration_hours=float(duration) if duration is not None else None,
        status=AttendanceStatus(r["status"]),
        note=r.get("note"),
        geolocation=_load_geolocation(r.get("geolocation")),
        created_at=from_db_datetime(r.get("created_at")),
        updated_at=from_db_datetime(r.get("updated_at")),
    )


def _load_geolocation(value) -> Optional[dict]:
    # JSON columns come back as str (or bytes) from the pure-Python connector.
    if value is None or isinstance(value, dict):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    return json.loads(value)


def insert_checkin(
    cur,
    *,
    worker_id: int,
    work_date: date,
    check_in_time: datetime,
    status: AttendanceStatus,
    note: Optional[str] = None,
    geolocation: Optional[dict] = None,
) -> int:
    """INSERT on an open cursor so callers can share a transaction; returns the new id."""
    cur.execute(
        """
        INSERT INTO attendance_records(worker_id, work_date, check_in_time, status, note, geolocation)
        VALUES(%s,%s,%s,%s,%s,%s)
        """,
        (
            int(worker_id),
            work_date,
            to_db_datetime(check_in_time),
            status.value,
            note,
            json.dumps(geolocation) if geolocation is not None else None,
        ),
    )
    return int(cur.lastrowid)


def rewrite_record(cur, record: AttendanceRecord) -> None:
    """Overwrite the times and derived fields of an existing record on an open cursor."""
    cur.execute(
        """
        UPDATE attendance_records
        SET check_in_time=%s, check_out_time=%s, duration_hours=%s, status=%s, note=%s
        WHERE attendance_id=%s
        """,
        (
            to_db_datetime(record.check_in_time),
            to_db_datetime(record.check_out_time),
            record.duration_hours,
            record.status.value,
            record.note,
            int(record.attendance_id),
        ),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_worker(self, worker_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE worker_id=%s
                ORDER BY check_in_time DESC
                LIMIT %s
                """,
                (int(worker_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def find_latest_in_range(self, worker_id: int, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE worker_id=%s AND check_in_time BETWEEN %s AND %s
                ORDER BY check_in_time DESC
                LIMIT 1
                """,
                (int(worker_id), to_db_datetime(start), to_db_datetime(end)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_open_in_range(self, worker_id: int, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE worker_id=%s AND check_in_time BETWEEN %s AND %s
                  AND check_out_time IS NULL
                  AND status NOT IN (%s, %s)
                ORDER BY check_in_time DESC
                LIMIT 1
                """,
                (
                    int(worker_id),
                    to_db_datetime(start),
                    to_db_datetime(end),
                    AttendanceStatus.MISSING_CHECKOUT.value,
                    AttendanceStatus.ABSENT.value,
                ),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_open_before(self, worker_id: int, before: datetime) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE worker_id=%s AND check_in_time < %s
                  AND check_out_time IS NULL
                  AND status NOT IN (%s, %s)
                ORDER BY check_in_time DESC
                """,
                (
                    int(worker_id),
                    to_db_datetime(before),
                    AttendanceStatus.MISSING_CHECKOUT.value,
                    AttendanceStatus.ABSENT.value,
                ),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_in_range(self, worker_id: int, start: datetime, end: datetime) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE worker_id=%s AND check_in_time BETWEEN %s AND %s
                ORDER BY check_in_time DESC
                """,
                (int(worker_id), to_db_datetime(start), to_db_datetime(end)),
            )
            return [_to_record(r) for r in fetchall(cur)]

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
        # UNIQUE(worker_id, work_date) turns a racing second insert into DuplicateEntryError.
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_checkin(
                cur,
                worker_id=worker_id,
                work_date=work_date,
                check_in_time=check_in_time,
                status=status,
                note=note,
                geolocation=geolocation,
            )

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        duration_hours: float,
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, duration_hours=%s, status=%s, note=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (to_db_datetime(check_out_time), duration_hours, status.value, note, int(attendance_id)),
            )
            return cur.rowcount > 0

    def update_status(self, *, attendance_id: int, status: AttendanceStatus, note: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, note=COALESCE(%s, note)
                WHERE attendance_id=%s
                """,
                (status.value, note, int(attendance_id)),
            )
            return cur.rowcount > 0
