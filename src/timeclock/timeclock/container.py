from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.cache import TodayStatusCache
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.policy import WorkPolicy
from .attendance.reconciler import CarryOverReconciler
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .corrections.mysql_correction_repository import MySQLCorrectionRepository
from .corrections.notifier import CorrectionNotifier
from .corrections.repository import CorrectionRepository
from .corrections.service import CorrectionService
from .database.connection import DBConfig, DatabaseConnection
from .timesheet.calculator.break_deduction import BreakDeductionCalculator
from .timesheet.service import TimesheetService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    attendance_repo: AttendanceRepository
    corrections_repo: CorrectionRepository

    policy: WorkPolicy
    today_cache: TodayStatusCache

    attendance_service: AttendanceService
    correction_service: CorrectionService
    timesheet_service: TimesheetService


def wire_services(
    *,
    attendance_repo: AttendanceRepository,
    corrections_repo: CorrectionRepository,
    policy: WorkPolicy,
    conn: Optional[DatabaseConnection] = None,
    notifier: Optional[CorrectionNotifier] = None,
) -> Container:
    """Build the service graph over any repository implementations."""
    cache = TodayStatusCache()
    calculator = BreakDeductionCalculator()

    attendance_service = AttendanceService(
        attendance_repo,
        policy=policy,
        strategy_factory=AttendanceStrategyFactory(),
        calculator=calculator,
        reconciler=CarryOverReconciler(attendance_repo, policy.tz),
        cache=cache,
    )
    correction_service = CorrectionService(
        corrections_repo,
        attendance_repo,
        policy=policy,
        calculator=calculator,
        cache=cache,
        notifier=notifier,
    )
    timesheet_service = TimesheetService(attendance_repo, policy=policy)

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        corrections_repo=corrections_repo,
        policy=policy,
        today_cache=cache,
        attendance_service=attendance_service,
        correction_service=correction_service,
        timesheet_service=timesheet_service,
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire_services(
        attendance_repo=MySQLAttendanceRepository(conn),
        corrections_repo=MySQLCorrectionRepository(conn),
        policy=WorkPolicy.from_settings(settings) if settings is not None else WorkPolicy(),
        conn=conn,
    )
