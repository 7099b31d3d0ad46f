from datetime import datetime, timezone

from fakes import local
from timeclock.attendance.factory import AttendanceStrategyFactory, is_late
from timeclock.attendance.strategies.late_strategy import LateStrategy
from timeclock.attendance.strategies.on_time_strategy import OnTimeStrategy
from timeclock.core.enums import AttendanceStatus


def test_factory_checkin_on_time_within_grace(policy):
    now = local(2024, 1, 10, 9, 15, 59)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, policy=policy)

    assert isinstance(strategy, OnTimeStrategy)
    assert strategy.decide_checkin(now=now, policy=policy).status == AttendanceStatus.ON_TIME


def test_factory_checkin_late_after_grace(policy):
    now = local(2024, 1, 10, 9, 20)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, policy=policy)
    decision = strategy.decide_checkin(now=now, policy=policy)

    assert isinstance(strategy, LateStrategy)
    assert decision.status == AttendanceStatus.LATE
    assert decision.note == "Late by 20 min"


def test_lateness_uses_local_minutes_not_utc_hour(policy):
    utc_form = datetime(2024, 1, 10, 0, 59, tzinfo=timezone.utc)
    local_form = local(2024, 1, 10, 8, 59)

    assert utc_form == local_form
    assert is_late(utc_form, policy) is False
    assert is_late(local_form, policy) is False
    # 01:16 UTC is 09:16 local, one minute past the grace window
    assert is_late(datetime(2024, 1, 10, 1, 16, tzinfo=timezone.utc), policy) is True

