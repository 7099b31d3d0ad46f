from __future__ import annotations

from datetime import datetime

import pytest

from fakes import InMemoryAttendance, InMemoryCorrections, local
from timeclock.attendance.policy import WorkPolicy
from timeclock.common.datetime_utils import parse_clock_time, parse_zone_offset
from timeclock.container import wire_services


@pytest.fixture
def policy() -> WorkPolicy:
    return WorkPolicy(work_start=parse_clock_time("09:00"), grace_minutes=15, tz=parse_zone_offset("+08:00"))


@pytest.fixture
def fixed_now() -> datetime:
    # Wednesday 2024-01-10, 08:50 local
    return local(2024, 1, 10, 8, 50)


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def corrections_repo(attendance_repo) -> InMemoryCorrections:
    return InMemoryCorrections(attendance_repo)


@pytest.fixture
def container(attendance_repo, corrections_repo, policy):
    return wire_services(attendance_repo=attendance_repo, corrections_repo=corrections_repo, policy=policy)
