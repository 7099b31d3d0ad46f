from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles carried in the session by the external auth layer."""

    WORKER = "worker"
    APPROVER = "approver"


class AttendanceStatus(str, Enum):
    """Closed set of attendance statuses persisted in the store."""

    ON_TIME = "on-time"
    LATE = "late"
    CHECKED_IN = "checked-in"
    CHECKED_OUT = "checked-out"
    MISSING_CHECKOUT = "missing-checkout"
    ABSENT = "absent"


class RequestStatus(str, Enum):
    """Correction request workflow states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MissingField(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
