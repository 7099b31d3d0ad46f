from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..policy import WorkPolicy


@dataclass(frozen=True)
class StatusDecision:
    """Status to store plus an optional note for the record."""

    status: AttendanceStatus
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Decides the status written on check-in.

    Check-out always closes the day as ``checked-out``, so only arrival is classified;
    lateness survives the check-out in the note.
    """

    @abstractmethod
    def decide_checkin(self, *, now: datetime, policy: WorkPolicy) -> StatusDecision:
        raise NotImplementedError
