from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class DurationCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked hours)."""

    @abstractmethod
    def worked_hours(self, check_in: datetime, check_out: datetime) -> float:
        raise NotImplementedError
