from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date


@dataclass(frozen=True)
class AttendanceAggregates:
    worker_id: int
    start_day: date
    end_day: date
    present: int
    absent: int
    late: int
    total_hours: float
    average_hours: float
    missing_checkout: int

    def to_dict(self) -> dict:
        data = asdict(self)
        data["start_day"] = self.start_day.isoformat()
        data["end_day"] = self.end_day.isoformat()
        return data
