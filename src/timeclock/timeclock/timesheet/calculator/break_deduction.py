from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import ensure_utc
from ...core.constants import BREAK_DEDUCTION_HOURS, BREAK_THRESHOLD_HOURS, DURATION_PRECISION
from .base import DurationCalculator


class BreakDeductionCalculator(DurationCalculator):
    """Standard rule: (out - in) hours, minus a 1h unpaid break once raw >= 4h, not below 0."""

    def __init__(
        self,
        *,
        threshold_hours: float = BREAK_THRESHOLD_HOURS,
        deduction_hours: float = BREAK_DEDUCTION_HOURS,
    ):
        self._threshold = float(threshold_hours)
        self._deduction = float(deduction_hours)

    def worked_hours(self, check_in: datetime, check_out: datetime) -> float:
        raw = (ensure_utc(check_out) - ensure_utc(check_in)).total_seconds() / 3600
        hours = raw - self._deduction if raw >= self._threshold else raw
        return round(max(hours, 0.0), DURATION_PRECISION)
