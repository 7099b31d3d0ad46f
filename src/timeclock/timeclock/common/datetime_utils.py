from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from ..core.exceptions import ValidationError

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


@dataclass(frozen=True)
class DayRange:
    """A civil day and the UTC instants bounding it (both ends inclusive)."""

    day: date
    start: datetime
    end: datetime

    @property
    def key(self) -> str:
        return self.day.isoformat()

    def contains(self, instant: datetime) -> bool:
        return self.start <= ensure_utc(instant) <= self.end


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_clock_time(value: str) -> time:
    """Parse a local wall-clock time given as HH:MM or HH:MM:SS."""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid time (HH:MM): {value!r}")
    v = value.strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid time (HH:MM): {value!r}")


def parse_zone_offset(value: str) -> tzinfo:
    """Turn "+08:00" (or "Z"/"UTC") into a fixed-offset tzinfo."""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid zone offset: {value!r}")
    v = value.strip()
    if v.upper() in {"Z", "UTC"}:
        return timezone.utc
    m = _OFFSET_RE.match(v)
    if not m:
        raise ValidationError(f"Invalid zone offset: {value!r}")
    sign, hours, minutes = m.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    if delta >= timedelta(hours=24):
        raise ValidationError(f"Invalid zone offset: {value!r}")
    return timezone(-delta if sign == "-" else delta)


def now_utc() -> datetime:
    """Current instant in UTC.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def ensure_utc(instant: datetime) -> datetime:
    """Naive datetimes are taken to already be UTC (that is how the store keeps them)."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def civil_day(instant: datetime, tz: tzinfo) -> date:
    return ensure_utc(instant).astimezone(tz).date()


def day_range(day: date, tz: tzinfo) -> DayRange:
    start_local = datetime.combine(day, time.min, tzinfo=tz)
    end_local = datetime.combine(day, time.max, tzinfo=tz)
    return DayRange(
        day=day,
        start=start_local.astimezone(timezone.utc),
        end=end_local.astimezone(timezone.utc),
    )


def today_range(now: datetime, tz: tzinfo) -> DayRange:
    return day_range(civil_day(now, tz), tz)


def compose_instant(day: date, local_time: time, tz: tzinfo) -> datetime:
    """Local wall-clock time on a civil day, as a UTC instant."""
    return datetime.combine(day, local_time, tzinfo=tz).astimezone(timezone.utc)


def minutes_of_day(instant: datetime, tz: tzinfo) -> int:
    local = ensure_utc(instant).astimezone(tz)
    return local.hour * 60 + local.minute


def weekdays_between(start: date, end: date) -> int:
    """Count Monday-Friday dates in [start, end]; 0 when end < start."""
    if end < start:
        return 0
    days = (end - start).days + 1
    full_weeks, rest = divmod(days, 7)
    count = full_weeks * 5
    for i in range(rest):
        if (start + timedelta(days=full_weeks * 7 + i)).weekday() < 5:
            count += 1
    return count
