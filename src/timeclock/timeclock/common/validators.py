from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Mapping, Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

_COORDINATE_LIMITS = {"latitude": 90.0, "longitude": 180.0}


def require_non_empty(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_date_order(start: date, end: date) -> None:
    if end < start:
        raise ValidationError("End date must be on or after start date")


def require_choice(value, enum_cls: Type[E], field_name: str) -> E:
    """Coerce caller input into a member of a closed enumeration."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or "").strip())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def require_geolocation(value: Optional[Mapping]) -> Optional[dict]:
    """Optional check-in position: ``latitude``/``longitude`` in degrees, optional ``accuracy`` in meters."""
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValidationError("geolocation must be an object with latitude and longitude")

    location = {}
    for key, limit in _COORDINATE_LIMITS.items():
        coord = value.get(key)
        if isinstance(coord, bool) or not isinstance(coord, (int, float)) or not -limit <= coord <= limit:
            raise ValidationError(f"geolocation.{key} must be a number between -{limit:g} and {limit:g}")
        location[key] = float(coord)

    accuracy = value.get("accuracy")
    if accuracy is not None:
        if isinstance(accuracy, bool) or not isinstance(accuracy, (int, float)) or accuracy < 0:
            raise ValidationError("geolocation.accuracy must be a non-negative number")
        location["accuracy"] = float(accuracy)
    return location
