from __future__ import annotations

from typing import Any, Mapping

from ..core.constants import LATITUDE_RANGE, LONGITUDE_RANGE
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_id(payload: Mapping[str, Any], key: str) -> int:
    value = payload.get(key)
    # bool is an int subclass; reject it explicitly
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{key} is required")
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer") from None
    if isinstance(value, float) and value != parsed:
        raise ValidationError(f"{key} must be an integer")
    if parsed <= 0:
        raise ValidationError(f"{key} must be positive")
    return parsed


def _require_float(payload: Mapping[str, Any], key: str, bounds: tuple[float, float]) -> float:
    value = payload.get(key)
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{key} is required")
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be a number") from None
    low, high = bounds
    if not low <= parsed <= high:
        raise ValidationError(f"{key} must be between {low:g} and {high:g}")
    return parsed


def require_latitude(payload: Mapping[str, Any], key: str = "latitude") -> float:
    return _require_float(payload, key, LATITUDE_RANGE)


def require_longitude(payload: Mapping[str, Any], key: str = "longitude") -> float:
    return _require_float(payload, key, LONGITUDE_RANGE)
