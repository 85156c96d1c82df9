from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


def require_non_empty(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_int_range(value: Any, field_name: str, *, min_value: int, max_value: int | None = None) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a whole number")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field_name} must be a whole number") from None
    if isinstance(value, float) and value != number:
        raise ValidationError(f"{field_name} must be a whole number")
    if number < min_value or (max_value is not None and number > max_value):
        if max_value is None:
            raise ValidationError(f"{field_name} must be at least {min_value}")
        raise ValidationError(f"{field_name} must be between {min_value} and {max_value}")
    return number


def require_iso_date(value: Any, field_name: str) -> str:
    text = require_non_empty(value, field_name)
    try:
        parse_iso_date(text)
    except ValueError:
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date") from None
    return text


def optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
