from __future__ import annotations

from ..core.constants import MAX_LEVEL, MIN_LEVEL
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def normalize_course_code(value: str) -> str:
    """'eec 201' -> 'EEC201'."""
    code = require_non_empty(value, "Course code")
    return "".join(code.split()).upper()


def require_level(value) -> int:
    try:
        level = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Level must be a number such as 100 or 200")
    if level < MIN_LEVEL or level > MAX_LEVEL or level % 100:
        raise ValidationError(f"Level must be one of {MIN_LEVEL}..{MAX_LEVEL} in steps of 100")
    return level


def require_bool(value, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "1", "yes"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"false", "0", "no"}:
        return False
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValidationError(f"{field_name} must be true or false")
