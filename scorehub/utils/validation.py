import re
from typing import Any

from scorehub.config import settings
from scorehub.utils.exceptions import ValidationError


_CODE_RE = re.compile(r"^[0-9]{6}$")


def validate_required_text(value: Any, *, field: str, max_length: int) -> str:
    """Return ``value`` trimmed; reject non-strings, blanks and over-long values."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)

    normalized = value.strip()
    if not normalized:
        raise ValidationError(f"{field} is required", field=field)
    if len(normalized) > max_length:
        raise ValidationError(
            f"{field} too long",
            field=field,
            details={"max_length": max_length},
        )
    return normalized


def normalize_description(value: Any) -> str | None:
    """Trim an optional description; blank becomes None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("description must be a string", field="description")

    normalized = value.strip()
    if not normalized:
        return None
    limit = settings.ACTIVITY_DESCRIPTION_MAX_LENGTH
    if len(normalized) > limit:
        raise ValidationError("description too long", field="description", details={"max_length": limit})
    return normalized


def name_key(name: str) -> str:
    """Comparison key for names that must be unique case-insensitively."""
    return name.strip().lower()


def validate_code(code: Any, *, field: str = "pin") -> str:
    """Validate a 6-digit join PIN or access code (surrounding whitespace ignored)."""
    if not isinstance(code, str):
        raise ValidationError(f"Invalid {field}", field=field)

    normalized = code.strip()
    if not _CODE_RE.fullmatch(normalized):
        raise ValidationError(f"Invalid {field}", field=field)
    return normalized


def validate_points(points: Any) -> int:
    # bool is an int subclass; True/False are not point values.
    if isinstance(points, bool) or not isinstance(points, int):
        raise ValidationError("points must be an integer", field="points")
    return points
