"""Shared validation utilities for metadata records and config values."""

from collections.abc import Mapping

from fragments.errors import ValidationError


def as_str_object_dict(value: object, *, field_name: str) -> dict[str, object]:
    """Validate and normalize a mapping value into ``dict[str, object]``."""
    if not isinstance(value, Mapping):
        msg = f"{field_name} must be a mapping."
        raise ValidationError(msg)
    return {str(key): item for key, item in value.items()}


def require_string(value: object, *, field_name: str) -> str:
    """Validate a required, non-empty string field."""
    if not isinstance(value, str) or not value:
        msg = f"{field_name} must be a non-empty string, got {value!r}."
        raise ValidationError(msg)
    return value


def require_int(value: object, *, field_name: str) -> int:
    """Validate a required integer field (rejects booleans)."""
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"{field_name} must be an int, got {value!r}."
        raise ValidationError(msg)
    return value


def require_non_negative_int(value: object, *, field_name: str) -> int:
    """Validate a required integer field that must be ``>= 0``."""
    number = require_int(value, field_name=field_name)
    if number < 0:
        msg = f"{field_name} must be >= 0, got {number}."
        raise ValidationError(msg)
    return number


def parse_int_text(value: str, *, field_name: str) -> int:
    """Parse a decimal integer from text, e.g. an environment variable."""
    try:
        return int(value.strip())
    except ValueError as exc:
        msg = f"{field_name} must be an integer, got {value!r}."
        raise ValidationError(msg) from exc
