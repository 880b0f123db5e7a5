"""Content-Type header parsing and extension helpers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from fragments.errors import ValidationError


@dataclass(frozen=True, slots=True)
class ContentType:
    """A parsed Content-Type value: ``type/subtype`` plus parameters."""

    mime_type: str
    parameters: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        """Freeze the parameter mapping."""
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @property
    def major(self) -> str:
        """Return the top-level type, e.g. ``text`` for ``text/plain``."""
        return self.mime_type.split("/", 1)[0]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1].replace('\\"', '"')
    return value


def parse_content_type(value: str) -> ContentType:
    """Parse a Content-Type header value.

    ``"text/html; charset=utf-8"`` -> ``ContentType("text/html", {"charset": "utf-8"})``.
    Type, subtype and parameter names are case-insensitive and normalized to
    lower case; parameter values are kept as given (quotes removed).
    """
    if not isinstance(value, str):
        msg = f"Content-Type must be a string, got {type(value).__name__}."
        raise ValidationError(msg)

    head, *raw_params = value.split(";")
    mime_type = head.strip().lower()
    major, sep, minor = mime_type.partition("/")
    if not sep or not major or not minor or " " in mime_type:
        msg = f"Invalid Content-Type: {value!r}."
        raise ValidationError(msg)

    parameters: dict[str, str] = {}
    for raw in raw_params:
        if not raw.strip():
            continue
        name, eq, param_value = raw.partition("=")
        name = name.strip().lower()
        if not eq or not name:
            msg = f"Invalid Content-Type parameter {raw.strip()!r} in {value!r}."
            raise ValidationError(msg)
        parameters[name] = _unquote(param_value.strip())

    return ContentType(mime_type=mime_type, parameters=parameters)


def split_extension(name: str) -> tuple[str, str | None]:
    """Split ``"<id>.<ext>"`` into ``("<id>", ".<ext>")``.

    Names without a dot, or with only a leading dot, have no extension.
    """
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem or not ext:
        return name, None
    return stem, f".{ext}"


def normalize_extension(extension: str) -> str:
    """Return a lower-cased extension with a single leading dot."""
    stripped = extension.strip().lower().lstrip(".")
    return f".{stripped}" if stripped else ""
