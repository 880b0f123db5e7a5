"""Store protocols for fragment metadata and payload backends."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from fragments.errors import ValidationError

MetadataRecord = dict[str, object]


def utc_now() -> datetime:
    """Return the current timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Return the current UTC timestamp as an ISO-8601 string."""
    return utc_now().isoformat()


def validate_key(owner_id: object, fragment_id: object) -> tuple[str, str]:
    """Validate an ``(owner_id, fragment_id)`` store key.

    Both parts must be non-empty strings; malformed keys fail fast instead of
    silently addressing nothing.
    """
    owner = validate_owner(owner_id)
    if not isinstance(fragment_id, str) or not fragment_id:
        msg = f"fragment id must be a non-empty string, got {fragment_id!r}."
        raise ValidationError(msg)
    return owner, fragment_id


def validate_owner(owner_id: object) -> str:
    """Validate an owner ID (non-empty string)."""
    if not isinstance(owner_id, str) or not owner_id:
        msg = f"owner id must be a non-empty string, got {owner_id!r}."
        raise ValidationError(msg)
    return owner_id


def format_key(owner_id: str, fragment_id: str) -> str:
    """Render a store key for messages and object names."""
    return f"{owner_id}/{fragment_id}"


@runtime_checkable
class MetadataStore(Protocol):
    """Keyed store for small, mutable fragment metadata records."""

    async def write(self, owner_id: str, fragment_id: str, record: Mapping[str, object]) -> None:
        """Insert or replace the record for a key."""
        ...

    async def read(self, owner_id: str, fragment_id: str) -> MetadataRecord | None:
        """Return a copy of the record, or ``None`` when absent."""
        ...

    async def list_ids(self, owner_id: str) -> list[str]:
        """Return the owner's fragment IDs in a stable order."""
        ...

    async def delete(self, owner_id: str, fragment_id: str) -> bool:
        """Delete a record. Return ``True`` when one existed."""
        ...


@runtime_checkable
class BlobStore(Protocol):
    """Keyed store for fragment payload bytes."""

    async def write(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        """Insert or replace the payload for a key."""
        ...

    async def read(self, owner_id: str, fragment_id: str) -> bytes | None:
        """Return the payload, or ``None`` when absent."""
        ...

    async def delete(self, owner_id: str, fragment_id: str) -> bool:
        """Delete a payload. Return ``True`` when one existed."""
        ...
