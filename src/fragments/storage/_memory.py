"""In-memory metadata and blob stores for development and testing."""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING

from fragments.storage._store import MetadataRecord, format_key, validate_key, validate_owner

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


class InMemoryMetadataStore:
    """Dict-based metadata store.

    Records are deep-copied on the way in and out so callers never share
    mutable state with the store. Listing follows insertion order.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._records: dict[str, dict[str, MetadataRecord]] = {}

    async def write(self, owner_id: str, fragment_id: str, record: Mapping[str, object]) -> None:
        """Insert or replace the record for a key."""
        validate_key(owner_id, fragment_id)
        logger.debug("Writing metadata %s", format_key(owner_id, fragment_id))
        self._records.setdefault(owner_id, {})[fragment_id] = copy.deepcopy(dict(record))

    async def read(self, owner_id: str, fragment_id: str) -> MetadataRecord | None:
        """Return a copy of the record, or ``None`` when absent."""
        validate_key(owner_id, fragment_id)
        record = self._records.get(owner_id, {}).get(fragment_id)
        return copy.deepcopy(record) if record is not None else None

    async def list_ids(self, owner_id: str) -> list[str]:
        """Return the owner's fragment IDs in insertion order."""
        validate_owner(owner_id)
        return list(self._records.get(owner_id, {}))

    async def delete(self, owner_id: str, fragment_id: str) -> bool:
        """Delete a record. Return ``True`` when one existed."""
        validate_key(owner_id, fragment_id)
        owned = self._records.get(owner_id)
        if owned is None or owned.pop(fragment_id, None) is None:
            return False
        if not owned:
            del self._records[owner_id]
        logger.debug("Deleted metadata %s", format_key(owner_id, fragment_id))
        return True


class InMemoryBlobStore:
    """Dict-based payload store."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._blobs: dict[tuple[str, str], bytes] = {}

    async def write(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        """Insert or replace the payload for a key."""
        key = validate_key(owner_id, fragment_id)
        logger.debug("Writing %d bytes to %s", len(data), format_key(*key))
        self._blobs[key] = bytes(data)

    async def read(self, owner_id: str, fragment_id: str) -> bytes | None:
        """Return the payload, or ``None`` when absent."""
        return self._blobs.get(validate_key(owner_id, fragment_id))

    async def delete(self, owner_id: str, fragment_id: str) -> bool:
        """Delete a payload. Return ``True`` when one existed."""
        return self._blobs.pop(validate_key(owner_id, fragment_id), None) is not None
