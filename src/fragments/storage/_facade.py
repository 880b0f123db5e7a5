"""Storage: the single facade over a metadata store and a blob store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fragments.errors import ValidationError
from fragments.storage._memory import InMemoryBlobStore, InMemoryMetadataStore
from fragments.storage._store import MetadataRecord, format_key, validate_key, validate_owner

if TYPE_CHECKING:
    from collections.abc import Mapping

    from fragments.storage._store import BlobStore, MetadataStore

logger = logging.getLogger(__name__)


class Storage:
    """Compose a MetadataStore and a BlobStore behind one keyed API.

    This is the only reader and writer of both stores. Write order for a
    payload update is metadata, then blob: a failure between the two leaves a
    record whose ``size`` describes a missing or stale blob, and retrying the
    update repairs it. Deletes remove metadata first, so a half-finished
    delete never leaves a readable fragment behind.
    """

    def __init__(
        self,
        metadata: MetadataStore | None = None,
        blobs: BlobStore | None = None,
        *,
        max_payload_size: int | None = None,
    ) -> None:
        """Initialize with store backends (in-memory by default) and an optional payload limit."""
        if max_payload_size is not None and max_payload_size <= 0:
            msg = f"max_payload_size must be > 0, got {max_payload_size}."
            raise ValueError(msg)
        self._metadata = metadata if metadata is not None else InMemoryMetadataStore()
        self._blobs = blobs if blobs is not None else InMemoryBlobStore()
        self._max_payload_size = max_payload_size

    @property
    def metadata(self) -> MetadataStore:
        """Return the metadata backend."""
        return self._metadata

    @property
    def blobs(self) -> BlobStore:
        """Return the blob backend."""
        return self._blobs

    @property
    def max_payload_size(self) -> int | None:
        """Return the payload size limit in bytes, or ``None`` when unbounded."""
        return self._max_payload_size

    def check_payload(self, data: object) -> bytes:
        """Validate a payload before any write and return it as ``bytes``."""
        if not isinstance(data, (bytes, bytearray, memoryview)):
            msg = f"fragment data must be bytes, got {type(data).__name__}."
            raise ValidationError(msg)
        payload = bytes(data)
        if not payload:
            msg = "fragment data must not be empty."
            raise ValidationError(msg)
        if self._max_payload_size is not None and len(payload) > self._max_payload_size:
            msg = f"fragment data is {len(payload)} bytes; the limit is {self._max_payload_size}."
            raise ValidationError(msg)
        return payload

    async def write_metadata(self, owner_id: str, fragment_id: str, record: Mapping[str, object]) -> None:
        """Insert or replace a metadata record."""
        validate_key(owner_id, fragment_id)
        await self._metadata.write(owner_id, fragment_id, record)

    async def read_metadata(self, owner_id: str, fragment_id: str) -> MetadataRecord | None:
        """Return a metadata record, or ``None`` when absent."""
        validate_key(owner_id, fragment_id)
        return await self._metadata.read(owner_id, fragment_id)

    async def list_ids(self, owner_id: str) -> list[str]:
        """Return the owner's fragment IDs (empty when the owner has none)."""
        validate_owner(owner_id)
        return await self._metadata.list_ids(owner_id)

    async def list_records(self, owner_id: str) -> list[MetadataRecord]:
        """Return the owner's metadata records in listing order.

        Records deleted between listing and loading are skipped.
        """
        records: list[MetadataRecord] = []
        for fragment_id in await self.list_ids(owner_id):
            record = await self._metadata.read(owner_id, fragment_id)
            if record is not None:
                records.append(record)
        return records

    async def delete_metadata(self, owner_id: str, fragment_id: str) -> bool:
        """Delete a metadata record. Return ``True`` when one existed."""
        validate_key(owner_id, fragment_id)
        return await self._metadata.delete(owner_id, fragment_id)

    async def write_blob(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        """Insert or replace a payload."""
        validate_key(owner_id, fragment_id)
        await self._blobs.write(owner_id, fragment_id, data)

    async def read_blob(self, owner_id: str, fragment_id: str) -> bytes | None:
        """Return a payload, or ``None`` when absent."""
        validate_key(owner_id, fragment_id)
        return await self._blobs.read(owner_id, fragment_id)

    async def delete_blob(self, owner_id: str, fragment_id: str) -> bool:
        """Delete a payload. Return ``True`` when one existed."""
        validate_key(owner_id, fragment_id)
        return await self._blobs.delete(owner_id, fragment_id)

    async def delete_fragment(self, owner_id: str, fragment_id: str) -> bool:
        """Delete metadata, then payload. Return whether the metadata existed.

        The payload is removed even when the metadata is already gone, which
        cleans up after an earlier delete that failed halfway.
        """
        existed = await self.delete_metadata(owner_id, fragment_id)
        blob_existed = await self.delete_blob(owner_id, fragment_id)
        if existed != blob_existed:
            logger.debug(
                "Delete of %s found metadata=%s blob=%s", format_key(owner_id, fragment_id), existed, blob_existed
            )
        return existed


_default_storage: Storage | None = None


def default_storage() -> Storage:
    """Return the process-wide Storage, building it from ``load_config()`` on first use."""
    global _default_storage  # noqa: PLW0603
    if _default_storage is None:
        from fragments.config import build_storage, load_config

        _default_storage = build_storage(load_config())
    return _default_storage


def set_default_storage(storage: Storage | None) -> None:
    """Replace the process-wide Storage (``None`` rebuilds it lazily on next use)."""
    global _default_storage  # noqa: PLW0603
    _default_storage = storage
