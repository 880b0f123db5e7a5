"""File-system-based metadata and blob stores."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from fragments.errors import StorageError, ValidationError
from fragments.storage._store import MetadataRecord, format_key, validate_key, validate_owner

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)

_META_SUFFIX = ".json"
_BLOB_SUFFIX = ".blob"
_TMP_PREFIX = ".tmp-"

ResultT = TypeVar("ResultT")


class _FileTree:
    """Owner-partitioned directory tree: ``<root>/<owner_id>/<fragment_id><suffix>``."""

    def __init__(self, root: str | Path, suffix: str) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)
        self._suffix = suffix

    @property
    def root(self) -> Path:
        return self._root

    def owner_dir(self, owner_id: str) -> Path:
        """Resolve an owner's directory and ensure it is a direct child of the root."""
        root = self._root.resolve()
        candidate = (self._root / owner_id).resolve()
        if candidate.parent != root:
            msg = f"owner id {owner_id!r} does not name a directory under the store root."
            raise ValidationError(msg)
        return candidate

    def path_for(self, owner_id: str, fragment_id: str) -> Path:
        """Resolve a key's file path, rejecting IDs that escape the owner directory."""
        owner_dir = self.owner_dir(owner_id)
        candidate = (owner_dir / f"{fragment_id}{self._suffix}").resolve()
        if candidate.parent != owner_dir:
            msg = f"fragment id {fragment_id!r} does not name a file under the owner directory."
            raise ValidationError(msg)
        return candidate

    def write_atomic(self, path: Path, data: bytes) -> None:
        """Write via a temp file and ``os.replace`` so readers never see partial data."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=_TMP_PREFIX, suffix=self._suffix)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def read(self, path: Path) -> bytes | None:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def unlink(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True


async def _run(operation: str, key: str, func: Callable[..., ResultT], *args: object) -> ResultT:
    """Run blocking file I/O in a worker thread, wrapping OS failures."""
    try:
        return await asyncio.to_thread(func, *args)
    except OSError as exc:
        raise StorageError(operation, key, str(exc)) from exc


class FileMetadataStore:
    """Metadata store persisting each record as ``<root>/<owner_id>/<fragment_id>.json``.

    Listing is ordered by each record's ``created`` timestamp, then by ID.
    """

    def __init__(self, root: str | Path) -> None:
        """Initialize with a root directory, creating it if needed."""
        self._tree = _FileTree(root, _META_SUFFIX)

    @property
    def root(self) -> Path:
        """Return the root directory path."""
        return self._tree.root

    def _decode(self, key: str, raw: bytes) -> MetadataRecord:
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StorageError("read", key, f"corrupt metadata record: {exc}") from exc
        if not isinstance(payload, dict):
            raise StorageError("read", key, "metadata record is not a JSON object")
        return {str(name): value for name, value in payload.items()}

    async def write(self, owner_id: str, fragment_id: str, record: Mapping[str, object]) -> None:
        """Insert or replace the record for a key."""
        validate_key(owner_id, fragment_id)
        key = format_key(owner_id, fragment_id)
        path = self._tree.path_for(owner_id, fragment_id)
        data = json.dumps(dict(record), ensure_ascii=False).encode("utf-8")
        logger.debug("Writing metadata %s to %s", key, path)
        await _run("write", key, self._tree.write_atomic, path, data)

    async def read(self, owner_id: str, fragment_id: str) -> MetadataRecord | None:
        """Return the record, or ``None`` when absent."""
        validate_key(owner_id, fragment_id)
        key = format_key(owner_id, fragment_id)
        raw = await _run("read", key, self._tree.read, self._tree.path_for(owner_id, fragment_id))
        if raw is None:
            return None
        return self._decode(key, raw)

    def _list_sync(self, owner_id: str) -> list[str]:
        owner_dir = self._tree.owner_dir(owner_id)
        if not owner_dir.is_dir():
            return []
        entries: list[tuple[str, str]] = []
        for path in owner_dir.glob(f"*{_META_SUFFIX}"):
            if path.name.startswith(_TMP_PREFIX):
                continue
            fragment_id = path.name[: -len(_META_SUFFIX)]
            raw = self._tree.read(path)
            if raw is None:
                continue
            record = self._decode(format_key(owner_id, fragment_id), raw)
            created = record.get("created")
            entries.append((created if isinstance(created, str) else "", fragment_id))
        return [fragment_id for _, fragment_id in sorted(entries)]

    async def list_ids(self, owner_id: str) -> list[str]:
        """Return the owner's fragment IDs ordered by creation time."""
        validate_owner(owner_id)
        return await _run("list", owner_id, self._list_sync, owner_id)

    async def delete(self, owner_id: str, fragment_id: str) -> bool:
        """Delete a record. Return ``True`` when one existed."""
        validate_key(owner_id, fragment_id)
        key = format_key(owner_id, fragment_id)
        deleted = await _run("delete", key, self._tree.unlink, self._tree.path_for(owner_id, fragment_id))
        logger.debug("Deleted metadata %s: %s", key, deleted)
        return deleted


class FileBlobStore:
    """Blob store persisting each payload as ``<root>/<owner_id>/<fragment_id>.blob``."""

    def __init__(self, root: str | Path) -> None:
        """Initialize with a root directory, creating it if needed."""
        self._tree = _FileTree(root, _BLOB_SUFFIX)

    @property
    def root(self) -> Path:
        """Return the root directory path."""
        return self._tree.root

    async def write(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        """Insert or replace the payload for a key."""
        validate_key(owner_id, fragment_id)
        key = format_key(owner_id, fragment_id)
        path = self._tree.path_for(owner_id, fragment_id)
        logger.debug("Writing %d bytes for %s to %s", len(data), key, path)
        await _run("write", key, self._tree.write_atomic, path, bytes(data))

    async def read(self, owner_id: str, fragment_id: str) -> bytes | None:
        """Return the payload, or ``None`` when absent."""
        validate_key(owner_id, fragment_id)
        key = format_key(owner_id, fragment_id)
        return await _run("read", key, self._tree.read, self._tree.path_for(owner_id, fragment_id))

    async def delete(self, owner_id: str, fragment_id: str) -> bool:
        """Delete a payload. Return ``True`` when one existed."""
        validate_key(owner_id, fragment_id)
        key = format_key(owner_id, fragment_id)
        return await _run("delete", key, self._tree.unlink, self._tree.path_for(owner_id, fragment_id))
