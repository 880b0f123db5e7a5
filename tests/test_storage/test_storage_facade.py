"""Tests for the Storage facade."""

import asyncio
from pathlib import Path

import pytest

from fragments.errors import ValidationError
from fragments.storage import (
    FileBlobStore,
    FileMetadataStore,
    InMemoryBlobStore,
    InMemoryMetadataStore,
    Storage,
    default_storage,
    set_default_storage,
)


def test_defaults_to_memory_backends() -> None:
    storage = Storage()
    assert isinstance(storage.metadata, InMemoryMetadataStore)
    assert isinstance(storage.blobs, InMemoryBlobStore)
    assert storage.max_payload_size is None


def test_rejects_non_positive_limit() -> None:
    with pytest.raises(ValueError, match="max_payload_size"):
        Storage(max_payload_size=0)


def test_metadata_and_blob_operations(storage: Storage) -> None:
    async def scenario() -> None:
        await storage.write_metadata("owner", "a", {"id": "a"})
        await storage.write_blob("owner", "a", b"data")

    asyncio.run(scenario())
    assert asyncio.run(storage.read_metadata("owner", "a")) == {"id": "a"}
    assert asyncio.run(storage.read_blob("owner", "a")) == b"data"
    assert asyncio.run(storage.list_ids("owner")) == ["a"]
    assert asyncio.run(storage.delete_metadata("owner", "a")) is True
    assert asyncio.run(storage.delete_blob("owner", "a")) is True
    assert asyncio.run(storage.read_metadata("owner", "a")) is None
    assert asyncio.run(storage.read_blob("owner", "a")) is None


def test_missing_reads_return_none(storage: Storage) -> None:
    assert asyncio.run(storage.read_metadata("owner", "missing")) is None
    assert asyncio.run(storage.read_blob("owner", "missing")) is None
    assert asyncio.run(storage.list_ids("owner")) == []


@pytest.mark.parametrize(
    ("owner_id", "fragment_id"),
    [
        pytest.param("", "a", id="empty-owner"),
        pytest.param("owner", "", id="empty-id"),
        pytest.param(None, "a", id="none-owner"),
        pytest.param("owner", None, id="none-id"),
    ],
)
def test_every_operation_validates_keys(storage: Storage, owner_id: object, fragment_id: object) -> None:
    calls = [
        storage.write_metadata(owner_id, fragment_id, {}),  # type: ignore[arg-type]
        storage.read_metadata(owner_id, fragment_id),  # type: ignore[arg-type]
        storage.delete_metadata(owner_id, fragment_id),  # type: ignore[arg-type]
        storage.write_blob(owner_id, fragment_id, b"x"),  # type: ignore[arg-type]
        storage.read_blob(owner_id, fragment_id),  # type: ignore[arg-type]
        storage.delete_blob(owner_id, fragment_id),  # type: ignore[arg-type]
    ]
    for call in calls:
        with pytest.raises(ValidationError):
            asyncio.run(call)


def test_list_ids_validates_owner(storage: Storage) -> None:
    with pytest.raises(ValidationError):
        asyncio.run(storage.list_ids(""))


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        pytest.param(b"abc", b"abc", id="bytes"),
        pytest.param(bytearray(b"abc"), b"abc", id="bytearray"),
        pytest.param(memoryview(b"abc"), b"abc", id="memoryview"),
    ],
)
def test_check_payload_accepts_bytes_like(data: object, expected: bytes) -> None:
    assert Storage().check_payload(data) == expected


@pytest.mark.parametrize("data", [b"", None, "abc", 3])
def test_check_payload_rejects(data: object) -> None:
    with pytest.raises(ValidationError):
        Storage().check_payload(data)


def test_check_payload_limit() -> None:
    storage = Storage(max_payload_size=3)
    assert storage.check_payload(b"abc") == b"abc"
    with pytest.raises(ValidationError, match="limit is 3"):
        storage.check_payload(b"abcd")


def test_list_records_skips_vanished_records(storage: Storage) -> None:
    async def scenario() -> list[dict[str, object]]:
        await storage.write_metadata("owner", "a", {"id": "a"})
        await storage.write_metadata("owner", "b", {"id": "b"})
        original_read = storage.metadata.read

        async def flaky_read(owner_id: str, fragment_id: str) -> dict[str, object] | None:
            if fragment_id == "a":
                return None
            return await original_read(owner_id, fragment_id)

        storage.metadata.read = flaky_read  # type: ignore[method-assign]
        return await storage.list_records("owner")

    assert asyncio.run(scenario()) == [{"id": "b"}]


def test_delete_fragment(storage: Storage) -> None:
    async def scenario() -> tuple[bool, bool]:
        await storage.write_metadata("owner", "a", {"id": "a"})
        await storage.write_blob("owner", "a", b"x")
        return await storage.delete_fragment("owner", "a"), await storage.delete_fragment("owner", "a")

    assert asyncio.run(scenario()) == (True, False)


def test_delete_fragment_cleans_orphaned_blob(storage: Storage) -> None:
    asyncio.run(storage.write_blob("owner", "a", b"x"))
    assert asyncio.run(storage.delete_fragment("owner", "a")) is False
    assert asyncio.run(storage.read_blob("owner", "a")) is None


def test_file_backends(tmp_path: Path) -> None:
    storage = Storage(FileMetadataStore(tmp_path / "metadata"), FileBlobStore(tmp_path / "blobs"))

    async def scenario() -> None:
        await storage.write_metadata("owner", "a", {"id": "a", "created": "2024-01-01T00:00:00+00:00"})
        await storage.write_blob("owner", "a", b"x")

    asyncio.run(scenario())
    assert asyncio.run(storage.list_records("owner")) == [{"id": "a", "created": "2024-01-01T00:00:00+00:00"}]
    assert (tmp_path / "blobs" / "owner" / "a.blob").read_bytes() == b"x"


def test_default_storage_is_built_once_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FRAGMENTS_BACKEND", "memory")
    monkeypatch.setenv("FRAGMENTS_MAX_SIZE", "10")
    first = default_storage()
    assert default_storage() is first
    assert first.max_payload_size == 10


def test_set_default_storage() -> None:
    storage = Storage()
    set_default_storage(storage)
    assert default_storage() is storage
