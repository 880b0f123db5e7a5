"""Fragment: owner-scoped metadata for one stored payload."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, overload

from fragments.errors import NotFoundError, ValidationError
from fragments.media import ContentType, parse_content_type
from fragments.registry import DEFAULT_REGISTRY, ContentTypeRegistry
from fragments.serde import as_str_object_dict, require_non_negative_int, require_string
from fragments.storage import Storage, default_storage, validate_key
from fragments.storage._store import utc_now_iso, validate_owner

if TYPE_CHECKING:
    from collections.abc import Mapping

# Fields that can never be reassigned once a Fragment exists.
_IMMUTABLE_FIELDS = frozenset({"id", "owner_id", "type", "created"})


@dataclass
class Fragment:
    """Metadata for one stored payload: identity, owner, declared type, size, timestamps.

    ``id``, ``owner_id``, ``type`` and ``created`` are fixed at construction.
    ``size`` and ``updated`` change only through ``save()`` and ``set_data()``.
    All durability goes through a ``Storage`` facade (the process default
    unless one is passed in).
    """

    owner_id: str
    type: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created: str | None = None
    updated: str | None = None
    size: int = 0
    storage: Storage | None = field(default=None, repr=False, compare=False)
    registry: ContentTypeRegistry = field(default=DEFAULT_REGISTRY, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Fill default timestamps and validate every field."""
        now = utc_now_iso()
        if self.created is None:
            object.__setattr__(self, "created", now)
        if self.updated is None:
            object.__setattr__(self, "updated", self.created)
        self._validate()

    def __setattr__(self, name: str, value: object) -> None:
        """Reject reassignment of identity fields after construction."""
        if name in _IMMUTABLE_FIELDS and name in self.__dict__:
            msg = f"Fragment.{name} cannot be changed after creation."
            raise AttributeError(msg)
        object.__setattr__(self, name, value)

    def _validate(self) -> None:
        require_string(self.owner_id, field_name="Fragment.owner_id")
        require_string(self.type, field_name="Fragment.type")
        if not self.registry.is_supported(self.type):
            msg = f"Fragment.type {self.type!r} is not a supported type."
            raise ValidationError(msg)
        require_string(self.id, field_name="Fragment.id")
        require_string(self.created, field_name="Fragment.created")
        require_string(self.updated, field_name="Fragment.updated")
        require_non_negative_int(self.size, field_name="Fragment.size")

    def _storage(self) -> Storage:
        return self.storage if self.storage is not None else default_storage()

    # -- derived views -------------------------------------------------------

    @property
    def content_type(self) -> ContentType:
        """Return the parsed declared type."""
        return parse_content_type(self.type)

    @property
    def mime_type(self) -> str:
        """Return the declared type without parameters.

        ``"text/html; charset=utf-8"`` -> ``"text/html"``.
        """
        return self.content_type.mime_type

    @property
    def is_text(self) -> bool:
        """Return whether the fragment's type is ``text/*``."""
        return self.content_type.major == "text"

    @property
    def formats(self) -> tuple[str, ...]:
        """Return the MIME types this fragment can be rendered as, its own type first."""
        return self.registry.formats_for(self.mime_type)

    @staticmethod
    def is_supported_type(value: object, registry: ContentTypeRegistry = DEFAULT_REGISTRY) -> bool:
        """Return whether a full Content-Type value (parameters allowed) can be ingested."""
        return registry.is_supported(value)

    # -- serialization -------------------------------------------------------

    def to_dict(self) -> dict[str, object]:
        """Serialize the metadata record (JSON-compatible)."""
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "created": self.created,
            "updated": self.updated,
            "type": self.type,
            "size": self.size,
        }

    @classmethod
    def from_dict(
        cls,
        value: Mapping[str, object],
        *,
        storage: Storage | None = None,
        registry: ContentTypeRegistry = DEFAULT_REGISTRY,
    ) -> Fragment:
        """Deserialize a metadata record."""
        data = as_str_object_dict(value, field_name="Fragment record")
        return cls(
            id=require_string(data.get("id"), field_name="Fragment.id"),
            owner_id=require_string(data.get("ownerId"), field_name="Fragment.owner_id"),
            created=require_string(data.get("created"), field_name="Fragment.created"),
            updated=require_string(data.get("updated"), field_name="Fragment.updated"),
            type=require_string(data.get("type"), field_name="Fragment.type"),
            size=require_non_negative_int(data.get("size", 0), field_name="Fragment.size"),
            storage=storage,
            registry=registry,
        )

    # -- persistence ---------------------------------------------------------

    async def save(self) -> None:
        """Write the current metadata snapshot, refreshing ``updated``."""
        self._validate()
        self.updated = utc_now_iso()
        await self._storage().write_metadata(self.owner_id, self.id, self.to_dict())

    async def set_data(self, data: bytes) -> None:
        """Replace the payload: update ``size``/``updated``, write metadata, then the blob."""
        storage = self._storage()
        payload = storage.check_payload(data)
        self._validate()
        self.size = len(payload)
        self.updated = utc_now_iso()
        await storage.write_metadata(self.owner_id, self.id, self.to_dict())
        await storage.write_blob(self.owner_id, self.id, payload)

    async def get_data(self) -> bytes:
        """Return the stored payload."""
        data = await self._storage().read_blob(self.owner_id, self.id)
        if data is None:
            raise NotFoundError(self.owner_id, self.id, what="Fragment data")
        return data

    # -- owner-scoped lookups ------------------------------------------------

    @classmethod
    async def by_id(
        cls,
        owner_id: str,
        fragment_id: str,
        *,
        storage: Storage | None = None,
        registry: ContentTypeRegistry = DEFAULT_REGISTRY,
    ) -> Fragment:
        """Load one of the owner's fragments."""
        validate_key(owner_id, fragment_id)
        store = storage if storage is not None else default_storage()
        record = await store.read_metadata(owner_id, fragment_id)
        if record is None or record.get("ownerId") != owner_id:
            raise NotFoundError(owner_id, fragment_id)
        return cls.from_dict(record, storage=storage, registry=registry)

    @overload
    @classmethod
    async def by_user(
        cls,
        owner_id: str,
        *,
        expand: Literal[False] = False,
        storage: Storage | None = None,
        registry: ContentTypeRegistry = DEFAULT_REGISTRY,
    ) -> list[str]: ...

    @overload
    @classmethod
    async def by_user(
        cls,
        owner_id: str,
        *,
        expand: Literal[True],
        storage: Storage | None = None,
        registry: ContentTypeRegistry = DEFAULT_REGISTRY,
    ) -> list[Fragment]: ...

    @classmethod
    async def by_user(
        cls,
        owner_id: str,
        *,
        expand: bool = False,
        storage: Storage | None = None,
        registry: ContentTypeRegistry = DEFAULT_REGISTRY,
    ) -> list[str] | list[Fragment]:
        """List the owner's fragment IDs, or fully loaded fragments when ``expand=True``."""
        validate_owner(owner_id)
        store = storage if storage is not None else default_storage()
        if not expand:
            return await store.list_ids(owner_id)
        return [
            cls.from_dict(record, storage=storage, registry=registry)
            for record in await store.list_records(owner_id)
            if record.get("ownerId") == owner_id
        ]

    @classmethod
    async def delete(cls, owner_id: str, fragment_id: str, *, storage: Storage | None = None) -> None:
        """Delete one of the owner's fragments (metadata and payload)."""
        validate_key(owner_id, fragment_id)
        store = storage if storage is not None else default_storage()
        if not await store.delete_fragment(owner_id, fragment_id):
            raise NotFoundError(owner_id, fragment_id)
