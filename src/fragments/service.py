"""FragmentService: the operations a transport layer exposes, without the transport."""

from __future__ import annotations

import logging

from fragments.conversion import ConversionEngine, Rendition
from fragments.errors import UnsupportedMediaTypeError, ValidationError
from fragments.fragment import Fragment
from fragments.media import split_extension
from fragments.storage import Storage, default_storage

logger = logging.getLogger(__name__)


class FragmentService:
    """Create, update, read, list and delete fragments for an authenticated owner.

    ``owner_id`` is always the already-hashed principal identifier. Errors are
    raised as ``FragmentsError`` subclasses for the caller to map to responses.
    """

    def __init__(self, storage: Storage | None = None, engine: ConversionEngine | None = None) -> None:
        """Initialize with a Storage facade and a conversion engine."""
        self._storage = storage if storage is not None else default_storage()
        self._engine = engine if engine is not None else ConversionEngine()

    @property
    def storage(self) -> Storage:
        """Return the Storage facade."""
        return self._storage

    def _require_supported(self, content_type: str) -> None:
        if not Fragment.is_supported_type(content_type, self._engine.registry):
            logger.warning("Rejected unsupported content type %r", content_type)
            msg = f"Unsupported content type {content_type!r}."
            raise UnsupportedMediaTypeError(msg, source_type=content_type)

    async def create(self, owner_id: str, content_type: str, data: bytes) -> Fragment:
        """Create a fragment and store its payload."""
        self._require_supported(content_type)
        payload = self._storage.check_payload(data)
        fragment = Fragment(
            owner_id=owner_id,
            type=content_type,
            storage=self._storage,
            registry=self._engine.registry,
        )
        await fragment.save()
        await fragment.set_data(payload)
        logger.info("Created fragment %s (%s, %d bytes)", fragment.id, fragment.type, fragment.size)
        return fragment

    async def update(self, owner_id: str, fragment_id: str, content_type: str, data: bytes) -> Fragment:
        """Replace a fragment's payload. The content type must match the stored one."""
        self._require_supported(content_type)
        fragment = await self.get(owner_id, fragment_id)
        if content_type != fragment.type:
            logger.warning(
                "Content-Type mismatch for %s: stored %r, received %r", fragment_id, fragment.type, content_type
            )
            msg = f"Content-Type must match fragment type. Expected {fragment.type!r}, received {content_type!r}."
            raise ValidationError(msg)
        await fragment.set_data(data)
        logger.info("Updated fragment %s (%d bytes)", fragment.id, fragment.size)
        return fragment

    async def get(self, owner_id: str, fragment_id: str) -> Fragment:
        """Load one fragment's metadata."""
        return await Fragment.by_id(owner_id, fragment_id, storage=self._storage, registry=self._engine.registry)

    async def info(self, owner_id: str, fragment_id: str) -> dict[str, object]:
        """Return one fragment's metadata record."""
        return (await self.get(owner_id, fragment_id)).to_dict()

    async def list_fragments(self, owner_id: str, *, expand: bool = False) -> list[str] | list[dict[str, object]]:
        """List the owner's fragment IDs, or their metadata records when ``expand=True``."""
        if not expand:
            return await Fragment.by_user(owner_id, storage=self._storage, registry=self._engine.registry)
        fragments = await Fragment.by_user(
            owner_id, expand=True, storage=self._storage, registry=self._engine.registry
        )
        logger.debug("Listed %d fragments", len(fragments))
        return [fragment.to_dict() for fragment in fragments]

    async def read(self, owner_id: str, name: str) -> Rendition:
        """Return a fragment's payload; ``name`` is ``<id>`` or ``<id>.<ext>``."""
        fragment_id, extension = split_extension(name)
        fragment = await self.get(owner_id, fragment_id)
        rendition = await self._engine.render(fragment, extension)
        logger.info("Read fragment %s as %s", fragment_id, rendition.media_type)
        return rendition

    async def delete(self, owner_id: str, fragment_id: str) -> None:
        """Delete a fragment and its payload."""
        await Fragment.delete(owner_id, fragment_id, storage=self._storage)
        logger.info("Deleted fragment %s", fragment_id)
