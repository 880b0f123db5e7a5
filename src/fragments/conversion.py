"""ConversionEngine: authorise and perform extension-driven format conversion."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fragments.errors import ConversionFailedError, UnsupportedMediaTypeError
from fragments.imaging import ImageCodec, PillowImageCodec
from fragments.media import parse_content_type
from fragments.registry import DEFAULT_REGISTRY, ContentTypeRegistry

if TYPE_CHECKING:
    from fragments.fragment import Fragment
    from fragments.registry import ConversionEdge

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Rendition:
    """Bytes to return to a caller, with the MIME type they are encoded as."""

    data: bytes
    media_type: str


class ConversionEngine:
    """Convert stored payloads into the representation a file extension asks for.

    Which conversions exist is decided entirely by the registry; the engine
    only runs them. Text-kind edges decode UTF-8, apply the edge's transform
    and re-encode. Image-kind edges go through the image codec.
    """

    def __init__(
        self,
        registry: ContentTypeRegistry = DEFAULT_REGISTRY,
        image_codec: ImageCodec | None = None,
    ) -> None:
        """Initialize with a registry and an image codec (Pillow by default)."""
        self._registry = registry
        self._image_codec = image_codec if image_codec is not None else PillowImageCodec()

    @property
    def registry(self) -> ContentTypeRegistry:
        """Return the registry this engine dispatches on."""
        return self._registry

    def resolve_extension(self, extension: str) -> str:
        """Resolve a requested file extension to its MIME type."""
        target = self._registry.mime_for_extension(extension)
        if target is None:
            msg = f"Unknown extension {extension!r}."
            raise UnsupportedMediaTypeError(msg)
        return target

    def convert(self, content_type: str, data: bytes, extension: str | None = None) -> Rendition:
        """Render ``data`` (declared as ``content_type``) as ``extension``.

        Without an extension the payload is returned unchanged under its own
        MIME type.
        """
        source = parse_content_type(content_type).mime_type
        if not extension:
            return Rendition(data=data, media_type=source)

        target = self.resolve_extension(extension)
        if target not in self._registry.formats_for(source):
            msg = f"Cannot convert {source} to {target}."
            raise UnsupportedMediaTypeError(msg, source_type=source, target_type=target)
        if target == source:
            return Rendition(data=data, media_type=source)

        family = self._registry.family_for(source)
        edge = self._registry.edge_for(family, target) if family is not None else None
        if edge is None:
            msg = f"Cannot convert {source} to {target}."
            raise UnsupportedMediaTypeError(msg, source_type=source, target_type=target)

        logger.debug("Converting %d bytes from %s to %s", len(data), source, target)
        if edge.source.kind == "image":
            return Rendition(data=self._transcode_image(edge, data), media_type=target)
        return Rendition(data=self._transform_text(edge, data), media_type=target)

    async def render(self, fragment: Fragment, extension: str | None = None) -> Rendition:
        """Load a fragment's payload and convert it off the event loop."""
        data = await fragment.get_data()
        if not extension:
            return Rendition(data=data, media_type=fragment.mime_type)
        return await asyncio.to_thread(self.convert, fragment.type, data, extension)

    def _transform_text(self, edge: ConversionEdge, data: bytes) -> bytes:
        if edge.transform is None:
            msg = f"Cannot convert {edge.source.value} to {edge.target}."
            raise UnsupportedMediaTypeError(msg, source_type=edge.source.value, target_type=edge.target)
        try:
            text = data.decode("utf-8")
            return edge.transform(text).encode("utf-8")
        except ValueError as exc:
            raise ConversionFailedError(edge.source.value, edge.target, str(exc)) from exc

    def _transcode_image(self, edge: ConversionEdge, data: bytes) -> bytes:
        try:
            return self._image_codec.transcode(data, edge.target)
        except ValueError as exc:
            raise ConversionFailedError(edge.source.value, edge.target, str(exc)) from exc
