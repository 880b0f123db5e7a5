"""Content-type registry: supported ingest types and the conversion table."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Literal

from fragments.media import normalize_extension, parse_content_type
from fragments.transforms import as_plain_text, csv_to_json, json_to_yaml, markdown_to_html, yaml_to_json

MediaKind = Literal["text", "image"]
TextTransform = Callable[[str], str]

_UTF8_PARAMETER = "; charset=utf-8"


class MediaFamily(Enum):
    """Source families a stored fragment can belong to, keyed by MIME type."""

    PLAIN_TEXT = "text/plain"
    MARKDOWN = "text/markdown"
    HTML = "text/html"
    CSV = "text/csv"
    JSON = "application/json"
    YAML = "application/yaml"
    PNG = "image/png"
    JPEG = "image/jpeg"
    WEBP = "image/webp"
    GIF = "image/gif"
    AVIF = "image/avif"

    @property
    def kind(self) -> MediaKind:
        """Return ``image`` for image containers and ``text`` for everything else."""
        return "image" if self.value.startswith("image/") else "text"


@dataclass(frozen=True, slots=True)
class ConversionEdge:
    """One legal conversion from a source family into a target MIME type.

    Text-kind edges carry the transform applied to the decoded text. Image-kind
    edges carry none; the engine's image codec re-encodes the payload.
    """

    source: MediaFamily
    target: str
    transform: TextTransform | None = None


def _freeze_extensions(extensions: Mapping[str, str]) -> Mapping[str, str]:
    normalized: dict[str, str] = {}
    for extension, mime_type in extensions.items():
        key = normalize_extension(extension)
        if not key:
            msg = f"Invalid extension {extension!r}."
            raise ValueError(msg)
        normalized[key] = mime_type
    return MappingProxyType(normalized)


def _freeze_edges(
    edges: Mapping[MediaFamily, Iterable[ConversionEdge]],
    targets: frozenset[str],
) -> Mapping[MediaFamily, tuple[ConversionEdge, ...]]:
    frozen: dict[MediaFamily, tuple[ConversionEdge, ...]] = {}
    for family, family_edges in edges.items():
        items = tuple(family_edges)
        seen: set[str] = set()
        for edge in items:
            if edge.source is not family:
                msg = f"Edge {edge.source.value} -> {edge.target} is listed under {family.value}."
                raise ValueError(msg)
            if edge.target in seen or edge.target == family.value:
                msg = f"Duplicate or identity edge {family.value} -> {edge.target}."
                raise ValueError(msg)
            if edge.target not in targets:
                msg = f"Edge target {edge.target} has no file extension."
                raise ValueError(msg)
            if family.kind == "image" and (edge.transform is not None or not edge.target.startswith("image/")):
                msg = f"Image edge {family.value} -> {edge.target} must target an image type without a transform."
                raise ValueError(msg)
            if family.kind == "text" and edge.transform is None:
                msg = f"Text edge {family.value} -> {edge.target} requires a transform."
                raise ValueError(msg)
            seen.add(edge.target)
        frozen[family] = items
    return MappingProxyType(frozen)


@dataclass(frozen=True, slots=True)
class ContentTypeRegistry:
    """Closed, immutable table of ingest types, extensions and conversion edges.

    Build one at startup (``build_default_registry``) and pass it by reference
    to ``Fragment`` and ``ConversionEngine``.
    """

    ingest_types: frozenset[str]
    extensions: Mapping[str, str]
    edges: Mapping[MediaFamily, tuple[ConversionEdge, ...]]

    def __post_init__(self) -> None:
        """Freeze the tables and check they are closed over each other."""
        object.__setattr__(self, "ingest_types", frozenset(self.ingest_types))
        extensions = _freeze_extensions(self.extensions)
        object.__setattr__(self, "extensions", extensions)
        object.__setattr__(self, "edges", _freeze_edges(self.edges, frozenset(extensions.values())))

        for value in self.ingest_types:
            mime_type = parse_content_type(value).mime_type
            if self.family_for(mime_type) is None:
                msg = f"Ingest type {value!r} has no conversion table entry."
                raise ValueError(msg)

    def is_supported(self, value: object) -> bool:
        """Return whether a full Content-Type value is an accepted ingest type."""
        return isinstance(value, str) and value in self.ingest_types

    def family_for(self, mime_type: str) -> MediaFamily | None:
        """Return the source family for a bare MIME type, if registered."""
        try:
            family = MediaFamily(mime_type)
        except ValueError:
            return None
        return family if family in self.edges else None

    def formats_for(self, mime_type: str) -> tuple[str, ...]:
        """Return the ordered MIME types ``mime_type`` can be rendered as, itself first."""
        family = self.family_for(mime_type)
        if family is None:
            return (mime_type,)
        return (mime_type, *(edge.target for edge in self.edges[family]))

    def edge_for(self, family: MediaFamily, target: str) -> ConversionEdge | None:
        """Return the edge from ``family`` to ``target``, if declared."""
        for edge in self.edges.get(family, ()):
            if edge.target == target:
                return edge
        return None

    def mime_for_extension(self, extension: str) -> str | None:
        """Resolve a file extension (with or without the dot) to a MIME type."""
        return self.extensions.get(normalize_extension(extension))


DEFAULT_EXTENSIONS: Mapping[str, str] = MappingProxyType(
    {
        ".txt": "text/plain",
        ".md": "text/markdown",
        ".html": "text/html",
        ".csv": "text/csv",
        ".json": "application/json",
        ".yaml": "application/yaml",
        ".yml": "application/yaml",
        ".png": "image/png",
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".webp": "image/webp",
        ".gif": "image/gif",
        ".avif": "image/avif",
    }
)

# Targets per text-kind source family, in the order ``formats`` reports them.
_TEXT_EDGES: Mapping[MediaFamily, tuple[tuple[str, TextTransform], ...]] = MappingProxyType(
    {
        MediaFamily.PLAIN_TEXT: (),
        MediaFamily.MARKDOWN: (
            ("text/html", markdown_to_html),
            ("text/plain", as_plain_text),
        ),
        MediaFamily.HTML: (("text/plain", as_plain_text),),
        MediaFamily.CSV: (
            ("text/plain", as_plain_text),
            ("application/json", csv_to_json),
        ),
        MediaFamily.JSON: (
            ("application/yaml", json_to_yaml),
            ("text/plain", as_plain_text),
        ),
        MediaFamily.YAML: (
            ("application/json", yaml_to_json),
            ("text/plain", as_plain_text),
        ),
    }
)


def build_default_registry() -> ContentTypeRegistry:
    """Build the registry with every built-in type and conversion edge."""
    edges: dict[MediaFamily, tuple[ConversionEdge, ...]] = {
        family: tuple(ConversionEdge(source=family, target=target, transform=transform) for target, transform in pairs)
        for family, pairs in _TEXT_EDGES.items()
    }
    images = tuple(family for family in MediaFamily if family.kind == "image")
    for family in images:
        edges[family] = tuple(
            ConversionEdge(source=family, target=other.value) for other in images if other is not family
        )

    ingest_types: set[str] = set()
    for family in MediaFamily:
        ingest_types.add(family.value)
        if family.kind == "text":
            ingest_types.add(family.value + _UTF8_PARAMETER)

    return ContentTypeRegistry(ingest_types=frozenset(ingest_types), extensions=DEFAULT_EXTENSIONS, edges=edges)


DEFAULT_REGISTRY = build_default_registry()
