"""fragments: owner-scoped content storage with format conversion."""

import importlib.metadata as importlib_metadata

from fragments.config import FragmentsConfig, build_storage, load_config
from fragments.conversion import ConversionEngine, Rendition
from fragments.errors import (
    ConversionFailedError,
    FragmentsError,
    NotFoundError,
    StorageError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from fragments.fragment import Fragment
from fragments.imaging import ImageCodec, PillowImageCodec
from fragments.media import ContentType, parse_content_type, split_extension
from fragments.registry import (
    DEFAULT_REGISTRY,
    ContentTypeRegistry,
    ConversionEdge,
    MediaFamily,
    build_default_registry,
)
from fragments.service import FragmentService
from fragments.storage import (
    BlobStore,
    FileBlobStore,
    FileMetadataStore,
    InMemoryBlobStore,
    InMemoryMetadataStore,
    MetadataStore,
    S3BlobStore,
    Storage,
    default_storage,
    set_default_storage,
)


def _detect_version() -> str:
    """Return installed package version or a local fallback when metadata is unavailable."""
    try:
        return importlib_metadata.version("fragments")
    except importlib_metadata.PackageNotFoundError:
        return "0.0.0+unknown"


__version__ = _detect_version()

__all__ = [
    "DEFAULT_REGISTRY",
    "BlobStore",
    "ContentType",
    "ContentTypeRegistry",
    "ConversionEdge",
    "ConversionEngine",
    "ConversionFailedError",
    "FileBlobStore",
    "FileMetadataStore",
    "Fragment",
    "FragmentService",
    "FragmentsConfig",
    "FragmentsError",
    "ImageCodec",
    "InMemoryBlobStore",
    "InMemoryMetadataStore",
    "MediaFamily",
    "MetadataStore",
    "NotFoundError",
    "PillowImageCodec",
    "Rendition",
    "S3BlobStore",
    "Storage",
    "StorageError",
    "UnsupportedMediaTypeError",
    "ValidationError",
    "build_default_registry",
    "build_storage",
    "default_storage",
    "load_config",
    "parse_content_type",
    "set_default_storage",
    "split_extension",
]
