"""Metadata and blob stores, and the Storage facade that composes them."""

from fragments.storage._facade import Storage, default_storage, set_default_storage
from fragments.storage._file import FileBlobStore, FileMetadataStore
from fragments.storage._memory import InMemoryBlobStore, InMemoryMetadataStore
from fragments.storage._s3 import S3BlobStore
from fragments.storage._store import BlobStore, MetadataRecord, MetadataStore, validate_key

__all__ = [
    "BlobStore",
    "FileBlobStore",
    "FileMetadataStore",
    "InMemoryBlobStore",
    "InMemoryMetadataStore",
    "MetadataRecord",
    "MetadataStore",
    "S3BlobStore",
    "Storage",
    "default_storage",
    "set_default_storage",
    "validate_key",
]
