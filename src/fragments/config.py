"""Process configuration: which storage backends to use and the payload limit."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, cast

from fragments.errors import ValidationError
from fragments.serde import parse_int_text
from fragments.storage import (
    FileBlobStore,
    FileMetadataStore,
    InMemoryBlobStore,
    InMemoryMetadataStore,
    S3BlobStore,
    Storage,
)

Backend = Literal["memory", "file", "s3"]
_BACKENDS = frozenset({"memory", "file", "s3"})

DEFAULT_MAX_SIZE = 5 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class FragmentsConfig:
    """Storage wiring settings."""

    backend: Backend = "memory"
    data_dir: Path = Path("data")
    s3_bucket: str | None = None
    s3_prefix: str = ""
    aws_region: str = "us-east-1"
    max_size: int = DEFAULT_MAX_SIZE

    @property
    def metadata_dir(self) -> Path:
        return self.data_dir / "metadata"

    @property
    def blobs_dir(self) -> Path:
        return self.data_dir / "blobs"


def load_config(environ: Mapping[str, str] | None = None) -> FragmentsConfig:
    """Read configuration from ``FRAGMENTS_*`` environment variables."""
    env = os.environ if environ is None else environ

    backend = env.get("FRAGMENTS_BACKEND", "memory").strip().lower()
    if backend not in _BACKENDS:
        msg = f"FRAGMENTS_BACKEND must be one of memory/file/s3, got {backend!r}."
        raise ValidationError(msg)

    max_size = parse_int_text(env.get("FRAGMENTS_MAX_SIZE", str(DEFAULT_MAX_SIZE)), field_name="FRAGMENTS_MAX_SIZE")
    if max_size <= 0:
        msg = f"FRAGMENTS_MAX_SIZE must be > 0, got {max_size}."
        raise ValidationError(msg)

    bucket = env.get("FRAGMENTS_S3_BUCKET") or None
    if backend == "s3" and bucket is None:
        msg = "FRAGMENTS_S3_BUCKET is required when FRAGMENTS_BACKEND=s3."
        raise ValidationError(msg)

    return FragmentsConfig(
        backend=cast("Backend", backend),
        data_dir=Path(env.get("FRAGMENTS_DATA_DIR", "data")),
        s3_bucket=bucket,
        s3_prefix=env.get("FRAGMENTS_S3_PREFIX", ""),
        aws_region=env.get("AWS_REGION", "us-east-1"),
        max_size=max_size,
    )


def build_storage(config: FragmentsConfig, *, s3_client: object | None = None) -> Storage:
    """Wire the configured backends into a Storage facade.

    The ``s3`` backend keeps payloads in S3 and metadata on the local file system.
    """
    if config.backend == "memory":
        return Storage(InMemoryMetadataStore(), InMemoryBlobStore(), max_payload_size=config.max_size)
    if config.backend == "file":
        return Storage(
            FileMetadataStore(config.metadata_dir),
            FileBlobStore(config.blobs_dir),
            max_payload_size=config.max_size,
        )
    if config.s3_bucket is None:
        msg = "s3 backend requires s3_bucket."
        raise ValidationError(msg)
    blobs = S3BlobStore(config.s3_bucket, client=s3_client, prefix=config.s3_prefix, region_name=config.aws_region)
    return Storage(FileMetadataStore(config.metadata_dir), blobs, max_payload_size=config.max_size)
