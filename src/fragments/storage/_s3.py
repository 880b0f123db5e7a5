"""S3BlobStore: fragment payloads as objects in an S3 bucket.

Requires the optional ``boto3`` dependency (``pip install fragments[s3]``).
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from fragments.errors import StorageError
from fragments.storage._store import format_key, validate_key

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

_MISSING_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def _error_code(exc: Exception) -> str:
    """Return the AWS error code carried by a botocore ``ClientError``."""
    response = getattr(exc, "response", None)
    if not isinstance(response, dict):
        return ""
    error = response.get("Error")
    if not isinstance(error, dict):
        return ""
    return str(error.get("Code", ""))


class S3BlobStore:
    """Blob store keeping each payload at ``<prefix><owner_id>/<fragment_id>``.

    Usage::

        import boto3
        client = boto3.client("s3", region_name="us-east-1")
        blobs = S3BlobStore("my-bucket", client=client, prefix="fragments/")
    """

    def __init__(
        self,
        bucket: str,
        *,
        client: Any | None = None,
        prefix: str = "",
        region_name: str | None = None,
    ) -> None:
        """Initialize with a bucket name and an optional preconfigured boto3 S3 client."""
        if not bucket:
            msg = "bucket must be a non-empty string."
            raise ValueError(msg)
        if client is None:
            import boto3

            client = boto3.client("s3", region_name=region_name)
        self._client = client
        self._bucket = bucket
        self._prefix = prefix

    @property
    def bucket(self) -> str:
        """Return the bucket name."""
        return self._bucket

    def object_key(self, owner_id: str, fragment_id: str) -> str:
        """Return the S3 object key for a fragment."""
        return f"{self._prefix}{format_key(owner_id, fragment_id)}"

    def _call(self, operation: str, key: str, func: Callable[[], Any], *, missing_ok: bool = False) -> Any:
        """Invoke one client call, mapping missing objects to ``None`` and failures to StorageError."""
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            return func()
        except ClientError as exc:
            if missing_ok and _error_code(exc) in _MISSING_CODES:
                return None
            raise StorageError(operation, key, str(exc)) from exc
        except BotoCoreError as exc:
            raise StorageError(operation, key, str(exc)) from exc

    def _put(self, key: str, data: bytes) -> None:
        self._call("write", key, lambda: self._client.put_object(Bucket=self._bucket, Key=key, Body=data))

    def _get(self, key: str) -> bytes | None:
        response = self._call(
            "read", key, lambda: self._client.get_object(Bucket=self._bucket, Key=key), missing_ok=True
        )
        if response is None:
            return None
        return self._call("read", key, lambda: response["Body"].read())

    def _delete(self, key: str) -> bool:
        head = self._call(
            "delete", key, lambda: self._client.head_object(Bucket=self._bucket, Key=key), missing_ok=True
        )
        if head is None:
            return False
        self._call("delete", key, lambda: self._client.delete_object(Bucket=self._bucket, Key=key))
        return True

    async def write(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        """Upload the payload for a key, replacing any existing object."""
        key = self.object_key(*validate_key(owner_id, fragment_id))
        logger.debug("Uploading %d bytes to s3://%s/%s", len(data), self._bucket, key)
        await asyncio.to_thread(self._put, key, bytes(data))

    async def read(self, owner_id: str, fragment_id: str) -> bytes | None:
        """Download the payload, or return ``None`` when the object does not exist."""
        key = self.object_key(*validate_key(owner_id, fragment_id))
        return await asyncio.to_thread(self._get, key)

    async def delete(self, owner_id: str, fragment_id: str) -> bool:
        """Delete the object. Return ``True`` when one existed."""
        key = self.object_key(*validate_key(owner_id, fragment_id))
        logger.debug("Deleting s3://%s/%s", self._bucket, key)
        return await asyncio.to_thread(self._delete, key)
