"""Image codec collaborator: re-encode image payloads between container formats."""

from __future__ import annotations

import io
from collections.abc import Mapping
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from PIL import Image

# MIME type -> Pillow format name
PILLOW_FORMATS = MappingProxyType(
    {
        "image/png": "PNG",
        "image/jpeg": "JPEG",
        "image/webp": "WEBP",
        "image/gif": "GIF",
        "image/avif": "AVIF",
    }
)

# Formats that cannot carry an alpha channel or a palette.
_RGB_ONLY = frozenset({"JPEG"})


@runtime_checkable
class ImageCodec(Protocol):
    """Image transcoding protocol.

    Implementations decode ``data`` in whatever image format it holds and
    re-encode it as ``target_type``. Malformed input raises ``ValueError``.
    """

    def transcode(self, data: bytes, target_type: str) -> bytes:
        """Re-encode image bytes into the container for ``target_type``."""
        ...


class PillowImageCodec:
    """ImageCodec backed by Pillow.

    Dimensions and pixel content are preserved; images with alpha or a palette
    are flattened to RGB for JPEG output.
    """

    def __init__(self, formats: Mapping[str, str] = PILLOW_FORMATS) -> None:
        """Initialize with a MIME type -> Pillow format table."""
        self._formats = formats

    def transcode(self, data: bytes, target_type: str) -> bytes:
        """Decode ``data`` and re-encode it as ``target_type``."""
        pil_format = self._formats.get(target_type)
        if pil_format is None:
            msg = f"no image encoder for {target_type}"
            raise ValueError(msg)

        buffer = io.BytesIO()
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                output = image
                if pil_format in _RGB_ONLY and image.mode not in ("RGB", "L", "CMYK"):
                    output = image.convert("RGB")
                output.save(buffer, format=pil_format)
        except (OSError, KeyError, ValueError, Image.DecompressionBombError) as exc:
            msg = f"cannot transcode image to {pil_format}: {exc}"
            raise ValueError(msg) from exc
        return buffer.getvalue()
