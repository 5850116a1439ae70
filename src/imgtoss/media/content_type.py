"""Content-type sniffing from image magic numbers."""

from __future__ import annotations

OCTET_STREAM = "application/octet-stream"

_JPEG = b"\xff\xd8\xff"
_PNG = b"\x89PNG"
_GIF = b"GIF8"
_RIFF = b"RIFF"
_WEBP = b"WEBP"


def sniff_content_type(data: bytes) -> str:
    """Return the image MIME type for ``data`` or ``application/octet-stream``."""

    if len(data) < 4:
        return OCTET_STREAM
    if data.startswith(_JPEG):
        return "image/jpeg"
    if data.startswith(_PNG):
        return "image/png"
    if data.startswith(_GIF):
        return "image/gif"
    if data.startswith(_RIFF) and data[8:12] == _WEBP:
        return "image/webp"
    return OCTET_STREAM


__all__ = ["OCTET_STREAM", "sniff_content_type"]
