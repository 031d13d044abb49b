"""Content sniffing: map raw bytes to a MIME type and a media kind.

Detection looks only at the leading bytes of the buffer, never at file names.
"""

from __future__ import annotations

from booru_stage.models.post import MediaKind
from booru_stage.services.errors import UnsupportedContentKindError

__all__ = ["OCTET_STREAM", "classify", "media_kind_for", "sniff_mime_type"]

OCTET_STREAM = "application/octet-stream"
FLASH_MIME = "application/x-shockwave-flash"

# (offset, signature, mime) checked in order; first match wins.
_SIGNATURES: tuple[tuple[int, bytes, str], ...] = (
    (0, b"\xff\xd8\xff", "image/jpeg"),
    (0, b"\x89PNG\r\n\x1a\n", "image/png"),
    (0, b"GIF87a", "image/gif"),
    (0, b"GIF89a", "image/gif"),
    (0, b"FWS", FLASH_MIME),
    (0, b"CWS", FLASH_MIME),
    (0, b"ZWS", FLASH_MIME),
    (0, b"OggS", "application/ogg"),
    (0, b"BM", "image/bmp"),
)

_EBML_MAGIC = b"\x1a\x45\xdf\xa3"
_EBML_PROBE = 64

# ISO base media files share the ftyp box; the major brand names the format.
_ISO_BRANDS: dict[bytes, str] = {
    b"heic": "image/heic",
    b"heix": "image/heic",
    b"mif1": "image/heic",
    b"avif": "image/avif",
    b"qt  ": "video/quicktime",
    b"M4A ": "audio/mp4",
}


def sniff_mime_type(data: bytes) -> str:
    """Return the MIME type suggested by the magic number at the start of ``data``."""
    if data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return "image/webp"
    if data.startswith(_EBML_MAGIC):
        # Matroska and WebM share a container; the doctype tells them apart.
        if b"webm" in data[:_EBML_PROBE]:
            return "video/webm"
        return "video/x-matroska"
    if data[4:8] == b"ftyp":
        return _ISO_BRANDS.get(data[8:12], "video/mp4")
    for offset, signature, mime_type in _SIGNATURES:
        if data[offset:offset + len(signature)] == signature:
            return mime_type
    return OCTET_STREAM


def media_kind_for(mime_type: str) -> MediaKind:
    """Map a MIME type onto the media kind it belongs to."""
    if mime_type == FLASH_MIME:
        return MediaKind.FLASH
    if mime_type.startswith("image/"):
        return MediaKind.IMAGE
    if mime_type.startswith("video/") or mime_type == "application/ogg":
        return MediaKind.VIDEO
    raise UnsupportedContentKindError(mime_type)


def classify(data: bytes) -> tuple[str, MediaKind]:
    """Return ``(mime_type, kind)`` for a content buffer.

    Raises:
        UnsupportedContentKindError: If the buffer is not an image, video or
            flash animation.
    """
    mime_type = sniff_mime_type(data)
    return mime_type, media_kind_for(mime_type)
