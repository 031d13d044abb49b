"""Tests for magic-number content sniffing."""

import pytest

from booru_stage.models.post import MediaKind
from booru_stage.services.classifier import OCTET_STREAM, classify, media_kind_for, sniff_mime_type
from booru_stage.services.errors import UnsupportedContentKindError


@pytest.mark.parametrize(
    ("data", "mime_type", "kind"),
    [
        (b"\xff\xd8\xff\xe0\x00\x10JFIF", "image/jpeg", MediaKind.IMAGE),
        (b"\x89PNG\r\n\x1a\n\x00\x00", "image/png", MediaKind.IMAGE),
        (b"GIF89a\x01\x00\x01\x00", "image/gif", MediaKind.IMAGE),
        (b"RIFF\x24\x00\x00\x00WEBPVP8 ", "image/webp", MediaKind.IMAGE),
        (b"CWS\x0a\x00\x00\x00\x00", "application/x-shockwave-flash", MediaKind.FLASH),
        (b"FWS\x09\x00\x00\x00\x00", "application/x-shockwave-flash", MediaKind.FLASH),
        (b"\x00\x00\x00\x18ftypmp42", "video/mp4", MediaKind.VIDEO),
        (b"\x1a\x45\xdf\xa3\x9f\x42\x82\x84webm", "video/webm", MediaKind.VIDEO),
        (b"OggS\x00\x02\x00\x00", "application/ogg", MediaKind.VIDEO),
    ],
)
def test_classify_known_signatures(data: bytes, mime_type: str, kind: MediaKind) -> None:
    assert classify(data) == (mime_type, kind)


def test_unknown_bytes_sniff_as_octet_stream() -> None:
    assert sniff_mime_type(b"hello world") == OCTET_STREAM


def test_classify_rejects_non_media() -> None:
    with pytest.raises(UnsupportedContentKindError) as exc_info:
        classify(b"%PDF-1.7\n")
    assert exc_info.value.mime_type == OCTET_STREAM


def test_media_kind_for_text_is_unsupported() -> None:
    with pytest.raises(UnsupportedContentKindError):
        media_kind_for("text/plain")


def test_matroska_without_webm_doctype() -> None:
    assert sniff_mime_type(b"\x1a\x45\xdf\xa3\x9f\x42\x82\x88matroska") == "video/x-matroska"


@pytest.mark.parametrize(
    ("brand", "mime_type", "kind"),
    [
        (b"isom", "video/mp4", MediaKind.VIDEO),
        (b"heic", "image/heic", MediaKind.IMAGE),
        (b"heix", "image/heic", MediaKind.IMAGE),
        (b"mif1", "image/heic", MediaKind.IMAGE),
        (b"avif", "image/avif", MediaKind.IMAGE),
        (b"qt  ", "video/quicktime", MediaKind.VIDEO),
    ],
)
def test_iso_media_major_brand(brand: bytes, mime_type: str, kind: MediaKind) -> None:
    assert classify(b"\x00\x00\x00\x18ftyp" + brand + b"\x00\x00\x00\x00") == (mime_type, kind)


def test_iso_audio_is_unsupported() -> None:
    with pytest.raises(UnsupportedContentKindError) as exc_info:
        classify(b"\x00\x00\x00\x20ftypM4A \x00\x00\x00\x00")
    assert exc_info.value.mime_type == "audio/mp4"
