"""Turn uploaded bytes or a remote URL into a post's content descriptor."""
from __future__ import annotations

import hashlib
import io
import logging
import re
from dataclasses import dataclass
from typing import ClassVar

from PIL import Image, UnidentifiedImageError

from booru_stage.core.settings import Settings, settings
from booru_stage.models.post import MediaKind, Post
from booru_stage.services.classifier import classify
from booru_stage.services.dedup import ChecksumIndex
from booru_stage.services.errors import (
    ContentTooLargeError,
    EmptyContentError,
    InvalidUrlError,
    ThumbnailTooLargeError,
)
from booru_stage.services.fetcher import Fetcher

logger = logging.getLogger(__name__)

__all__ = [
    "ContentDescriptor",
    "ContentIngestor",
    "RemoteEmbed",
    "StoredContent",
    "measure_image",
]

_HTTP_URL = re.compile(r"^https?://")
_YOUTUBE_WATCH = re.compile(r"youtube\.com/watch.*?=([a-zA-Z0-9_-]+)")


@dataclass(frozen=True)
class StoredContent:
    """Content whose bytes are stored locally and addressed by their SHA-1."""

    mime_type: str
    kind: MediaKind
    checksum: str
    width: int | None
    height: int | None
    size: int
    payload: bytes

    def apply(self, post: Post) -> None:
        """Copy this descriptor onto ``post``."""
        post.content_mime_type = self.mime_type
        post.content_type = self.kind
        post.content_checksum = self.checksum
        post.content = self.payload
        post.image_width = self.width
        post.image_height = self.height
        post.original_file_size = self.size


@dataclass(frozen=True)
class RemoteEmbed:
    """Video hosted elsewhere; identified by the site's video id, not a hash."""

    kind: ClassVar[MediaKind] = MediaKind.REMOTE_EMBED

    video_id: str
    url: str
    thumbnail: bytes

    @property
    def checksum(self) -> str:
        return self.video_id

    def apply(self, post: Post) -> None:
        """Copy this descriptor onto ``post``."""
        post.content_mime_type = None
        post.content_type = self.kind
        post.content_checksum = self.video_id
        post.content = None
        post.image_width = None
        post.image_height = None
        post.original_file_size = None
        post.original_file_name = self.url
        post.thumbnail_source_content = self.thumbnail


ContentDescriptor = StoredContent | RemoteEmbed


def measure_image(data: bytes) -> tuple[int | None, int | None]:
    """Return ``(width, height)`` if Pillow can read the buffer's header."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
    except (
        UnidentifiedImageError,
        OSError,
        EOFError,
        ValueError,
        Image.DecompressionBombError,
    ) as err:
        logger.debug("Could not read dimensions: %s", err)
        return None, None
    return width, height


class ContentIngestor:
    """Validate, classify, hash and dedup post content."""

    def __init__(
        self,
        checksums: ChecksumIndex,
        fetcher: Fetcher,
        config: Settings = settings,
    ) -> None:
        self._checksums = checksums
        self._fetcher = fetcher
        self._config = config

    def ingest_from_bytes(self, data: bytes, *, post_id: int | None = None) -> StoredContent:
        """Build a descriptor for raw content bytes.

        Args:
            data: Uploaded content.
            post_id: Id of the post being re-ingested, so it may keep its own checksum.

        Raises:
            EmptyContentError: If ``data`` is empty.
            ContentTooLargeError: If ``data`` exceeds the maximum post size.
            UnsupportedContentKindError: If the content is not image, video or flash.
            DuplicateContentError: If another post already has this content.
        """
        if not data:
            raise EmptyContentError()
        if len(data) > self._config.max_post_size:
            raise ContentTooLargeError(len(data), self._config.max_post_size)

        mime_type, kind = classify(data)
        checksum = hashlib.sha1(data).hexdigest()
        self._checksums.assert_available(checksum, post_id)

        width, height = measure_image(data)
        return StoredContent(
            mime_type=mime_type,
            kind=kind,
            checksum=checksum,
            width=width,
            height=height,
            size=len(data),
            payload=data,
        )

    def ingest_from_url(self, url: str, *, post_id: int | None = None) -> ContentDescriptor:
        """Build a descriptor for content at ``url``.

        Video-site watch links become remote embeds without downloading the
        video; anything else is downloaded and ingested as bytes.

        Raises:
            InvalidUrlError: If the URL is not http or https.
            FetchError: If a download fails.
        """
        if not _HTTP_URL.match(url):
            raise InvalidUrlError(url)

        match = _YOUTUBE_WATCH.search(url)
        if match:
            video_id = match.group(1)
            self._checksums.assert_available(video_id, post_id)
            thumbnail_url = self._config.youtube_thumbnail_url.format(video_id=video_id)
            thumbnail = self._fetcher.download(thumbnail_url)
            return RemoteEmbed(video_id=video_id, url=url, thumbnail=thumbnail)

        return self.ingest_from_bytes(self._fetcher.download(url), post_id=post_id)

    def ingest_custom_thumbnail(self, data: bytes) -> bytes:
        """Check a user-supplied thumbnail against its size limit and return it."""
        if len(data) > self._config.max_custom_thumbnail_size:
            raise ThumbnailTooLargeError(len(data), self._config.max_custom_thumbnail_size)
        return data
