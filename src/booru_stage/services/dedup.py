"""Content-addressed duplicate detection."""
from __future__ import annotations

import logging

from booru_stage.models.post import Post
from booru_stage.repositories.post_repo import PostRepository
from booru_stage.services.errors import DuplicateContentError

logger = logging.getLogger(__name__)

__all__ = ["ChecksumIndex"]


class ChecksumIndex:
    """Map content checksums to the post that owns them."""

    def __init__(self, posts: PostRepository) -> None:
        self._posts = posts

    def owner_of(self, checksum: str) -> Post | None:
        """Return the post owning ``checksum``, if any."""
        return self._posts.find_by_checksum(checksum)

    def assert_available(self, checksum: str, post_id: int | None = None) -> None:
        """Raise unless ``checksum`` is unused or already owned by ``post_id``.

        ``post_id`` is None for posts that have not been stored yet.
        """
        owner = self.owner_of(checksum)
        if owner is not None and owner.id != post_id:
            logger.info("Rejected duplicate of post %s (checksum %s)", owner.id, checksum)
            raise DuplicateContentError(owner.id, owner.name)
