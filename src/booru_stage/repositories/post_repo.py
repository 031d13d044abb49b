"""Data access helpers for working with posts."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from booru_stage.models.post import Post, post_relation

__all__ = ["PostRepository"]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def find_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        return self.session.get(Post, post_id)

    def find_by_name(self, name: str) -> Post | None:
        """Return a post by its unique name."""
        result = self.session.execute(select(Post).where(Post.name == name))
        return result.scalars().first()

    def find_by_ids(self, post_ids: Iterable[int]) -> dict[int, Post]:
        """Return the posts that exist among ``post_ids``, keyed by id."""
        ids = set(post_ids)
        if not ids:
            return {}
        result = self.session.execute(select(Post).where(Post.id.in_(ids)))
        return {post.id: post for post in result.scalars()}

    def find_by_checksum(self, checksum: str) -> Post | None:
        """Return the post that owns a content checksum."""
        result = self.session.execute(select(Post).where(Post.content_checksum == checksum))
        return result.scalars().first()

    def save(self, post: Post) -> Post:
        """Add or update a post and flush so it receives an id."""
        self.session.add(post)
        self.session.flush()
        return post

    def delete_by_id(self, post_id: int) -> None:
        """Remove a post along with relations that point at it."""
        post = self.find_by_id(post_id)
        if post is None:
            return
        # Other posts may list this one as related; the association is not owned
        # by either side, so drop the inbound rows explicitly.
        self.session.execute(
            delete(post_relation).where(post_relation.c.related_post_id == post_id)
        )
        self.session.delete(post)
        self.session.flush()

    def get_count(self) -> int:
        """Return the number of stored posts."""
        return int(self.session.scalar(select(func.count(Post.id))) or 0)

    def get_total_content_size(self) -> int:
        """Return the summed original size of all stored content."""
        total = self.session.scalar(select(func.coalesce(func.sum(Post.original_file_size), 0)))
        return int(total or 0)
