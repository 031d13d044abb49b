# src/booru_stage/models/post.py
"""SQLAlchemy models for posts and related attributes."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booru_stage.db.session import Base

if TYPE_CHECKING:
    from .tag import Tag
    from .user import User


class PostSafety(str, enum.Enum):
    """Safety rating chosen by the uploader."""

    SAFE = "safe"
    SKETCHY = "sketchy"
    UNSAFE = "unsafe"


class MediaKind(str, enum.Enum):
    """Coarse kind of a post's primary content."""

    IMAGE = "image"
    VIDEO = "video"
    FLASH = "flash"
    # Content lives on a video-sharing site; only its id and a thumbnail are stored.
    REMOTE_EMBED = "remote_embed"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


post_tag = Table(
    "post_tag",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("post.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True),
)

# Directed, non-owning: post_id lists related_post_id among its relations.
post_relation = Table(
    "post_relation",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("post.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "related_post_id",
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Post(Base):
    """A user-submitted media post.

    ``last_edit_time`` doubles as the optimistic concurrency token: editors must
    echo back the value they saw, and every successful commit advances it.
    """

    __tablename__ = "post"
    # Ids of deleted posts stay retired; snapshots are keyed by id.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="SET NULL"),
        nullable=True,
    )

    upload_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_edit_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    safety: Mapped[PostSafety] = mapped_column(
        Enum(PostSafety, native_enum=False, length=16, values_callable=_enum_values),
        nullable=False,
        default=PostSafety.SAFE,
    )
    source: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Content descriptor.
    content_type: Mapped[MediaKind] = mapped_column(
        Enum(MediaKind, native_enum=False, length=16, values_callable=_enum_values),
        nullable=False,
    )
    content_mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # SHA-1 of the content, or the video id for remote embeds.
    content_checksum: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    content: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True, deferred=True)
    thumbnail_source_content: Mapped[bytes | None] = mapped_column(
        LargeBinary,
        nullable=True,
        deferred=True,
    )
    original_file_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    original_file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    image_width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    image_height: Mapped[int | None] = mapped_column(Integer, nullable=True)

    feature_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_feature_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    user: Mapped[User | None] = relationship("User", lazy="joined")
    tags: Mapped[list[Tag]] = relationship(
        "Tag",
        secondary=post_tag,
        back_populates="posts",
        lazy="selectin",
        order_by="Tag.name",
    )
    related_posts: Mapped[list[Post]] = relationship(
        "Post",
        secondary=post_relation,
        primaryjoin=lambda: Post.id == post_relation.c.post_id,
        secondaryjoin=lambda: Post.id == post_relation.c.related_post_id,
        lazy="selectin",
    )

    @property
    def tag_names(self) -> list[str]:
        """Return the names of the attached tags."""
        return [tag.name for tag in self.tags]

    @property
    def related_post_ids(self) -> list[int]:
        """Return the ids of related posts."""
        return sorted(related.id for related in self.related_posts)

    @property
    def has_custom_thumbnail(self) -> bool:
        """Return True when a thumbnail source is stored for this post."""
        return self.thumbnail_source_content is not None
