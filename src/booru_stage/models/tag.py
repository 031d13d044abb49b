# src/booru_stage/models/tag.py
"""SQLAlchemy model for tags attached to posts."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booru_stage.db.session import Base
from booru_stage.db.time import utcnow

from .post import post_tag

if TYPE_CHECKING:
    from .post import Post


class Tag(Base):
    """Free-form label; names are unique regardless of case."""

    __tablename__ = "tag"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    creation_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    posts: Mapped[list[Post]] = relationship(
        "Post",
        secondary=post_tag,
        back_populates="tags",
        lazy="select",
    )
