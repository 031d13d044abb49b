"""Derived scalar values keyed by well-known names."""
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from booru_stage.db.session import Base

KEY_FEATURED_POST = "featuredPost"
KEY_POST_COUNT = "postCount"
KEY_POST_SIZE = "postSize"


class GlobalParam(Base):
    """Single current value per key; overwritten on every recompute."""

    __tablename__ = "global_param"

    key: Mapped[str] = mapped_column(String(32), primary_key=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
