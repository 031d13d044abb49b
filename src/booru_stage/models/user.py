# src/booru_stage/models/user.py
"""SQLAlchemy model for registered uploaders."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from booru_stage.db.session import Base


class User(Base):
    """Registered account that can own posts and author snapshots."""

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
