# src/booru_stage/models/__init__.py
"""SQLAlchemy models for the Booru Stage application."""

from .global_param import GlobalParam
from .post import MediaKind, Post, PostSafety
from .snapshot import Snapshot, SnapshotOperation, SnapshotType
from .tag import Tag
from .user import User

__all__ = [
    "GlobalParam",
    "MediaKind", "Post", "PostSafety",
    "Snapshot", "SnapshotOperation", "SnapshotType",
    "Tag",
    "User",
]
