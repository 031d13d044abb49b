"""Repositories wrapping SQLAlchemy access to persisted entities."""

from .global_param_repo import GlobalParamRepository
from .post_repo import PostRepository

__all__ = ["GlobalParamRepository", "PostRepository"]
