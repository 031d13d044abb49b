"""Business logic services for the Booru Stage application."""

from .dedup import ChecksumIndex
from .fetcher import HttpFetcher
from .globals import GlobalCounterUpdater
from .history import HistoryService
from .identity import StaticIdentity
from .ingest import ContentIngestor
from .post_service import PostService, build_post_service
from .tags import TagService
from .validation import FormValidator

__all__ = [
    "ChecksumIndex",
    "ContentIngestor",
    "FormValidator",
    "GlobalCounterUpdater",
    "HistoryService",
    "HttpFetcher",
    "PostService",
    "StaticIdentity",
    "TagService",
    "build_post_service",
]
