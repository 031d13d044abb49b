"""Errors raised by the post ingestion and revision services.

Every error carries the context a caller needs to render a message (the
conflicting post, the offending field, the detected MIME type) as attributes,
in addition to a readable ``str()``.
"""

from __future__ import annotations

from collections.abc import Sequence

__all__ = [
    "PostServiceError",
    "ValidationError",
    "NotFoundError",
    "EmptyContentError",
    "ContentTooLargeError",
    "ThumbnailTooLargeError",
    "UnsupportedContentKindError",
    "DuplicateContentError",
    "InvalidUrlError",
    "NoContentSpecifiedError",
    "ConcurrentModificationError",
    "ConflictingWriteError",
    "RelatedPostNotFoundError",
    "UniqueNameExhaustedError",
    "FetchError",
]


class PostServiceError(RuntimeError):
    """Base exception for all post service failures."""


class ValidationError(PostServiceError):
    """Raised when a submitted form violates field constraints."""

    def __init__(self, fields: Sequence[str], message: str | None = None) -> None:
        self.fields = list(fields)
        super().__init__(message or f"Invalid fields: {', '.join(self.fields)}")


class NotFoundError(PostServiceError):
    """Raised when a lookup by name or id misses."""

    def __init__(self, identifier: object) -> None:
        self.identifier = identifier
        super().__init__(f'Post with name "{identifier}" was not found.')


class EmptyContentError(PostServiceError):
    """Raised when uploaded content has zero length."""

    def __init__(self) -> None:
        super().__init__("File cannot be empty.")


class ContentTooLargeError(PostServiceError):
    """Raised when uploaded content exceeds the maximum post size."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Upload is too big ({size} bytes, limit is {limit}).")


class ThumbnailTooLargeError(PostServiceError):
    """Raised when a custom thumbnail exceeds its size limit."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Thumbnail is too big ({size} bytes, limit is {limit}).")


class UnsupportedContentKindError(PostServiceError):
    """Raised when sniffed content is not an image, video or flash file."""

    def __init__(self, mime_type: str) -> None:
        self.mime_type = mime_type
        super().__init__(f'Unhandled file type: "{mime_type}"')


class DuplicateContentError(PostServiceError):
    """Raised when another post already owns the same content checksum."""

    def __init__(self, post_id: int, post_name: str) -> None:
        self.post_id = post_id
        self.post_name = post_name
        super().__init__(f"Duplicate post: @{post_id}")


class InvalidUrlError(PostServiceError):
    """Raised when a content URL is not http or https."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f'Invalid URL "{url}"')


class NoContentSpecifiedError(PostServiceError):
    """Raised when a new post has neither content bytes nor a URL."""

    def __init__(self) -> None:
        super().__init__("No content specified")


class ConcurrentModificationError(PostServiceError):
    """Raised when an edit was based on a stale ``last_edit_time``."""

    def __init__(self, post_id: int) -> None:
        self.post_id = post_id
        super().__init__("Someone has already edited this post in the meantime.")


class ConflictingWriteError(PostServiceError):
    """Raised when the store rejects a write that raced another revision."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__("The post was changed by another request; please retry.")


class RelatedPostNotFoundError(PostServiceError):
    """Raised when a related-post id does not resolve to a post."""

    def __init__(self, post_id: int) -> None:
        self.post_id = post_id
        super().__init__(f'Post with id "{post_id}" was not found.')


class UniqueNameExhaustedError(PostServiceError):
    """Raised when no unused post name was found within the retry cap."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"Could not generate a unique post name after {attempts} attempts.")


class FetchError(PostServiceError):
    """Raised when remote content cannot be downloaded."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f'Could not download "{url}": {reason}')
