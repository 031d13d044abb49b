"""
Pydantic schemas for service forms and API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .post import (
    PostEditForm,
    PostEditRequest,
    PostResponse,
    PostUploadRequest,
    UploadForm,
)
from .snapshot import SnapshotResponse
from .system import GlobalsResponse

__all__ = [
    "PostEditForm", "PostEditRequest", "PostResponse", "PostUploadRequest", "UploadForm",
    "SnapshotResponse",
    "GlobalsResponse",
]
