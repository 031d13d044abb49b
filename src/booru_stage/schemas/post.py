# src/booru_stage/schemas/post.py
"""Post-related Pydantic schemas.

``UploadForm`` and ``PostEditForm`` are what the services consume and carry
raw bytes. The ``*Request`` models are their JSON counterparts, with binary
fields transported as base64.
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    Base64Bytes,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    model_validator,
)

from booru_stage.models.post import MediaKind, PostSafety

TagName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=64, pattern=r"^[^\s,]+$"),
]

MAX_SOURCE_LENGTH = 200
MAX_FILE_NAME_LENGTH = 200
MAX_URL_LENGTH = 2000


class UploadForm(BaseModel):
    """Submission creating a new post from bytes or a remote URL."""

    content: bytes | None = Field(None, description="Raw content bytes")
    content_file_name: str | None = Field(None, max_length=MAX_FILE_NAME_LENGTH)
    url: str | None = Field(None, max_length=MAX_URL_LENGTH, description="Remote content URL")
    safety: PostSafety = PostSafety.SAFE
    source: str | None = Field(None, max_length=MAX_SOURCE_LENGTH)
    tags: list[TagName] = Field(default_factory=list)
    anonymous: bool = False


class PostEditForm(BaseModel):
    """Sparse edit of an existing post.

    Only fields that were supplied with a value are applied; see ``changes``.
    """

    seen_edit_time: datetime = Field(..., description="last_edit_time the editor started from")
    content: bytes | None = None
    thumbnail: bytes | None = None
    safety: PostSafety | None = None
    source: str | None = Field(None, max_length=MAX_SOURCE_LENGTH)
    tags: list[TagName] | None = None
    relations: list[int] | None = None

    def changes(self) -> dict[str, Any]:
        """Return the supplied fields that carry a value, keyed by field name.

        A field missing from the result must be left untouched. An explicit
        ``None`` also means "unchanged".
        """
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "seen_edit_time" and getattr(self, name) is not None
        }


class PostUploadRequest(BaseModel):
    """JSON body for creating a post."""

    content: Base64Bytes | None = Field(None, description="Base64-encoded content")
    content_file_name: str | None = Field(None, max_length=MAX_FILE_NAME_LENGTH)
    url: str | None = Field(None, max_length=MAX_URL_LENGTH)
    safety: PostSafety = PostSafety.SAFE
    source: str | None = Field(None, max_length=MAX_SOURCE_LENGTH)
    tags: list[TagName] = Field(default_factory=list)
    anonymous: bool = False

    def to_form(self) -> UploadForm:
        """Build the service form from this request."""
        return UploadForm(
            content=self.content,
            content_file_name=self.content_file_name,
            url=self.url,
            safety=self.safety,
            source=self.source,
            tags=self.tags,
            anonymous=self.anonymous,
        )


class PostEditRequest(BaseModel):
    """JSON body for editing a post; omitted fields stay unchanged."""

    seen_edit_time: datetime
    content: Base64Bytes | None = None
    thumbnail: Base64Bytes | None = None
    safety: PostSafety | None = None
    source: str | None = Field(None, max_length=MAX_SOURCE_LENGTH)
    tags: list[TagName] | None = None
    relations: list[int] | None = None

    def to_form(self) -> PostEditForm:
        """Build the service form, preserving which fields were supplied."""
        supplied = {name: getattr(self, name) for name in self.model_fields_set}
        supplied["seen_edit_time"] = self.seen_edit_time
        return PostEditForm(**supplied)


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    name: str
    user_id: int | None
    safety: PostSafety
    source: str | None
    content_type: MediaKind
    content_mime_type: str | None
    content_checksum: str
    original_file_name: str | None
    original_file_size: int | None
    image_width: int | None
    image_height: int | None
    upload_time: datetime
    last_edit_time: datetime
    feature_count: int
    last_feature_time: datetime | None
    tags: list[str]
    relations: list[int]
    has_custom_thumbnail: bool

    @model_validator(mode="before")
    @classmethod
    def _flatten_associations(cls, data: object) -> object:
        if isinstance(data, dict):
            return data
        extracted: dict[str, object | None] = {}
        for field_name in cls.model_fields:
            if field_name in {"tags", "relations"}:
                continue
            extracted[field_name] = getattr(data, field_name, None)
        extracted["tags"] = list(getattr(data, "tag_names", []))
        extracted["relations"] = list(getattr(data, "related_post_ids", []))
        return extracted

    model_config = ConfigDict(from_attributes=True)
