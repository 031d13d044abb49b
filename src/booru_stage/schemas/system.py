"""Schemas for system-wide values."""
from __future__ import annotations

from pydantic import BaseModel, Field


class GlobalsResponse(BaseModel):
    """Derived counters and the featured post pointer."""

    featured_post_id: int | None = Field(None, description="Id of the featured post")
    post_count: int | None = Field(None, description="Number of posts at last recompute")
    post_size: int | None = Field(None, description="Stored bytes at last recompute")
