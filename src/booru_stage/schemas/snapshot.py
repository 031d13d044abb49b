"""Snapshot (post history) schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from booru_stage.models.snapshot import SnapshotOperation, SnapshotType


class SnapshotResponse(BaseModel):
    """One audit record as returned by the history endpoint."""

    id: int
    time: datetime
    type: SnapshotType
    primary_key: int
    operation: SnapshotOperation
    user_id: int | None
    data: dict[str, Any]
    data_difference: dict[str, Any]

    model_config = ConfigDict(from_attributes=True)
