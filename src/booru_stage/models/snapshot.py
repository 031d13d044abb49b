# src/booru_stage/models/snapshot.py
"""Append-only audit records of committed mutations."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from booru_stage.db.session import Base
from booru_stage.db.time import utcnow


class SnapshotType(str, enum.Enum):
    """Kind of entity a snapshot describes."""

    POST = "post"
    TAG = "tag"


class SnapshotOperation(str, enum.Enum):
    """Mutation that produced a snapshot."""

    CREATE = "create"
    CHANGE = "change"
    DELETE = "delete"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Snapshot(Base):
    """Copy of an entity's state captured when a mutation was committed.

    Snapshots keep no reference to the live row: ``primary_key`` is a plain
    integer so the record outlives the entity it describes.
    """

    __tablename__ = "snapshot"
    __table_args__ = (Index("ix_snapshot_subject", "type", "primary_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    type: Mapped[SnapshotType] = mapped_column(
        Enum(SnapshotType, native_enum=False, length=16, values_callable=_enum_values),
        nullable=False,
    )
    primary_key: Mapped[int] = mapped_column(Integer, nullable=False)
    operation: Mapped[SnapshotOperation] = mapped_column(
        Enum(SnapshotOperation, native_enum=False, length=16, values_callable=_enum_values),
        nullable=False,
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="SET NULL"),
        nullable=True,
    )
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    data_difference: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
