"""initial post schema

Revision ID: 5c1e0b7a9d42
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e0b7a9d42"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, posts, tags, snapshots and global params."""
    op.create_table(
        "user_account",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "tag",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("creation_time", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "post",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("upload_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_edit_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "safety",
            sa.Enum("safe", "sketchy", "unsafe", name="postsafety", native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column("source", sa.Text(), nullable=True),
        sa.Column(
            "content_type",
            sa.Enum(
                "image",
                "video",
                "flash",
                "remote_embed",
                name="mediakind",
                native_enum=False,
                length=16,
            ),
            nullable=False,
        ),
        sa.Column("content_mime_type", sa.String(length=100), nullable=True),
        sa.Column("content_checksum", sa.String(length=64), nullable=False),
        sa.Column("content", sa.LargeBinary(), nullable=True),
        sa.Column("thumbnail_source_content", sa.LargeBinary(), nullable=True),
        sa.Column("original_file_name", sa.Text(), nullable=True),
        sa.Column("original_file_size", sa.Integer(), nullable=True),
        sa.Column("image_width", sa.Integer(), nullable=True),
        sa.Column("image_height", sa.Integer(), nullable=True),
        sa.Column("feature_count", sa.Integer(), nullable=False),
        sa.Column("last_feature_time", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.UniqueConstraint("content_checksum"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "post_tag",
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("tag_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tag.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("post_id", "tag_id"),
    )
    op.create_table(
        "post_relation",
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("related_post_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["related_post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("post_id", "related_post_id"),
    )
    op.create_table(
        "snapshot",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("time", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "type",
            sa.Enum("post", "tag", name="snapshottype", native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column("primary_key", sa.Integer(), nullable=False),
        sa.Column(
            "operation",
            sa.Enum(
                "create",
                "change",
                "delete",
                name="snapshotoperation",
                native_enum=False,
                length=16,
            ),
            nullable=False,
        ),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("data_difference", sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_snapshot_subject", "snapshot", ["type", "primary_key"], unique=False)
    op.create_table(
        "global_param",
        sa.Column("key", sa.String(length=32), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_table("global_param")
    op.drop_index("ix_snapshot_subject", table_name="snapshot")
    op.drop_table("snapshot")
    op.drop_table("post_relation")
    op.drop_table("post_tag")
    op.drop_table("post")
    op.drop_table("tag")
    op.drop_table("user_account")
