"""Append-only history of post mutations."""
from __future__ import annotations

import copy
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from booru_stage.db.time import utcnow
from booru_stage.models.global_param import KEY_FEATURED_POST
from booru_stage.models.post import Post
from booru_stage.models.snapshot import Snapshot, SnapshotOperation, SnapshotType
from booru_stage.repositories.global_param_repo import GlobalParamRepository
from booru_stage.services.identity import IdentityResolver

logger = logging.getLogger(__name__)

__all__ = ["HistoryService", "snapshot_difference"]


def snapshot_difference(new: dict[str, Any], old: dict[str, Any]) -> dict[str, list[list[Any]]]:
    """Return what changed between two captured states.

    Lists are compared element by element; any other value is treated as a
    whole, so a changed scalar shows up once under ``-`` and once under ``+``.
    """
    added: list[list[Any]] = []
    removed: list[list[Any]] = []
    for key in sorted(set(new) | set(old)):
        new_value = new.get(key)
        old_value = old.get(key)
        if isinstance(new_value, list) or isinstance(old_value, list):
            new_items = new_value or []
            old_items = old_value or []
            added.extend([key, item] for item in new_items if item not in old_items)
            removed.extend([key, item] for item in old_items if item not in new_items)
        elif new_value != old_value:
            if key in new:
                added.append([key, new_value])
            if key in old:
                removed.append([key, old_value])
    return {"+": added, "-": removed}


class HistoryService:
    """Record and read snapshots."""

    def __init__(
        self,
        session: Session,
        global_params: GlobalParamRepository,
        identity: IdentityResolver,
    ) -> None:
        self.session = session
        self._global_params = global_params
        self._identity = identity

    def post_state(self, post: Post) -> dict[str, Any]:
        """Return a detached copy of the post fields tracked in history."""
        featured_id = self._global_params.get(KEY_FEATURED_POST)
        return {
            "name": post.name,
            "safety": post.safety.value if post.safety is not None else None,
            "source": post.source,
            "contentType": post.content_type.value if post.content_type is not None else None,
            "contentChecksum": post.content_checksum,
            "featureCount": post.feature_count or 0,
            "featured": featured_id is not None and featured_id == str(post.id),
            "tags": sorted(post.tag_names),
            "relations": post.related_post_ids,
        }

    def record(
        self,
        subject_id: int,
        subject_type: SnapshotType,
        operation: SnapshotOperation,
        state: dict[str, Any],
    ) -> Snapshot:
        """Append a snapshot of ``state`` for the given subject."""
        previous = self._latest(subject_type, subject_id)
        previous_state = previous.data if previous is not None else {}
        if operation == SnapshotOperation.DELETE:
            difference = snapshot_difference({}, previous_state or state)
        else:
            difference = snapshot_difference(state, previous_state)

        user = self._identity.current_user()
        snapshot = Snapshot(
            time=utcnow(),
            type=subject_type,
            primary_key=subject_id,
            operation=operation,
            user_id=user.id if user is not None else None,
            data=copy.deepcopy(state),
            data_difference=difference,
        )
        self.session.add(snapshot)
        self.session.flush()
        logger.debug("Recorded %s snapshot for %s %s", operation.value, subject_type.value, subject_id)
        return snapshot

    def record_post(self, post: Post, operation: SnapshotOperation) -> Snapshot:
        """Capture ``post`` as it is now."""
        return self.record(post.id, SnapshotType.POST, operation, self.post_state(post))

    def find_for(self, subject_type: SnapshotType, subject_id: int) -> list[Snapshot]:
        """Return every snapshot of a subject, newest first."""
        result = self.session.execute(
            select(Snapshot)
            .where(Snapshot.type == subject_type, Snapshot.primary_key == subject_id)
            .order_by(Snapshot.id.desc())
        )
        return list(result.scalars())

    def _latest(self, subject_type: SnapshotType, subject_id: int) -> Snapshot | None:
        result = self.session.execute(
            select(Snapshot)
            .where(Snapshot.type == subject_type, Snapshot.primary_key == subject_id)
            .order_by(Snapshot.id.desc())
            .limit(1)
        )
        return result.scalars().first()
