"""Tag resolution, cleanup and export."""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from sqlalchemy import delete, exists, func, select
from sqlalchemy.orm import Session

from booru_stage.core.settings import Settings, settings
from booru_stage.db.transaction import TransactionManager
from booru_stage.models.post import post_tag
from booru_stage.models.tag import Tag

logger = logging.getLogger(__name__)

__all__ = ["TagService", "normalize_tag_names"]


def normalize_tag_names(names: Iterable[str]) -> list[str]:
    """Strip names, drop empties and case-insensitive repeats; keep first spelling."""
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        cleaned = name.strip()
        if not cleaned or cleaned.lower() in seen:
            continue
        seen.add(cleaned.lower())
        result.append(cleaned)
    return result


class TagService:
    """Create tags on demand and keep the tag table and its export tidy."""

    def __init__(
        self,
        session: Session,
        transactions: TransactionManager,
        config: Settings = settings,
    ) -> None:
        self.session = session
        self._transactions = transactions
        self._export_path = Path(config.tags_export_path)

    def resolve_or_create(self, names: Iterable[str]) -> list[Tag]:
        """Return tags for ``names``, creating the ones that do not exist yet.

        Existing tags are matched case-insensitively and keep their stored spelling.
        """
        wanted = normalize_tag_names(names)
        if not wanted:
            return []
        result = self.session.execute(
            select(Tag).where(func.lower(Tag.name).in_([name.lower() for name in wanted]))
        )
        existing = {tag.name.lower(): tag for tag in result.scalars()}

        tags: list[Tag] = []
        for name in wanted:
            tag = existing.get(name.lower())
            if tag is None:
                tag = Tag(name=name)
                self.session.add(tag)
                existing[name.lower()] = tag
            tags.append(tag)
        self.session.flush()
        return tags

    def prune_unused(self) -> int:
        """Delete tags no post uses any more and return how many went."""

        def _prune() -> int:
            in_use = exists().where(post_tag.c.tag_id == Tag.id)
            result = self.session.execute(
                delete(Tag).where(~in_use).execution_options(synchronize_session=False)
            )
            return result.rowcount or 0

        removed = self._transactions.commit(_prune)
        if removed:
            logger.info("Removed %d unused tags", removed)
        return removed

    def export_json(self) -> Path:
        """Write every tag with its usage count to the export file."""

        def _usages() -> list[dict[str, object]]:
            rows = self.session.execute(
                select(Tag.name, func.count(post_tag.c.post_id))
                .outerjoin(post_tag, post_tag.c.tag_id == Tag.id)
                .group_by(Tag.id, Tag.name)
                .order_by(Tag.name)
            )
            return [{"name": name, "usages": usages} for name, usages in rows]

        payload = self._transactions.rollback(_usages)
        self._export_path.parent.mkdir(parents=True, exist_ok=True)
        self._export_path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        return self._export_path
