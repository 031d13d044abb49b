"""Tests for tag resolution, pruning and export."""

import json

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from booru_stage.core.settings import Settings
from booru_stage.db.transaction import TransactionManager
from booru_stage.models import Tag
from booru_stage.schemas.post import UploadForm
from booru_stage.services.tags import TagService, normalize_tag_names


@pytest.fixture()
def tags(db_session: Session, test_settings: Settings) -> TagService:
    return TagService(db_session, TransactionManager(db_session), test_settings)


def test_normalize_drops_blanks_and_case_repeats() -> None:
    assert normalize_tag_names([" Cat ", "cat", "", "dog", "DOG", "bird"]) == ["Cat", "dog", "bird"]


def test_resolve_reuses_existing_spelling(tags: TagService, db_session: Session) -> None:
    created = tags.resolve_or_create(["Landscape"])
    db_session.commit()

    resolved = tags.resolve_or_create(["landscape", "night"])

    assert [tag.name for tag in resolved] == ["Landscape", "night"]
    assert resolved[0].id == created[0].id


def test_resolve_nothing(tags: TagService) -> None:
    assert tags.resolve_or_create([]) == []


def test_prune_unused(tags: TagService, service, db_session: Session, jpeg_bytes) -> None:
    service.create_post(UploadForm(content=jpeg_bytes, tags=["used"]))
    tags.resolve_or_create(["stray", "lonely"])
    db_session.commit()

    assert tags.prune_unused() == 2
    assert db_session.scalars(select(Tag.name)).all() == ["used"]


def test_export_counts_usages(tags: TagService, service, make_jpeg, test_settings: Settings) -> None:
    service.create_post(UploadForm(content=make_jpeg(1), tags=["shared", "one"]))
    service.create_post(UploadForm(content=make_jpeg(2), tags=["shared"]))

    path = tags.export_json()

    assert str(path) == test_settings.tags_export_path
    assert json.loads(path.read_text(encoding="utf-8")) == [
        {"name": "one", "usages": 1},
        {"name": "shared", "usages": 2},
    ]
