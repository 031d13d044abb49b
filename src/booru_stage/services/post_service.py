"""Create, edit, delete and feature posts.

Every public operation is one transaction: the body runs inside
``TransactionManager.commit`` (or ``rollback`` for reads), so any error raised
along the way leaves the store exactly as it was. Snapshots are written inside
the same transaction, after the store write they describe.
"""
from __future__ import annotations

import logging
import secrets
from collections.abc import Callable, Sequence
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from booru_stage.core.settings import Settings, settings
from booru_stage.db.time import as_utc, utcnow
from booru_stage.db.transaction import TransactionManager
from booru_stage.models.global_param import KEY_FEATURED_POST
from booru_stage.models.post import Post
from booru_stage.models.snapshot import Snapshot, SnapshotOperation, SnapshotType
from booru_stage.repositories.global_param_repo import GlobalParamRepository
from booru_stage.repositories.post_repo import PostRepository
from booru_stage.schemas.post import PostEditForm, UploadForm
from booru_stage.services.dedup import ChecksumIndex
from booru_stage.services.errors import (
    ConcurrentModificationError,
    ConflictingWriteError,
    NoContentSpecifiedError,
    NotFoundError,
    RelatedPostNotFoundError,
    UniqueNameExhaustedError,
)
from booru_stage.services.fetcher import Fetcher, HttpFetcher
from booru_stage.services.history import HistoryService
from booru_stage.services.identity import IdentityResolver
from booru_stage.services.ingest import ContentIngestor
from booru_stage.services.tags import TagService
from booru_stage.services.validation import FormValidator

logger = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = ["PostService", "build_post_service", "random_post_name"]


def random_post_name() -> str:
    """Return a fresh 40-character hex token."""
    return secrets.token_hex(20)


class PostService:
    """Orchestrates post revisions on top of the injected collaborators."""

    def __init__(
        self,
        *,
        transactions: TransactionManager,
        posts: PostRepository,
        global_params: GlobalParamRepository,
        ingestor: ContentIngestor,
        history: HistoryService,
        tags: TagService,
        identity: IdentityResolver,
        validator: FormValidator | None = None,
        config: Settings = settings,
        name_factory: Callable[[], str] = random_post_name,
    ) -> None:
        self._transactions = transactions
        self._posts = posts
        self._global_params = global_params
        self._ingestor = ingestor
        self._history = history
        self._tags = tags
        self._identity = identity
        self._validator = validator or FormValidator()
        self._config = config
        self._name_factory = name_factory

    # --- Reads ----------------------------------------------------------------------

    def get_by_name(self, name: str) -> Post:
        """Return the post called ``name``."""

        def _get() -> Post:
            post = self._posts.find_by_name(name)
            if post is None:
                raise NotFoundError(name)
            return post

        return self._transactions.rollback(_get)

    def get_by_name_or_id(self, name_or_id: str | int) -> Post:
        """Return a post by name, falling back to a numeric id."""

        def _get() -> Post:
            key = str(name_or_id)
            post = self._posts.find_by_name(key)
            if post is None and key.isdigit():
                post = self._posts.find_by_id(int(key))
            if post is None:
                raise NotFoundError(name_or_id)
            return post

        return self._transactions.rollback(_get)

    def get_featured(self) -> Post | None:
        """Return the featured post, or None if nothing (still existing) is featured."""

        def _get() -> Post | None:
            value = self._global_params.get(KEY_FEATURED_POST)
            if value is None or not value.isdigit():
                return None
            return self._posts.find_by_id(int(value))

        return self._transactions.rollback(_get)

    def get_history(self, post: Post) -> list[Snapshot]:
        """Return the post's snapshots, newest first."""
        post_id = post.id
        return self._transactions.rollback(
            lambda: self._history.find_for(SnapshotType.POST, post_id)
        )

    # --- Mutations ------------------------------------------------------------------

    def create_post(self, form: UploadForm) -> Post:
        """Store a new post built from an upload form.

        Raises:
            ValidationError: If the form is malformed.
            NoContentSpecifiedError: If neither content nor a URL was given.
            PostServiceError: Any ingestion failure (size, kind, duplicate, URL, fetch).
        """

        def _create() -> Post:
            self._validator.validate(form)

            now = utcnow()
            post = Post(upload_time=now, last_edit_time=now, feature_count=0)
            post.user = None if form.anonymous else self._identity.current_user()
            post.original_file_name = form.content_file_name
            post.name = self._unique_post_name()

            post.safety = form.safety
            post.source = form.source
            post.tags = self._tags.resolve_or_create(form.tags)
            self._ingest_content(post, form.content, form.url)

            saved = self._posts.save(post)
            self._history.record_post(saved, SnapshotOperation.CREATE)
            return saved

        post = self._commit(_create)
        logger.info("Created post %s (%s)", post.id, post.name)
        self._after_commit()
        return post

    def update_post(self, post: Post, form: PostEditForm) -> Post:
        """Apply a sparse edit to ``post``.

        Raises:
            ValidationError: If the form is malformed.
            ConcurrentModificationError: If ``form.seen_edit_time`` is stale.
            RelatedPostNotFoundError: If a related-post id does not exist.
            PostServiceError: Any failure re-ingesting new content.
        """

        def _update() -> Post:
            self._validator.validate(form)

            if as_utc(post.last_edit_time) != as_utc(form.seen_edit_time):
                raise ConcurrentModificationError(post.id)

            post.last_edit_time = utcnow()

            changes = form.changes()
            if "content" in changes:
                descriptor = self._ingestor.ingest_from_bytes(changes["content"], post_id=post.id)
                descriptor.apply(post)
            if "thumbnail" in changes:
                post.thumbnail_source_content = self._ingestor.ingest_custom_thumbnail(
                    changes["thumbnail"]
                )
            if "safety" in changes:
                post.safety = changes["safety"]
            if "source" in changes:
                post.source = changes["source"]
            if "tags" in changes:
                post.tags = self._tags.resolve_or_create(changes["tags"])
            if "relations" in changes:
                post.related_posts = self._resolve_relations(changes["relations"])

            saved = self._posts.save(post)
            self._history.record_post(saved, SnapshotOperation.CHANGE)
            return saved

        updated = self._commit(_update)
        logger.info("Updated post %s", updated.id)
        self._after_commit()
        return updated

    def delete_post(self, post: Post) -> None:
        """Record a final snapshot of ``post`` and remove it."""
        post_id = post.id

        def _delete() -> None:
            self._history.record_post(post, SnapshotOperation.DELETE)
            if self._global_params.get(KEY_FEATURED_POST) == str(post_id):
                self._global_params.set(KEY_FEATURED_POST, None)
            self._posts.delete_by_id(post_id)

        self._commit(_delete)
        logger.info("Deleted post %s", post_id)

    def feature_post(self, post: Post) -> Post:
        """Make ``post`` the featured post.

        The previously featured post, if different, gets a snapshot too because
        its featured flag flips.
        """

        def _feature() -> Post:
            previous = self.get_featured()

            now = utcnow()
            post.last_feature_time = now
            post.last_edit_time = now
            post.feature_count = (post.feature_count or 0) + 1
            self._posts.save(post)
            self._global_params.set(KEY_FEATURED_POST, post.id)

            if previous is not None and previous.id != post.id:
                self._history.record_post(previous, SnapshotOperation.CHANGE)
            self._history.record_post(post, SnapshotOperation.CHANGE)
            return post

        featured = self._commit(_feature)
        logger.info("Featured post %s", featured.id)
        return featured

    # --- Helpers --------------------------------------------------------------------

    def _ingest_content(self, post: Post, content: bytes | None, url: str | None) -> None:
        if url:
            descriptor = self._ingestor.ingest_from_url(url, post_id=post.id)
        elif content:
            descriptor = self._ingestor.ingest_from_bytes(content, post_id=post.id)
        else:
            raise NoContentSpecifiedError()
        descriptor.apply(post)

    def _resolve_relations(self, post_ids: Sequence[int]) -> list[Post]:
        wanted = list(dict.fromkeys(post_ids))
        found = self._posts.find_by_ids(wanted)
        for post_id in wanted:
            if post_id not in found:
                raise RelatedPostNotFoundError(post_id)
        return [found[post_id] for post_id in wanted]

    def _unique_post_name(self) -> str:
        attempts = max(1, self._config.post_name_max_attempts)
        for _ in range(attempts):
            name = self._name_factory()
            if self._posts.find_by_name(name) is None:
                return name
        raise UniqueNameExhaustedError(attempts)

    def _commit(self, func: Callable[[], T]) -> T:
        try:
            return self._transactions.commit(func)
        except IntegrityError as exc:
            # A concurrent writer claimed a unique name or checksum first.
            raise ConflictingWriteError(str(exc.orig)) from exc

    def _after_commit(self) -> None:
        # Tag cleanup is housekeeping; the post is already committed.
        try:
            self._tags.prune_unused()
            self._tags.export_json()
        except (SQLAlchemyError, OSError):
            logger.exception("Tag maintenance after commit failed")


def build_post_service(
    session: Session,
    *,
    identity: IdentityResolver,
    fetcher: Fetcher | None = None,
    config: Settings = settings,
    name_factory: Callable[[], str] = random_post_name,
) -> PostService:
    """Wire a ``PostService`` and its collaborators around one session."""
    transactions = TransactionManager(session)
    posts = PostRepository(session)
    global_params = GlobalParamRepository(session)
    ingestor = ContentIngestor(ChecksumIndex(posts), fetcher or HttpFetcher(config), config)
    return PostService(
        transactions=transactions,
        posts=posts,
        global_params=global_params,
        ingestor=ingestor,
        history=HistoryService(session, global_params, identity),
        tags=TagService(session, transactions, config),
        identity=identity,
        config=config,
        name_factory=name_factory,
    )
