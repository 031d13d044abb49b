"""Recompute derived, store-wide counters."""
from __future__ import annotations

import logging

from booru_stage.db.transaction import TransactionManager
from booru_stage.models.global_param import KEY_POST_COUNT, KEY_POST_SIZE
from booru_stage.repositories.global_param_repo import GlobalParamRepository
from booru_stage.repositories.post_repo import PostRepository

logger = logging.getLogger(__name__)

__all__ = ["GlobalCounterUpdater"]


class GlobalCounterUpdater:
    """Overwrite the post count and total size params from store aggregates.

    Runs only when called; creating or deleting posts does not trigger it.
    Both values are read fresh from the store, so concurrent runs are harmless.
    """

    def __init__(
        self,
        transactions: TransactionManager,
        posts: PostRepository,
        global_params: GlobalParamRepository,
    ) -> None:
        self._transactions = transactions
        self._posts = posts
        self._global_params = global_params

    def recompute(self) -> tuple[int, int]:
        """Store and return ``(post_count, total_size)``."""

        def _recompute() -> tuple[int, int]:
            count = self._posts.get_count()
            size = self._posts.get_total_content_size()
            self._global_params.set(KEY_POST_COUNT, count)
            self._global_params.set(KEY_POST_SIZE, size)
            return count, size

        count, size = self._transactions.commit(_recompute)
        logger.info("Recomputed globals: %d posts, %d bytes", count, size)
        return count, size
