"""Transaction boundaries over a SQLAlchemy session.

Every public service operation runs its body through one of the two
boundaries below. ``commit`` persists everything the body wrote or nothing at
all; ``rollback`` is for reads and never persists, whatever the body did.

Boundaries nest: an inner ``commit`` or ``rollback`` joins the outermost one,
so read helpers can be reused inside a mutating operation without discarding
its pending writes.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.orm import Session

T = TypeVar("T")

__all__ = ["TransactionManager"]


class TransactionManager:
    """Run callables inside commit or rollback boundaries on one session."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self._depth = 0

    @property
    def active(self) -> bool:
        """Return True while a boundary is open."""
        return self._depth > 0

    def commit(self, func: Callable[[], T]) -> T:
        """Run ``func`` and commit its writes, rolling back if it raises."""
        if self.active:
            return self._joined(func)
        self._depth += 1
        try:
            result = func()
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._depth -= 1
        return result

    def rollback(self, func: Callable[[], T]) -> T:
        """Run ``func`` and discard anything it wrote."""
        if self.active:
            return self._joined(func)
        self._depth += 1
        try:
            return func()
        finally:
            self._depth -= 1
            self.session.rollback()

    def _joined(self, func: Callable[[], T]) -> T:
        self._depth += 1
        try:
            return func()
        finally:
            self._depth -= 1
