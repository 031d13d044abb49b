"""Caller identity resolution."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from booru_stage.models.user import User

__all__ = ["IdentityResolver", "StaticIdentity"]


class IdentityResolver(Protocol):
    """Anything that can tell the services who is making the request."""

    def current_user(self) -> User | None: ...


@dataclass(frozen=True)
class StaticIdentity:
    """Identity resolved once per request, e.g. from a bearer token."""

    user: User | None = None

    def current_user(self) -> User | None:
        """Return the resolved user, or None for anonymous callers."""
        return self.user
