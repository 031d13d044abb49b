"""Shared API dependencies for identity and service wiring."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from booru_stage.core.security import decode_access_token
from booru_stage.core.settings import Settings, settings
from booru_stage.db.session import get_db
from booru_stage.models import User
from booru_stage.services.fetcher import Fetcher, HttpFetcher
from booru_stage.services.identity import StaticIdentity
from booru_stage.services.post_service import PostService, build_post_service

# Bearer tokens are optional: requests without one act anonymously.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> StaticIdentity:
    """Resolve the caller from an optional JWT bearer token.

    Raises:
        HTTPException: If a token is present but invalid or names an unknown user.
    """
    if credentials is None:
        return StaticIdentity()
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return StaticIdentity(user)


def get_settings() -> Settings:
    """Return the active application settings."""
    return settings


@lru_cache(maxsize=1)
def get_fetcher() -> Fetcher:
    """Return the shared outbound fetcher."""
    return HttpFetcher(settings)


IdentityDep = Annotated[StaticIdentity, Depends(get_identity)]
FetcherDep = Annotated[Fetcher, Depends(get_fetcher)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_post_service(
    db: SessionDep,
    identity: IdentityDep,
    fetcher: FetcherDep,
    config: SettingsDep,
) -> PostService:
    """Build a post service bound to this request's session and caller."""
    return build_post_service(db, identity=identity, fetcher=fetcher, config=config)


PostServiceDep = Annotated[PostService, Depends(get_post_service)]
