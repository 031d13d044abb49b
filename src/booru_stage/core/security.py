"""JWT helpers for identifying the caller behind a request."""
from __future__ import annotations

from datetime import timedelta

from jose import JWTError, jwt

from booru_stage.core.settings import Settings, settings
from booru_stage.db.time import utcnow


def create_access_token(user_id: int, config: Settings = settings) -> str:
    """Return a signed bearer token whose subject is ``user_id``."""
    expires = utcnow() + timedelta(minutes=config.access_token_expire_minutes)
    payload = {"sub": str(user_id), "exp": expires}
    return jwt.encode(payload, config.secret_key, algorithm=config.jwt_algorithm)


def decode_access_token(token: str, config: Settings = settings) -> int | None:
    """Return the user id carried by ``token`` or None if it is invalid."""
    try:
        payload = jwt.decode(token, config.secret_key, algorithms=[config.jwt_algorithm])
    except JWTError:
        return None
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return int(subject)
