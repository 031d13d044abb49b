# tests/conftest.py
from __future__ import annotations

import io
import logging
import os
from collections.abc import Callable, Generator, Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PYTEST_RUNNING", "true")

from booru_stage.api.v1.dependencies import get_fetcher, get_settings  # noqa: E402
from booru_stage.core.security import create_access_token  # noqa: E402
from booru_stage.core.settings import Settings, settings  # noqa: E402
from booru_stage.db.session import Base, enable_sqlite_foreign_keys  # noqa: E402
from booru_stage.db.session import get_db as app_get_session  # noqa: E402
from booru_stage.main import app as fastapi_app  # noqa: E402
from booru_stage.models import User  # noqa: E402
from booru_stage.services.errors import FetchError  # noqa: E402
from booru_stage.services.identity import StaticIdentity  # noqa: E402
from booru_stage.services.post_service import PostService, build_post_service  # noqa: E402

TEST_DB_URL = "sqlite://"
JPEG_MAGIC = b"\xff\xd8\xff\xe0"


class FakeFetcher:
    """Serve canned bodies by URL and remember what was requested."""

    def __init__(self) -> None:
        self.responses: dict[str, bytes] = {}
        self.requested: list[str] = []

    def download(self, url: str) -> bytes:
        self.requested.append(url)
        if url not in self.responses:
            raise FetchError(url, "HTTP 404")
        return self.responses[url]


def jpeg_stub(seed: int = 0, size: int = 10) -> bytes:
    """Return ``size`` bytes that sniff as JPEG and differ per ``seed``."""
    body = seed.to_bytes(4, "big") * size
    return (JPEG_MAGIC + body)[:size]


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    """Settings with small limits and a temporary tag export path."""
    return settings.model_copy(
        update={
            "max_post_size": 4096,
            "max_custom_thumbnail_size": 256,
            "post_name_max_attempts": 5,
            "tags_export_path": str(tmp_path / "tags.json"),
            "logs_path": None,
        }
    )


@pytest.fixture()
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a persisted uploader."""
    user = User(name="uploader")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def make_service(
    db_session: Session,
    fetcher: FakeFetcher,
    test_settings: Settings,
) -> Callable[..., PostService]:
    """Return a factory building services for a given caller."""

    def _make(user: User | None = None, **kwargs: object) -> PostService:
        return build_post_service(
            db_session,
            identity=StaticIdentity(user),
            fetcher=fetcher,
            config=kwargs.pop("config", test_settings),
            **kwargs,
        )

    return _make


@pytest.fixture()
def service(make_service: Callable[..., PostService], test_user: User) -> PostService:
    return make_service(test_user)


@pytest.fixture()
def jpeg_bytes() -> bytes:
    return jpeg_stub()


@pytest.fixture()
def make_jpeg() -> Callable[..., bytes]:
    return jpeg_stub


@pytest.fixture()
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (3, 2), color=(200, 10, 10)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture()
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(
    app: FastAPI,
    db_session: Session,
    fetcher: FakeFetcher,
    test_settings: Settings,
) -> Iterator[TestClient]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_fetcher] = lambda: fetcher
    app.dependency_overrides[get_settings] = lambda: test_settings
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the test user."""
    token = create_access_token(test_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def reset_app_logger() -> Iterator[None]:
    """Undo handlers installed by application startup between tests."""
    yield
    logger = logging.getLogger("booru_stage")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        target = getattr(handler, "target", None)
        handler.close()
        if target is not None:
            target.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
