# tests/conftest.py
from __future__ import annotations

import asyncio
import os
from collections.abc import Callable, Generator, Iterator, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from whalebyte_moderation.api.v1.dependencies import get_moderation_service_dep
from whalebyte_moderation.core.security import create_access_token
from whalebyte_moderation.db.session import Base
from whalebyte_moderation.main import app as fastapi_app
from whalebyte_moderation.models import ContentType
from whalebyte_moderation.services.classifier import ContentCheckResult, NullClassifier
from whalebyte_moderation.services.content_store import ContentRecord, SqlContentStore
from whalebyte_moderation.services.errors import ClassifierUnavailableError
from whalebyte_moderation.services.moderation import ModerationService
from whalebyte_moderation.services.resolution import ModerationThresholds

EPOCH = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced replacement for the service clock."""

    def __init__(self, now: datetime = EPOCH) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class StubClassifier:
    """Returns a canned result and records every call."""

    def __init__(self, result: ContentCheckResult) -> None:
        self.result = result
        self.calls: list[tuple[str, tuple[str, ...]]] = []

    async def check_content(self, text: str, media_refs: Sequence[str]) -> ContentCheckResult:
        self.calls.append((text, tuple(media_refs)))
        return self.result


class FailingClassifier:
    async def check_content(self, text: str, media_refs: Sequence[str]) -> ContentCheckResult:
        raise ClassifierUnavailableError("model offline")


class SlowClassifier:
    def __init__(self, delay: float) -> None:
        self.delay = delay

    async def check_content(self, text: str, media_refs: Sequence[str]) -> ContentCheckResult:
        await asyncio.sleep(self.delay)
        return ContentCheckResult(confidence=1.0)


@pytest.fixture()
def engine(tmp_path) -> Generator[Engine, None, None]:
    engine = create_engine(
        f"sqlite:///{tmp_path / 'moderation.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def content_store(session_factory: sessionmaker[Session]) -> SqlContentStore:
    return SqlContentStore(session_factory)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def thresholds() -> ModerationThresholds:
    return ModerationThresholds(
        min_votes_required=5,
        removal_threshold=0.6,
        ai_confidence_threshold=0.9,
        voting_period=timedelta(days=1),
    )


@pytest.fixture()
def make_service(
    session_factory: sessionmaker[Session],
    content_store: SqlContentStore,
    clock: FakeClock,
    thresholds: ModerationThresholds,
) -> Callable[..., ModerationService]:
    """Build a moderation service on the test database."""

    def _make(classifier: Any = None, **kwargs: Any) -> ModerationService:
        kwargs.setdefault("thresholds", thresholds)
        kwargs.setdefault("clock", clock)
        return ModerationService(
            session_factory,
            content_store,
            classifier or NullClassifier(),
            **kwargs,
        )

    return _make


@pytest.fixture()
def moderation_service(make_service: Callable[..., ModerationService]) -> ModerationService:
    return make_service(enable_ai_moderation=False)


@pytest.fixture()
def test_post(content_store: SqlContentStore) -> ContentRecord:
    return content_store.create_content(
        content_id="post-1",
        content_type=ContentType.POST,
        author_id="author-1",
        body="Look at my whale photos",
        media_refs=["ipfs://QmWhale"],
        sphere_id="sphere-1",
    )


@pytest.fixture()
def test_comment(content_store: SqlContentStore) -> ContentRecord:
    return content_store.create_content(
        content_id="comment-1",
        content_type=ContentType.COMMENT,
        author_id="author-2",
        body="Nice photos",
        sphere_id="sphere-1",
    )


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI, moderation_service: ModerationService) -> Iterator[TestClient]:
    app.dependency_overrides[get_moderation_service_dep] = lambda: moderation_service
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_moderation_service_dep, None)


@pytest.fixture()
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Return a factory producing bearer headers for a user id."""

    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers
