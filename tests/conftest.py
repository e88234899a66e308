# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from threadline.core import security
from threadline.core.claims import Actor, ClaimVerifier
from threadline.core.enums import ContentStatus, Role, UserStatus
from threadline.core.settings import settings
from threadline.db.session import Base
from threadline.db.session import get_db as app_get_session
from threadline.main import app as fastapi_app
from threadline.models import Category, Comment, Post, User
from threadline.services.mailer import LogMailer, get_mailer
from threadline.services.rate_limit import general_limiter, login_limiter

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "Secret-pass1"

_USER_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    # Service commits release savepoints; the outer transaction is rolled back.
    session = Session(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        session.close()
        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits escaped.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def mailer() -> LogMailer:
    return LogMailer()


@pytest.fixture(autouse=True)
def override_dependencies(app: FastAPI, db_session: Session, mailer: LogMailer) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_mailer] = lambda: mailer
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_mailer, None)


@pytest.fixture(autouse=True)
def no_rate_limits(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Disable throttling unless a test turns it back on."""
    monkeypatch.setattr(settings, "rate_limit_enabled", False)
    general_limiter.reset()
    login_limiter.reset()
    yield
    general_limiter.reset()
    login_limiter.reset()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture(scope="session")
def verifier() -> ClaimVerifier:
    return ClaimVerifier.from_settings()


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users with ``TEST_PASSWORD``."""
    password_hash = security.hash_password(TEST_PASSWORD)

    def _make(
        login: str | None = None,
        *,
        role: Role = Role.USER,
        status: UserStatus = UserStatus.ACTIVE,
    ) -> User:
        n = next(_USER_COUNTER)
        login = login or f"user{n}"
        user = User(
            login=login,
            email=f"{login}@example.com",
            full_name=f"Test User {n}",
            password_hash=password_hash,
            role=role,
            status=status,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    return make_user("alice")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    return make_user("bob")


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    return make_user("root", role=Role.ADMIN)


def actor_for(user: User) -> Actor:
    return Actor(id=user.id, role=user.role)


def headers_for(verifier: ClaimVerifier, user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {verifier.issue(user.id, user.role)}"}


@pytest.fixture()
def auth_headers(verifier: ClaimVerifier, test_user: User) -> dict[str, str]:
    return headers_for(verifier, test_user)


@pytest.fixture()
def other_headers(verifier: ClaimVerifier, other_user: User) -> dict[str, str]:
    return headers_for(verifier, other_user)


@pytest.fixture()
def admin_headers(verifier: ClaimVerifier, admin_user: User) -> dict[str, str]:
    return headers_for(verifier, admin_user)


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    def _make(
        author: User,
        *,
        title: str = "Hello",
        content: str = "First post",
        status: ContentStatus = ContentStatus.ACTIVE,
    ) -> Post:
        post = Post(author_id=author.id, title=title, content=content, status=status)
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _make


@pytest.fixture()
def test_post(make_post: Callable[..., Post], test_user: User) -> Post:
    return make_post(test_user)


@pytest.fixture()
def make_comment(db_session: Session) -> Callable[..., Comment]:
    def _make(
        author: User,
        post: Post,
        *,
        parent: Comment | None = None,
        content: str = "A comment",
        status: ContentStatus = ContentStatus.ACTIVE,
    ) -> Comment:
        comment = Comment(
            post_id=post.id,
            parent_comment_id=parent.id if parent else None,
            author_id=author.id,
            content=content,
            status=status,
        )
        db_session.add(comment)
        db_session.commit()
        db_session.refresh(comment)
        return comment

    return _make


@pytest.fixture()
def category(db_session: Session) -> Category:
    category = Category(title="News", description="What happened")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category
