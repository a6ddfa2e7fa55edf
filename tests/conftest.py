"""Shared pytest fixtures for uniqctl tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from tests.models import Base, Post, Unmapped, User
from uniqctl.infrastructure.database.engine import create_db_engine
from uniqctl.infrastructure.store import SqlRecordStore

RULES_TOML = """\
[database]
url = "{url}"

[rules.user_email]
record_type = "users"
fields = ["email"]

[rules.user_email_name]
record_type = "users"
fields = ["email", "name"]
error_path = "name"

[rules.post_slug]
record_type = "posts"
fields = ["slug", "users"]
"""


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'app.db'}"


@pytest.fixture
def db_engine(db_url: str) -> Iterator[Engine]:
    """SQLite engine with the test tables created."""
    engine = create_db_engine(db_url)
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def store(db_engine: Engine) -> Iterator[SqlRecordStore]:
    """Store with explicitly registered record types."""
    s = SqlRecordStore(
        db_engine,
        types={"users": User, "posts": Post, "unmapped": Unmapped},
    )
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def workspace(tmp_path: Path, db_engine: Engine, db_url: str) -> Path:
    """Directory with a uniqctl.toml pointing at the test database."""
    (tmp_path / "uniqctl.toml").write_text(RULES_TOML.format(url=db_url), encoding="utf-8")
    return tmp_path


@pytest.fixture
def _isolated_workspace(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the workspace so the CLI discovers its uniqctl.toml."""
    monkeypatch.delenv("UNIQCTL_CONFIG", raising=False)
    monkeypatch.chdir(workspace)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def add_user(store: SqlRecordStore, email: str | None, name: str | None = None) -> User:
    """Persist a user and return it (attached to the store's session)."""
    user = User(email=email, name=name)
    store.session.add(user)
    store.session.commit()
    return user


def add_post(store: SqlRecordStore, slug: str, author: User | None) -> Post:
    """Persist a post and return it."""
    post = Post(slug=slug, author=author)
    store.session.add(post)
    store.session.commit()
    return post
