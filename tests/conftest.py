import sqlite3
from collections.abc import Iterator
from pathlib import Path

import pytest

from agentry.agents.loader import _loader_for_root
from agentry.config import get_settings
from agentry.db.connection import get_conn
from agentry.db.migrations.runner import run_migrations
from agentry.db.queries import create_user


@pytest.fixture(autouse=True)
def test_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("APP_DB", str(tmp_path / "test.db"))
    monkeypatch.setenv("AGENTS_ROOT", str(tmp_path / "agents"))
    monkeypatch.setenv("API_KEY_PREFIX", "ck_")
    get_settings.cache_clear()
    _loader_for_root.cache_clear()
    run_migrations()
    yield
    get_settings.cache_clear()
    _loader_for_root.cache_clear()


@pytest.fixture
def agents_root(tmp_path: Path) -> Path:
    root = tmp_path / "agents"
    root.mkdir(exist_ok=True)
    return root


@pytest.fixture
def conn() -> Iterator[sqlite3.Connection]:
    with get_conn() as connection:
        yield connection


@pytest.fixture
def owner_id(conn: sqlite3.Connection) -> int:
    return int(str(create_user(conn, "alice", "hash")["id"]))


@pytest.fixture
def other_owner_id(conn: sqlite3.Connection) -> int:
    return int(str(create_user(conn, "bob", "hash")["id"]))
