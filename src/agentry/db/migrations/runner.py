"""Simple SQL migration runner."""

import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from agentry.db.connection import get_conn

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent


def _statements(script: str) -> Iterator[str]:
    buffer = ""
    for line in script.splitlines(keepends=True):
        buffer += line
        if sqlite3.complete_statement(buffer):
            yield buffer.strip()
            buffer = ""
    if buffer.strip():
        yield buffer.strip()


def _apply_file(conn: sqlite3.Connection, file: Path) -> bool:
    # executescript() would commit implicitly and drop the write lock, so each
    # statement runs inside one IMMEDIATE transaction instead.
    conn.execute("BEGIN IMMEDIATE")
    try:
        done = conn.execute(
            "SELECT 1 FROM schema_migrations WHERE name=?", (file.name,)
        ).fetchone()
        if done is None:
            for statement in _statements(file.read_text()):
                conn.execute(statement)
            conn.execute(
                "INSERT INTO schema_migrations(name, applied_at) VALUES(?, datetime('now'))",
                (file.name,),
            )
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise
    return done is None


def apply_migrations(conn: sqlite3.Connection) -> list[str]:
    """Apply pending ``*.sql`` files in name order; return the names applied.

    Safe to run from several processes at once: a file already recorded by
    another process when the write lock is taken is skipped.
    """
    conn.execute(
        "CREATE TABLE IF NOT EXISTS schema_migrations("
        "name TEXT PRIMARY KEY, "
        "applied_at TEXT NOT NULL)"
    )
    applied = {row[0] for row in conn.execute("SELECT name FROM schema_migrations").fetchall()}
    newly_applied: list[str] = []
    for file in sorted(MIGRATIONS_DIR.glob("*.sql")):
        if file.name in applied or not _apply_file(conn, file):
            continue
        logger.info("Applied migration %s", file.name)
        newly_applied.append(file.name)
    return newly_applied


def run_migrations(db_path: str | None = None) -> list[str]:
    with get_conn(db_path) as conn:
        return apply_migrations(conn)


if __name__ == "__main__":
    run_migrations()
