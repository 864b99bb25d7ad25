"""User account query helpers used by routes and the CLI."""

import sqlite3
from datetime import UTC, datetime


def now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _user_row(row: sqlite3.Row | None) -> dict[str, object] | None:
    if row is None:
        return None
    return {
        "id": int(row["id"]),
        "username": str(row["username"]),
        "created_at": str(row["created_at"]),
        "last_login": row["last_login"],
    }


def has_users(conn: sqlite3.Connection) -> bool:
    row = conn.execute("SELECT COUNT(*) AS cnt FROM users").fetchone()
    return row is not None and int(row["cnt"]) > 0


def create_user(conn: sqlite3.Connection, username: str, password_hash: str) -> dict[str, object]:
    cursor = conn.execute(
        "INSERT INTO users(username, password_hash, created_at) VALUES(?,?,?)",
        (username, password_hash, now_iso()),
    )
    return {"id": int(cursor.lastrowid or 0), "username": username}


def get_user_by_username(conn: sqlite3.Connection, username: str) -> dict[str, object] | None:
    row = conn.execute(
        "SELECT id, username, password_hash, created_at, last_login FROM users "
        "WHERE username=? AND is_active=1",
        (username,),
    ).fetchone()
    user = _user_row(row)
    if user is not None and row is not None:
        user["password_hash"] = str(row["password_hash"])
    return user


def get_user_by_id(conn: sqlite3.Connection, user_id: int) -> dict[str, object] | None:
    row = conn.execute(
        "SELECT id, username, created_at, last_login FROM users WHERE id=? AND is_active=1",
        (user_id,),
    ).fetchone()
    return _user_row(row)


def get_first_user(conn: sqlite3.Connection) -> dict[str, object] | None:
    row = conn.execute(
        "SELECT id, username, created_at, last_login FROM users "
        "WHERE is_active=1 ORDER BY id LIMIT 1"
    ).fetchone()
    return _user_row(row)


def update_last_login(conn: sqlite3.Connection, user_id: int) -> None:
    conn.execute("UPDATE users SET last_login=? WHERE id=?", (now_iso(), user_id))


def update_git_config(
    conn: sqlite3.Connection, user_id: int, git_name: str, git_email: str
) -> None:
    conn.execute(
        "UPDATE users SET git_name=?, git_email=? WHERE id=?",
        (git_name, git_email, user_id),
    )


def get_git_config(conn: sqlite3.Connection, user_id: int) -> dict[str, str | None] | None:
    row = conn.execute("SELECT git_name, git_email FROM users WHERE id=?", (user_id,)).fetchone()
    if row is None:
        return None
    return {"git_name": row["git_name"], "git_email": row["git_email"]}


def complete_onboarding(conn: sqlite3.Connection, user_id: int) -> None:
    conn.execute("UPDATE users SET has_completed_onboarding=1 WHERE id=?", (user_id,))


def has_completed_onboarding(conn: sqlite3.Connection, user_id: int) -> bool:
    row = conn.execute(
        "SELECT has_completed_onboarding FROM users WHERE id=?", (user_id,)
    ).fetchone()
    return row is not None and int(row["has_completed_onboarding"]) == 1
