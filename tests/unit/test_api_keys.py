import re
import sqlite3

import pytest

from agentry.auth.api_keys import ApiKeyManager
from agentry.errors import ValidationError


def test_generate_uses_prefix_and_256_bits_of_hex(conn: sqlite3.Connection) -> None:
    manager = ApiKeyManager(conn)

    token = manager.generate()

    assert re.fullmatch(r"ck_[0-9a-f]{64}", token)
    assert manager.generate() != token


def test_generate_honours_configured_prefix(conn: sqlite3.Connection) -> None:
    assert ApiKeyManager(conn, prefix="ak-").generate().startswith("ak-")


def test_create_then_validate_returns_identity(conn: sqlite3.Connection, owner_id: int) -> None:
    manager = ApiKeyManager(conn)

    created = manager.create(owner_id, "laptop")
    identity = manager.validate(created.token)

    assert identity is not None
    assert identity.owner_id == owner_id
    assert identity.username == "alice"
    assert identity.key_id == created.id


def test_token_is_not_persisted(conn: sqlite3.Connection, owner_id: int) -> None:
    created = ApiKeyManager(conn).create(owner_id, "laptop")

    row = conn.execute("SELECT * FROM api_keys WHERE id=?", (created.id,)).fetchone()

    assert created.token not in {str(value) for value in tuple(row)}


def test_list_never_returns_token(conn: sqlite3.Connection, owner_id: int) -> None:
    manager = ApiKeyManager(conn)
    first = manager.create(owner_id, "first")
    second = manager.create(owner_id, "second")

    keys = manager.list(owner_id)

    assert [key.name for key in keys] == ["second", "first"]
    assert keys[0].prefix == second.token[:11]
    for key in keys:
        assert "token" not in key.to_dict()
        assert first.token not in key.to_dict().values()


def test_validate_updates_last_used_on_every_success(
    conn: sqlite3.Connection, owner_id: int
) -> None:
    manager = ApiKeyManager(conn)
    created = manager.create(owner_id, "ci")
    assert manager.list(owner_id)[0].last_used_at is None

    manager.validate(created.token)
    first_use = manager.list(owner_id)[0].last_used_at
    manager.validate(created.token)
    second_use = manager.list(owner_id)[0].last_used_at

    assert first_use is not None
    assert second_use is not None
    assert second_use >= first_use


def test_validate_rejects_unknown_and_tampered_tokens(
    conn: sqlite3.Connection, owner_id: int
) -> None:
    manager = ApiKeyManager(conn)
    created = manager.create(owner_id, "ci")
    tampered = created.token[:-1] + ("0" if created.token[-1] != "0" else "1")

    assert manager.validate(tampered) is None
    assert manager.validate("ck_" + "0" * 64) is None
    assert manager.validate("") is None
    assert manager.validate("not-a-key") is None


def test_validate_rejects_inactive_key_and_inactive_user(
    conn: sqlite3.Connection, owner_id: int
) -> None:
    manager = ApiKeyManager(conn)
    created = manager.create(owner_id, "ci")

    manager.toggle_active(owner_id, created.id, False)
    assert manager.validate(created.token) is None

    manager.toggle_active(owner_id, created.id, True)
    conn.execute("UPDATE users SET is_active=0 WHERE id=?", (owner_id,))
    assert manager.validate(created.token) is None


def test_delete_and_toggle_are_owner_scoped(
    conn: sqlite3.Connection, owner_id: int, other_owner_id: int
) -> None:
    manager = ApiKeyManager(conn)
    created = manager.create(owner_id, "ci")

    assert manager.toggle_active(other_owner_id, created.id, False) is False
    assert manager.delete(other_owner_id, created.id) is False
    assert manager.delete(other_owner_id, created.id + 1000) is False
    assert manager.validate(created.token) is not None

    assert manager.delete(owner_id, created.id) is True
    assert manager.validate(created.token) is None


def test_create_requires_name(conn: sqlite3.Connection, owner_id: int) -> None:
    with pytest.raises(ValidationError):
        ApiKeyManager(conn).create(owner_id, "  ")
