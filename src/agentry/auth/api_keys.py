"""API key issuance and validation.

Keys are shown to the user once, at creation. Only a salted SHA-256 digest
and a short non-secret lookup prefix are persisted.
"""

import hashlib
import hmac
import logging
import secrets
import sqlite3
from dataclasses import dataclass

from agentry.config import get_settings
from agentry.db.queries import now_iso
from agentry.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32
LOOKUP_CHARS = 8
SALT_BYTES = 16


def _digest(salt_hex: str, token: str) -> str:
    return hashlib.sha256(bytes.fromhex(salt_hex) + token.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class CreatedApiKey:
    id: int
    name: str
    token: str

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "name": self.name, "token": self.token}


@dataclass(slots=True)
class ApiKey:
    id: int
    owner_id: int
    name: str
    prefix: str
    is_active: bool
    created_at: str
    last_used_at: str | None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "prefix": self.prefix,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "last_used_at": self.last_used_at,
        }


@dataclass(frozen=True, slots=True)
class ApiKeyIdentity:
    owner_id: int
    username: str
    key_id: int


class ApiKeyManager:
    def __init__(self, conn: sqlite3.Connection, prefix: str | None = None) -> None:
        self.conn = conn
        self.prefix = get_settings().api_key_prefix if prefix is None else prefix

    def generate(self) -> str:
        return f"{self.prefix}{secrets.token_hex(TOKEN_BYTES)}"

    def lookup_prefix(self, token: str) -> str:
        return token[: len(self.prefix) + LOOKUP_CHARS]

    def create(self, owner_id: int, name: str) -> CreatedApiKey:
        if not name.strip():
            raise ValidationError("API key name is required")
        token = self.generate()
        salt = secrets.token_hex(SALT_BYTES)
        try:
            cursor = self.conn.execute(
                (
                    "INSERT INTO api_keys("
                    "user_id, key_name, key_prefix, key_salt, key_hash, is_active, created_at"
                    ") VALUES(?,?,?,?,?,1,?)"
                ),
                (owner_id, name, self.lookup_prefix(token), salt, _digest(salt, token), now_iso()),
            )
        except sqlite3.Error as exc:
            raise StorageError(f"api key insert failed: {exc}") from exc
        key_id = int(cursor.lastrowid or 0)
        logger.info("Issued API key %d for owner %d", key_id, owner_id)
        return CreatedApiKey(id=key_id, name=name, token=token)

    def list(self, owner_id: int) -> list[ApiKey]:
        try:
            rows = self.conn.execute(
                (
                    "SELECT id, user_id, key_name, key_prefix, is_active, created_at, last_used "
                    "FROM api_keys WHERE user_id=? ORDER BY created_at DESC, id DESC"
                ),
                (owner_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"api key list failed: {exc}") from exc
        return [
            ApiKey(
                id=int(row["id"]),
                owner_id=int(row["user_id"]),
                name=str(row["key_name"]),
                prefix=str(row["key_prefix"]),
                is_active=bool(row["is_active"]),
                created_at=str(row["created_at"]),
                last_used_at=row["last_used"],
            )
            for row in rows
        ]

    def validate(self, token: str) -> ApiKeyIdentity | None:
        """Resolve a raw token to its owner; bumps ``last_used`` on every match."""
        if not token or not token.startswith(self.prefix):
            return None
        try:
            rows = self.conn.execute(
                (
                    "SELECT ak.id AS key_id, ak.key_salt, ak.key_hash, u.id AS user_id, "
                    "u.username FROM api_keys ak JOIN users u ON ak.user_id = u.id "
                    "WHERE ak.key_prefix=? AND ak.is_active=1 AND u.is_active=1"
                ),
                (self.lookup_prefix(token),),
            ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"api key lookup failed: {exc}") from exc
        for row in rows:
            if not hmac.compare_digest(_digest(str(row["key_salt"]), token), str(row["key_hash"])):
                continue
            key_id = int(row["key_id"])
            self.conn.execute("UPDATE api_keys SET last_used=? WHERE id=?", (now_iso(), key_id))
            return ApiKeyIdentity(
                owner_id=int(row["user_id"]), username=str(row["username"]), key_id=key_id
            )
        return None

    def delete(self, owner_id: int, key_id: int) -> bool:
        try:
            cursor = self.conn.execute(
                "DELETE FROM api_keys WHERE id=? AND user_id=?", (key_id, owner_id)
            )
        except sqlite3.Error as exc:
            raise StorageError(f"api key delete failed: {exc}") from exc
        return cursor.rowcount > 0

    def toggle_active(self, owner_id: int, key_id: int, is_active: bool) -> bool:
        try:
            cursor = self.conn.execute(
                "UPDATE api_keys SET is_active=? WHERE id=? AND user_id=?",
                (1 if is_active else 0, key_id, owner_id),
            )
        except sqlite3.Error as exc:
            raise StorageError(f"api key update failed: {exc}") from exc
        return cursor.rowcount > 0
