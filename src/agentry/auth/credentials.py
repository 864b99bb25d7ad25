"""Typed per-user credential storage (GitHub tokens, GitLab tokens, ...)."""

import sqlite3
from dataclasses import dataclass

from agentry.db.queries import now_iso
from agentry.errors import StorageError, ValidationError

GITHUB_TOKEN_TYPE = "github_token"


@dataclass(slots=True)
class Credential:
    id: int
    owner_id: int
    name: str
    type: str
    description: str | None
    is_active: bool
    created_at: str

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }


class CredentialStore:
    """Owner-scoped credential rows; values are only returned by ``get_active``."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def create(
        self,
        owner_id: int,
        name: str,
        credential_type: str,
        value: str,
        description: str | None = None,
    ) -> Credential:
        if not name.strip() or not credential_type.strip() or not value:
            raise ValidationError("credential name, type, and value are required")
        created_at = now_iso()
        try:
            cursor = self.conn.execute(
                (
                    "INSERT INTO user_credentials("
                    "user_id, credential_name, credential_type, credential_value, "
                    "description, is_active, created_at"
                    ") VALUES(?,?,?,?,?,1,?)"
                ),
                (owner_id, name, credential_type, value, description, created_at),
            )
        except sqlite3.Error as exc:
            raise StorageError(f"credential insert failed: {exc}") from exc
        return Credential(
            id=int(cursor.lastrowid or 0),
            owner_id=owner_id,
            name=name,
            type=credential_type,
            description=description,
            is_active=True,
            created_at=created_at,
        )

    def list(self, owner_id: int, credential_type: str | None = None) -> list[Credential]:
        query = (
            "SELECT id, user_id, credential_name, credential_type, description, is_active, "
            "created_at FROM user_credentials WHERE user_id=?"
        )
        params: list[object] = [owner_id]
        if credential_type:
            query += " AND credential_type=?"
            params.append(credential_type)
        query += " ORDER BY created_at DESC, id DESC"
        try:
            rows = self.conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"credential list failed: {exc}") from exc
        return [
            Credential(
                id=int(row["id"]),
                owner_id=int(row["user_id"]),
                name=str(row["credential_name"]),
                type=str(row["credential_type"]),
                description=row["description"],
                is_active=bool(row["is_active"]),
                created_at=str(row["created_at"]),
            )
            for row in rows
        ]

    def get_active(self, owner_id: int, credential_type: str) -> str | None:
        """Value of the most recently created active credential of this type."""
        try:
            row = self.conn.execute(
                (
                    "SELECT credential_value FROM user_credentials "
                    "WHERE user_id=? AND credential_type=? AND is_active=1 "
                    "ORDER BY created_at DESC, id DESC LIMIT 1"
                ),
                (owner_id, credential_type),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"credential lookup failed: {exc}") from exc
        if row is None or not row["credential_value"]:
            return None
        return str(row["credential_value"])

    def delete(self, owner_id: int, credential_id: int) -> bool:
        try:
            cursor = self.conn.execute(
                "DELETE FROM user_credentials WHERE id=? AND user_id=?",
                (credential_id, owner_id),
            )
        except sqlite3.Error as exc:
            raise StorageError(f"credential delete failed: {exc}") from exc
        return cursor.rowcount > 0

    def toggle_active(self, owner_id: int, credential_id: int, is_active: bool) -> bool:
        try:
            cursor = self.conn.execute(
                "UPDATE user_credentials SET is_active=? WHERE id=? AND user_id=?",
                (1 if is_active else 0, credential_id, owner_id),
            )
        except sqlite3.Error as exc:
            raise StorageError(f"credential update failed: {exc}") from exc
        return cursor.rowcount > 0

    def create_github_token(
        self, owner_id: int, name: str, token: str, description: str | None = None
    ) -> Credential:
        return self.create(owner_id, name, GITHUB_TOKEN_TYPE, token, description)

    def get_active_github_token(self, owner_id: int) -> str | None:
        return self.get_active(owner_id, GITHUB_TOKEN_TYPE)
