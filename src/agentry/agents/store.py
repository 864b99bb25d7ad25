"""Owner-scoped persistence for user-defined agents."""

import logging
import re
import sqlite3

from agentry.agents.types import AgentRecord, AgentUpdate
from agentry.db.queries import now_iso
from agentry.errors import ConflictError, StorageError, ValidationError

logger = logging.getLogger(__name__)

AGENT_NAME_RE = re.compile(r"[a-z0-9-]+")

_COLUMNS = (
    "id, user_id, name, display_name, description, system_prompt, "
    "is_template, is_active, created_at, updated_at"
)


def validate_agent_name(name: str) -> str:
    if not AGENT_NAME_RE.fullmatch(name):
        raise ValidationError("Name must be lowercase letters, numbers, and hyphens only")
    return name


def _record(row: sqlite3.Row) -> AgentRecord:
    return AgentRecord(
        id=int(row["id"]),
        owner_id=int(row["user_id"]),
        name=str(row["name"]),
        display_name=str(row["display_name"]),
        description=str(row["description"] or ""),
        system_prompt=str(row["system_prompt"]),
        is_template=bool(row["is_template"]),
        is_active=bool(row["is_active"]),
        created_at=str(row["created_at"]),
        updated_at=str(row["updated_at"]),
    )


def _is_unique_violation(exc: sqlite3.IntegrityError) -> bool:
    return "unique" in str(exc).lower()


class AgentStore:
    """CRUD over the ``agents`` table.

    Every mutation filters on ``user_id``; a foreign id and a missing id
    produce the same result.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def create(
        self,
        owner_id: int,
        name: str,
        display_name: str,
        description: str,
        system_prompt: str,
        is_template: bool = False,
    ) -> AgentRecord:
        validate_agent_name(name)
        if not display_name.strip() or not system_prompt.strip():
            raise ValidationError("Name, displayName, and systemPrompt are required")
        now = now_iso()
        try:
            cursor = self.conn.execute(
                (
                    "INSERT INTO agents("
                    "user_id, name, display_name, description, system_prompt, "
                    "is_template, is_active, created_at, updated_at"
                    ") VALUES(?,?,?,?,?,?,1,?,?)"
                ),
                (
                    owner_id,
                    name,
                    display_name,
                    description or "",
                    system_prompt,
                    1 if is_template else 0,
                    now,
                    now,
                ),
            )
        except sqlite3.IntegrityError as exc:
            if _is_unique_violation(exc):
                raise ConflictError("An agent with this name already exists") from exc
            raise StorageError(f"agent insert failed: {exc}") from exc
        except sqlite3.Error as exc:
            raise StorageError(f"agent insert failed: {exc}") from exc
        return AgentRecord(
            id=int(cursor.lastrowid or 0),
            owner_id=owner_id,
            name=name,
            display_name=display_name,
            description=description or "",
            system_prompt=system_prompt,
            is_template=is_template,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    def list(self, owner_id: int) -> list[AgentRecord]:
        try:
            rows = self.conn.execute(
                f"SELECT {_COLUMNS} FROM agents WHERE user_id=? "
                "ORDER BY is_template DESC, display_name ASC",
                (owner_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"agent list failed: {exc}") from exc
        return [_record(row) for row in rows]

    def get_by_name(self, owner_id: int, name: str) -> AgentRecord | None:
        try:
            row = self.conn.execute(
                f"SELECT {_COLUMNS} FROM agents WHERE user_id=? AND name=? AND is_active=1",
                (owner_id, name),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"agent lookup failed: {exc}") from exc
        return _record(row) if row is not None else None

    def get_by_id(self, agent_id: int) -> AgentRecord | None:
        """Global lookup; callers compare ``owner_id`` themselves."""
        try:
            row = self.conn.execute(
                f"SELECT {_COLUMNS} FROM agents WHERE id=?", (agent_id,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"agent lookup failed: {exc}") from exc
        return _record(row) if row is not None else None

    def get_owned(self, owner_id: int, agent_id: int) -> AgentRecord | None:
        record = self.get_by_id(agent_id)
        if record is None or record.owner_id != owner_id:
            return None
        return record

    def update(self, owner_id: int, agent_id: int, changes: AgentUpdate) -> bool:
        if changes.name is not None:
            validate_agent_name(changes.name)
        for value in (changes.display_name, changes.system_prompt):
            if value is not None and not value.strip():
                raise ValidationError("displayName and systemPrompt cannot be blank")
        columns = changes.columns()
        assignments = [f"{column}=?" for column in columns]
        values: list[object] = list(columns.values())
        assignments.append("updated_at=?")
        values.append(now_iso())
        values.extend([agent_id, owner_id])
        try:
            cursor = self.conn.execute(
                f"UPDATE agents SET {', '.join(assignments)} WHERE id=? AND user_id=?",
                values,
            )
        except sqlite3.IntegrityError as exc:
            if _is_unique_violation(exc):
                raise ConflictError("An agent with this name already exists") from exc
            raise StorageError(f"agent update failed: {exc}") from exc
        except sqlite3.Error as exc:
            raise StorageError(f"agent update failed: {exc}") from exc
        return cursor.rowcount > 0

    def delete(self, owner_id: int, agent_id: int) -> bool:
        try:
            cursor = self.conn.execute(
                "DELETE FROM agents WHERE id=? AND user_id=?", (agent_id, owner_id)
            )
        except sqlite3.Error as exc:
            raise StorageError(f"agent delete failed: {exc}") from exc
        if cursor.rowcount > 0:
            logger.info("Deleted agent %d for owner %d", agent_id, owner_id)
        return cursor.rowcount > 0
