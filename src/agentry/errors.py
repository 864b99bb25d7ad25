"""Agentry exception hierarchy.

Every domain error carries the HTTP status it maps to so the API layer can
translate it without a lookup table. Absent ids and ids owned by another
user both raise NotFoundError; callers cannot tell the two apart.
"""


class AgentryError(Exception):
    """Base exception for all Agentry errors."""

    status_code = 500

    def __init__(self, message: str = "", *, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(AgentryError):
    """Malformed input: bad agent name, missing field, unparseable id."""

    status_code = 400


class ConflictError(AgentryError):
    """A record with the same (owner, name) already exists."""

    status_code = 409


class NotFoundError(AgentryError):
    """Record is absent or belongs to a different owner."""

    status_code = 404


class StorageError(AgentryError):
    """Underlying persistence failure."""

    status_code = 500
