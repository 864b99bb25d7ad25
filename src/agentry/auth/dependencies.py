"""FastAPI dependencies for API key auth."""

from dataclasses import dataclass

from fastapi import Header, HTTPException, status

from agentry.auth.api_keys import ApiKeyManager
from agentry.db.connection import get_conn
from agentry.logging import bind_context


def _extract_bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def extract_api_key(authorization: str | None, x_api_key: str | None) -> str | None:
    bearer = _extract_bearer(authorization)
    if bearer:
        return bearer
    if x_api_key:
        token = x_api_key.strip()
        if token:
            return token
    return None


@dataclass(frozen=True, slots=True)
class UserContext:
    user_id: int
    username: str
    api_key_id: int


def require_auth(
    authorization: str | None = Header(default=None),
    x_api_key: str | None = Header(default=None),
) -> UserContext:
    raw_token = extract_api_key(authorization, x_api_key)
    if not raw_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing API key")
    with get_conn() as conn:
        identity = ApiKeyManager(conn).validate(raw_token)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid API key")
    bind_context(user_id=identity.owner_id)
    return UserContext(
        user_id=identity.owner_id, username=identity.username, api_key_id=identity.key_id
    )
