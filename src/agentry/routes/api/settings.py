"""API key and credential management routes."""

from fastapi import APIRouter, Depends, status
from pydantic import AliasChoices, BaseModel, Field

from agentry.auth.api_keys import ApiKeyManager
from agentry.auth.credentials import CredentialStore
from agentry.auth.dependencies import UserContext, require_auth
from agentry.db.connection import get_conn
from agentry.errors import NotFoundError
from agentry.ids import parse_record_id

router = APIRouter(prefix="/settings", tags=["api-settings"])


class CreateApiKeyRequest(BaseModel):
    name: str = Field(default="", validation_alias=AliasChoices("name", "keyName"))


class CreateCredentialRequest(BaseModel):
    name: str = Field(default="", validation_alias=AliasChoices("name", "credentialName"))
    type: str = Field(default="", validation_alias=AliasChoices("type", "credentialType"))
    value: str = Field(default="", validation_alias=AliasChoices("value", "credentialValue"))
    description: str | None = None


class ToggleRequest(BaseModel):
    is_active: bool = Field(validation_alias=AliasChoices("is_active", "isActive"))


@router.get("/api-keys")
def list_api_keys(ctx: UserContext = Depends(require_auth)) -> dict[str, object]:  # noqa: B008
    with get_conn() as conn:
        keys = ApiKeyManager(conn).list(ctx.user_id)
    return {"success": True, "api_keys": [key.to_dict() for key in keys]}


@router.post("/api-keys", status_code=status.HTTP_201_CREATED)
def create_api_key(
    body: CreateApiKeyRequest,
    ctx: UserContext = Depends(require_auth),  # noqa: B008
) -> dict[str, object]:
    with get_conn() as conn:
        created = ApiKeyManager(conn).create(ctx.user_id, body.name)
    return {"success": True, "api_key": created.to_dict()}


@router.delete("/api-keys/{key_id}")
def delete_api_key(
    key_id: str,
    ctx: UserContext = Depends(require_auth),  # noqa: B008
) -> dict[str, object]:
    record_id = parse_record_id(key_id, "API key")
    with get_conn() as conn:
        deleted = ApiKeyManager(conn).delete(ctx.user_id, record_id)
    if not deleted:
        raise NotFoundError("API key not found")
    return {"success": True}


@router.patch("/api-keys/{key_id}/toggle")
def toggle_api_key(
    key_id: str,
    body: ToggleRequest,
    ctx: UserContext = Depends(require_auth),  # noqa: B008
) -> dict[str, object]:
    record_id = parse_record_id(key_id, "API key")
    with get_conn() as conn:
        updated = ApiKeyManager(conn).toggle_active(ctx.user_id, record_id, body.is_active)
    if not updated:
        raise NotFoundError("API key not found")
    return {"success": True}


@router.get("/credentials")
def list_credentials(
    type: str | None = None,  # noqa: A002
    ctx: UserContext = Depends(require_auth),  # noqa: B008
) -> dict[str, object]:
    with get_conn() as conn:
        credentials = CredentialStore(conn).list(ctx.user_id, type)
    return {"success": True, "credentials": [item.to_dict() for item in credentials]}


@router.post("/credentials", status_code=status.HTTP_201_CREATED)
def create_credential(
    body: CreateCredentialRequest,
    ctx: UserContext = Depends(require_auth),  # noqa: B008
) -> dict[str, object]:
    with get_conn() as conn:
        credential = CredentialStore(conn).create(
            ctx.user_id, body.name, body.type, body.value, body.description
        )
    return {"success": True, "credential": credential.to_dict()}


@router.delete("/credentials/{credential_id}")
def delete_credential(
    credential_id: str,
    ctx: UserContext = Depends(require_auth),  # noqa: B008
) -> dict[str, object]:
    record_id = parse_record_id(credential_id, "credential")
    with get_conn() as conn:
        deleted = CredentialStore(conn).delete(ctx.user_id, record_id)
    if not deleted:
        raise NotFoundError("Credential not found")
    return {"success": True}


@router.patch("/credentials/{credential_id}/toggle")
def toggle_credential(
    credential_id: str,
    body: ToggleRequest,
    ctx: UserContext = Depends(require_auth),  # noqa: B008
) -> dict[str, object]:
    record_id = parse_record_id(credential_id, "credential")
    with get_conn() as conn:
        updated = CredentialStore(conn).toggle_active(ctx.user_id, record_id, body.is_active)
    if not updated:
        raise NotFoundError("Credential not found")
    return {"success": True}
