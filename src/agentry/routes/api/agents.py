"""Agent catalog API routes."""

from fastapi import APIRouter, Depends, status
from pydantic import AliasChoices, BaseModel, Field

from agentry.agents.loader import get_bundle_loader
from agentry.agents.registry import AgentCatalog
from agentry.agents.store import AgentStore
from agentry.agents.types import AgentUpdate
from agentry.auth.dependencies import UserContext, require_auth
from agentry.db.connection import get_conn
from agentry.errors import NotFoundError
from agentry.ids import parse_agent_id, parse_record_id

router = APIRouter(prefix="/agents", tags=["api-agents"])


class CreateAgentRequest(BaseModel):
    name: str = ""
    display_name: str = Field(
        default="", validation_alias=AliasChoices("display_name", "displayName")
    )
    description: str = ""
    system_prompt: str = Field(
        default="", validation_alias=AliasChoices("system_prompt", "systemPrompt")
    )


class UpdateAgentRequest(BaseModel):
    name: str | None = None
    display_name: str | None = Field(
        default=None, validation_alias=AliasChoices("display_name", "displayName")
    )
    description: str | None = None
    system_prompt: str | None = Field(
        default=None, validation_alias=AliasChoices("system_prompt", "systemPrompt")
    )
    is_active: bool | None = Field(
        default=None, validation_alias=AliasChoices("is_active", "isActive")
    )

    def to_update(self) -> AgentUpdate:
        return AgentUpdate(
            name=self.name,
            display_name=self.display_name,
            description=self.description,
            system_prompt=self.system_prompt,
            is_active=self.is_active,
        )


@router.get("")
def list_agents(ctx: UserContext = Depends(require_auth)) -> dict[str, object]:  # noqa: B008
    with get_conn() as conn:
        catalog = AgentCatalog(get_bundle_loader(), AgentStore(conn))
        views = catalog.list_unified(ctx.user_id)
    return {"success": True, "agents": [view.to_dict() for view in views]}


@router.get("/templates")
def list_templates(ctx: UserContext = Depends(require_auth)) -> dict[str, object]:  # noqa: B008
    del ctx
    with get_conn() as conn:
        definitions = AgentCatalog(get_bundle_loader(), AgentStore(conn)).template_definitions()
    return {"success": True, **definitions}


@router.get("/{agent_id}")
def get_agent(
    agent_id: str,
    ctx: UserContext = Depends(require_auth),  # noqa: B008
) -> dict[str, object]:
    parsed = parse_agent_id(agent_id)
    with get_conn() as conn:
        resolved = AgentCatalog(get_bundle_loader(), AgentStore(conn)).resolve(parsed, ctx.user_id)
    return {"success": True, "agent": resolved.to_dict()}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_agent(
    body: CreateAgentRequest,
    ctx: UserContext = Depends(require_auth),  # noqa: B008
) -> dict[str, object]:
    with get_conn() as conn:
        record = AgentStore(conn).create(
            ctx.user_id,
            body.name,
            body.display_name,
            body.description,
            body.system_prompt,
            is_template=False,
        )
    return {"success": True, "agent": record.to_dict()}


@router.put("/{agent_id}")
def update_agent(
    agent_id: str,
    body: UpdateAgentRequest,
    ctx: UserContext = Depends(require_auth),  # noqa: B008
) -> dict[str, object]:
    record_id = parse_record_id(agent_id)
    with get_conn() as conn:
        store = AgentStore(conn)
        if not store.update(ctx.user_id, record_id, body.to_update()):
            raise NotFoundError("Agent not found or not owned by user")
        record = store.get_owned(ctx.user_id, record_id)
    if record is None:
        raise NotFoundError("Agent not found or not owned by user")
    return {"success": True, "agent": record.to_dict()}


@router.delete("/{agent_id}")
def delete_agent(
    agent_id: str,
    ctx: UserContext = Depends(require_auth),  # noqa: B008
) -> dict[str, object]:
    record_id = parse_record_id(agent_id)
    with get_conn() as conn:
        deleted = AgentStore(conn).delete(ctx.user_id, record_id)
    if not deleted:
        raise NotFoundError("Agent not found or not owned by user")
    return {"success": True, "message": "Agent deleted successfully"}
