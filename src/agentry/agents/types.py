"""Agent data models."""

from dataclasses import dataclass, field
from typing import Literal

AgentSource = Literal["file", "database"]


@dataclass(frozen=True, slots=True)
class AgentFragment:
    name: str
    content: str


@dataclass(frozen=True, slots=True)
class AgentBundle:
    name: str
    persona: str | None = None
    knowledge: tuple[AgentFragment, ...] = ()
    skills: tuple[AgentFragment, ...] = ()
    workflows: tuple[AgentFragment, ...] = ()


@dataclass(frozen=True, slots=True)
class AgentMetadata:
    name: str
    display_name: str
    description: str = ""
    category: str = "general"

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "category": self.category,
        }


@dataclass(slots=True)
class AgentRecord:
    id: int
    owner_id: int
    name: str
    display_name: str
    description: str
    system_prompt: str
    is_template: bool
    is_active: bool
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "systemPrompt": self.system_prompt,
            "isTemplate": self.is_template,
            "isActive": self.is_active,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True, slots=True)
class AgentUpdate:
    """Partial update; ``None`` means the field was not supplied."""

    name: str | None = None
    display_name: str | None = None
    description: str | None = None
    system_prompt: str | None = None
    is_active: bool | None = None

    def columns(self) -> dict[str, object]:
        values: dict[str, object] = {
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "system_prompt": self.system_prompt,
            "is_active": None if self.is_active is None else int(self.is_active),
        }
        return {column: value for column, value in values.items() if value is not None}


@dataclass(frozen=True, slots=True)
class UnifiedAgentView:
    id: str
    name: str
    display_name: str
    description: str
    source: AgentSource
    is_template: bool
    is_active: bool
    category: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "source": self.source,
            "isTemplate": self.is_template,
            "isActive": self.is_active,
            "category": self.category,
        }


@dataclass(slots=True)
class ResolvedAgent:
    """A single catalog entry with its full prompt text."""

    id: str
    name: str
    display_name: str
    description: str
    system_prompt: str
    source: AgentSource
    is_template: bool
    is_active: bool
    category: str | None = None
    knowledge: list[str] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    workflows: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "systemPrompt": self.system_prompt,
            "source": self.source,
            "isTemplate": self.is_template,
            "isActive": self.is_active,
            "category": self.category,
        }
        if self.source == "file":
            payload["knowledge"] = list(self.knowledge)
            payload["skills"] = list(self.skills)
            payload["workflows"] = list(self.workflows)
        return payload
