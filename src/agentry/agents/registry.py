"""Unified agent catalog over file bundles and stored records."""

import logging

from agentry.agents.loader import BundleLoader
from agentry.agents.prompt import assemble_system_prompt
from agentry.agents.seed import AGENT_TEMPLATES, seed_templates
from agentry.agents.store import AgentStore
from agentry.agents.types import AgentMetadata, AgentRecord, ResolvedAgent, UnifiedAgentView
from agentry.errors import NotFoundError
from agentry.ids import AgentId, FileAgentId, StoredAgentId, parse_agent_id

logger = logging.getLogger(__name__)


def _file_view(meta: AgentMetadata) -> UnifiedAgentView:
    return UnifiedAgentView(
        id=str(FileAgentId(meta.name)),
        name=meta.name,
        display_name=meta.display_name,
        description=meta.description,
        source="file",
        is_template=True,
        is_active=True,
        category=meta.category,
    )


def _database_view(record: AgentRecord) -> UnifiedAgentView:
    return UnifiedAgentView(
        id=str(StoredAgentId(record.id)),
        name=record.name,
        display_name=record.display_name,
        description=record.description,
        source="database",
        is_template=record.is_template,
        is_active=record.is_active,
    )


class AgentCatalog:
    def __init__(self, loader: BundleLoader, store: AgentStore) -> None:
        self.loader = loader
        self.store = store

    def list_unified(self, owner_id: int) -> list[UnifiedAgentView]:
        """File agents first, then the owner's stored agents, each in source order."""
        seed_templates(self.store, owner_id)
        file_views = [_file_view(meta) for meta in self.loader.list_agents()]
        database_views = [_database_view(record) for record in self.store.list(owner_id)]
        return [*file_views, *database_views]

    def resolve(self, agent_id: AgentId, owner_id: int) -> ResolvedAgent:
        if isinstance(agent_id, FileAgentId):
            return self._resolve_file(agent_id)
        return self._resolve_stored(agent_id, owner_id)

    def resolve_id(self, raw_id: str, owner_id: int) -> ResolvedAgent:
        return self.resolve(parse_agent_id(raw_id), owner_id)

    def _resolve_file(self, agent_id: FileAgentId) -> ResolvedAgent:
        bundle = self.loader.load_agent(agent_id.name)
        if not bundle.persona:
            raise NotFoundError("File-based agent not found")
        meta = self.loader.get_agent_metadata(agent_id.name)
        return ResolvedAgent(
            id=str(agent_id),
            name=bundle.name,
            display_name=meta.display_name,
            description=meta.description,
            system_prompt=assemble_system_prompt(bundle),
            source="file",
            is_template=True,
            is_active=True,
            category=meta.category,
            knowledge=[fragment.name for fragment in bundle.knowledge],
            skills=[fragment.name for fragment in bundle.skills],
            workflows=[fragment.name for fragment in bundle.workflows],
        )

    def _resolve_stored(self, agent_id: StoredAgentId, owner_id: int) -> ResolvedAgent:
        record = self.store.get_owned(owner_id, agent_id.id)
        if record is None:
            raise NotFoundError("Agent not found")
        return ResolvedAgent(
            id=str(agent_id),
            name=record.name,
            display_name=record.display_name,
            description=record.description,
            system_prompt=record.system_prompt,
            source="database",
            is_template=record.is_template,
            is_active=record.is_active,
        )

    def template_definitions(self) -> dict[str, list[dict[str, str]]]:
        return {
            "templates": [template.to_dict() for template in AGENT_TEMPLATES],
            "fileBasedAgents": [meta.to_dict() for meta in self.loader.list_agents()],
        }
