"""Built-in agent templates seeded into every owner's catalog."""

import logging
from dataclasses import dataclass

from agentry.agents.store import AgentStore
from agentry.errors import ConflictError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AgentTemplate:
    name: str
    display_name: str
    description: str
    system_prompt: str

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "systemPrompt": self.system_prompt,
        }


AGENT_TEMPLATES: tuple[AgentTemplate, ...] = (
    AgentTemplate(
        name="code-reviewer",
        display_name="Code Reviewer",
        description="Reviews code for quality, security, and best practices",
        system_prompt=(
            "You are an expert code reviewer. Focus on:\n"
            "- Code quality and readability\n"
            "- Security vulnerabilities (OWASP top 10)\n"
            "- Performance optimizations\n"
            "- Best practices and design patterns\n"
            "- Potential bugs and edge cases\n\n"
            "Always provide specific, actionable feedback with code examples."
        ),
    ),
    AgentTemplate(
        name="bug-fixer",
        display_name="Bug Fixer",
        description="Systematic debugging and fix suggestions",
        system_prompt=(
            "You are a debugging expert. Your approach:\n"
            "- Analyze the error/bug systematically\n"
            "- Identify root causes, not just symptoms\n"
            "- Provide step-by-step fix instructions\n"
            "- Explain why the bug occurred\n"
            "- Suggest preventive measures\n\n"
            "Be thorough but focused on solving the immediate issue."
        ),
    ),
    AgentTemplate(
        name="doc-writer",
        display_name="Documentation Writer",
        description="Generate documentation, comments, and README files",
        system_prompt=(
            "You are a technical documentation specialist. You excel at:\n"
            "- Writing clear, concise documentation\n"
            "- Creating comprehensive README files\n"
            "- Adding helpful code comments\n"
            "- Generating API documentation\n"
            "- Writing usage examples\n\n"
            "Focus on clarity and completeness while avoiding unnecessary verbosity."
        ),
    ),
    AgentTemplate(
        name="refactorer",
        display_name="Refactorer",
        description="Code optimization and restructuring",
        system_prompt=(
            "You are a refactoring expert. Focus on:\n"
            "- Improving code structure and organization\n"
            "- Reducing complexity and duplication\n"
            "- Applying SOLID principles\n"
            "- Optimizing performance\n"
            "- Maintaining backwards compatibility\n\n"
            "Always explain the reasoning behind refactoring decisions."
        ),
    ),
    AgentTemplate(
        name="test-writer",
        display_name="Test Writer",
        description="Generate unit tests and test scenarios",
        system_prompt=(
            "You are a testing expert. Your focus:\n"
            "- Writing comprehensive unit tests\n"
            "- Identifying edge cases and boundary conditions\n"
            "- Creating meaningful test descriptions\n"
            "- Using appropriate testing patterns (AAA, etc.)\n"
            "- Achieving good code coverage\n\n"
            "Prioritize test quality over quantity."
        ),
    ),
)


def seed_templates(
    store: AgentStore,
    owner_id: int,
    templates: tuple[AgentTemplate, ...] = AGENT_TEMPLATES,
) -> int:
    """Insert any built-in template the owner does not have yet.

    Presence is decided by name across all of the owner's agents, active or
    not. The UNIQUE(user_id, name) constraint makes a concurrent duplicate
    insert fail, which is treated as already seeded.
    """
    existing = {record.name for record in store.list(owner_id)}
    inserted = 0
    for template in templates:
        if template.name in existing:
            continue
        try:
            store.create(
                owner_id,
                template.name,
                template.display_name,
                template.description,
                template.system_prompt,
                is_template=True,
            )
        except ConflictError:
            logger.debug("Template %s already seeded for owner %d", template.name, owner_id)
            continue
        inserted += 1
    if inserted:
        logger.info("Seeded %d agent templates for owner %d", inserted, owner_id)
    return inserted
