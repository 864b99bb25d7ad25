"""System prompt assembly from agent bundles.

The assembled text is consumed verbatim as an agent's instructions, so the
output must be byte-identical for identical bundles.
"""

from collections.abc import Sequence

from agentry.agents.types import AgentBundle, AgentFragment

PERSONA_HEADER = "# PERSONA & ROLE"
KNOWLEDGE_HEADER = "# KNOWLEDGE BASE"
SKILLS_HEADER = "# SKILLS & CAPABILITIES"
WORKFLOWS_HEADER = "# WORKFLOWS & PROCESSES"

SECTION_SEPARATOR = "\n\n"


def _fragment_section(header: str, fragments: Sequence[AgentFragment]) -> list[str]:
    if not fragments:
        return []
    return [header, *(f"## {fragment.name}\n{fragment.content}" for fragment in fragments)]


def assemble_system_prompt(bundle: AgentBundle) -> str:
    parts: list[str] = []
    if bundle.persona:
        parts.append(f"{PERSONA_HEADER}\n{bundle.persona}")
    parts.extend(_fragment_section(KNOWLEDGE_HEADER, bundle.knowledge))
    parts.extend(_fragment_section(SKILLS_HEADER, bundle.skills))
    parts.extend(_fragment_section(WORKFLOWS_HEADER, bundle.workflows))
    return SECTION_SEPARATOR.join(parts)
