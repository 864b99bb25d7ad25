"""Agent identifier helpers.

Catalog ids come in two shapes: ``file:<name>`` for bundles on disk and a bare
integer for stored records. They are parsed once at the boundary into a tagged
variant and passed around typed from then on.
"""

import re
from dataclasses import dataclass

from agentry.errors import ValidationError

FILE_ID_PREFIX = "file:"
_RECORD_ID_RE = re.compile(r"-?[0-9]+")
# SQLite INTEGER is a signed 64-bit value.
_MIN_RECORD_ID = -(2**63)
_MAX_RECORD_ID = 2**63 - 1


@dataclass(frozen=True, slots=True)
class FileAgentId:
    name: str

    def __str__(self) -> str:
        return f"{FILE_ID_PREFIX}{self.name}"


@dataclass(frozen=True, slots=True)
class StoredAgentId:
    id: int

    def __str__(self) -> str:
        return str(self.id)


AgentId = FileAgentId | StoredAgentId


def parse_agent_id(raw: str) -> AgentId:
    if raw.startswith(FILE_ID_PREFIX):
        name = raw[len(FILE_ID_PREFIX) :]
        if not name:
            raise ValidationError("Invalid agent ID")
        return FileAgentId(name)
    return StoredAgentId(parse_record_id(raw))


def parse_record_id(raw: str, kind: str = "agent") -> int:
    text = raw.strip()
    # 19 digits bounds the int() conversion before the range check.
    if _RECORD_ID_RE.fullmatch(text) is None or len(text.lstrip("-")) > 19:
        raise ValidationError(f"Invalid {kind} ID")
    value = int(text)
    if not _MIN_RECORD_ID <= value <= _MAX_RECORD_ID:
        raise ValidationError(f"Invalid {kind} ID")
    return value
