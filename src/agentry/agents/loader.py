"""Agent bundle loader from disk with hot-reload support.

Layout under the agents root::

    personas/<name>.md          persona text (marks the agent as existing)
    personas/<name>.json        optional {displayName, description, category}
    knowledge/<name>/*.md       one fragment per file
    skills/<name>/*.md
    workflows/<name>/*.md

Nothing here raises to the caller: missing files are expected and silently
replaced by empty values, unreadable ones are logged and replaced the same way.
"""

import json
import logging
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from agentry.agents.types import AgentBundle, AgentFragment, AgentMetadata
from agentry.config import get_settings

logger = logging.getLogger(__name__)

FRAGMENT_SUFFIX = ".md"
FRAGMENT_KINDS = ("knowledge", "skills", "workflows")
DEFAULT_CATEGORY = "general"


class ReadStatus(StrEnum):
    PRESENT = "present"
    ABSENT = "absent"
    UNREADABLE = "unreadable"


@dataclass(frozen=True, slots=True)
class FileRead:
    status: ReadStatus
    text: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ReadStatus.PRESENT


def read_text(path: Path) -> FileRead:
    if not path.is_file():
        return FileRead(ReadStatus.ABSENT)
    try:
        return FileRead(ReadStatus.PRESENT, path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Unreadable agent file %s: %s", path, exc)
        return FileRead(ReadStatus.UNREADABLE)


def read_json_object(path: Path) -> dict[str, object] | None:
    result = read_text(path)
    if not result.ok:
        return None
    try:
        parsed = json.loads(result.text)
    except json.JSONDecodeError as exc:
        logger.warning("Invalid JSON in agent metadata %s: %s", path, exc)
        return None
    if not isinstance(parsed, dict):
        logger.warning("Agent metadata %s is not a JSON object", path)
        return None
    return parsed


def _is_safe_name(name: str) -> bool:
    return bool(name) and not name.startswith(".") and "/" not in name and "\\" not in name


def _mtime_ns(path: Path) -> int:
    try:
        return path.stat().st_mtime_ns
    except OSError:
        return 0


def _str_field(raw: dict[str, object], key: str) -> str:
    value = raw.get(key)
    return value if isinstance(value, str) else ""


class BundleLoader:
    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        # name -> (bundle, mtime signature)
        self._cache: dict[str, tuple[AgentBundle, tuple[int, ...]]] = {}

    @property
    def personas_dir(self) -> Path:
        return self.root / "personas"

    def persona_path(self, name: str) -> Path:
        return self.personas_dir / f"{name}{FRAGMENT_SUFFIX}"

    def metadata_path(self, name: str) -> Path:
        return self.personas_dir / f"{name}.json"

    def fragment_dir(self, kind: str, name: str) -> Path:
        return self.root / kind / name

    def reset_cache(self) -> None:
        self._cache.clear()

    def has_agent(self, name: str) -> bool:
        return _is_safe_name(name) and self.persona_path(name).is_file()

    def _signature(self, name: str) -> tuple[int, ...]:
        stamps = [_mtime_ns(self.persona_path(name))]
        for kind in FRAGMENT_KINDS:
            directory = self.fragment_dir(kind, name)
            stamps.append(_mtime_ns(directory))
            if directory.is_dir():
                stamps.extend(_mtime_ns(path) for path in self._fragment_files(directory))
        return tuple(stamps)

    def _fragment_files(self, directory: Path) -> list[Path]:
        try:
            return sorted(
                (p for p in directory.iterdir() if p.suffix == FRAGMENT_SUFFIX and p.is_file()),
                key=lambda p: p.stem,
            )
        except OSError as exc:
            logger.warning("Unreadable agent directory %s: %s", directory, exc)
            return []

    def _load_fragments(self, directory: Path) -> tuple[AgentFragment, ...]:
        if not directory.is_dir():
            return ()
        fragments: list[AgentFragment] = []
        for path in self._fragment_files(directory):
            result = read_text(path)
            if result.ok and result.text:
                fragments.append(AgentFragment(name=path.stem, content=result.text))
        return tuple(fragments)

    def _load_uncached(self, name: str) -> AgentBundle:
        persona = read_text(self.persona_path(name))
        return AgentBundle(
            name=name,
            persona=persona.text if persona.ok and persona.text else None,
            knowledge=self._load_fragments(self.fragment_dir("knowledge", name)),
            skills=self._load_fragments(self.fragment_dir("skills", name)),
            workflows=self._load_fragments(self.fragment_dir("workflows", name)),
        )

    def load_agent(self, name: str) -> AgentBundle:
        """Load one bundle, reusing the cached copy while its files are unchanged."""
        if not _is_safe_name(name):
            logger.debug("Rejected agent bundle name %r", name)
            return AgentBundle(name=name)
        signature = self._signature(name)
        cached = self._cache.get(name)
        if cached is not None:
            bundle, cached_signature = cached
            if cached_signature == signature:
                return bundle
            logger.info("Hot-reloading agent bundle: %s (mtime changed)", name)
        bundle = self._load_uncached(name)
        self._cache[name] = (bundle, signature)
        return bundle

    def get_agent_metadata(self, name: str) -> AgentMetadata:
        raw = read_json_object(self.metadata_path(name)) if _is_safe_name(name) else None
        if raw is None:
            return AgentMetadata(name=name, display_name=name)
        return AgentMetadata(
            name=name,
            display_name=_str_field(raw, "displayName") or name,
            description=_str_field(raw, "description"),
            category=_str_field(raw, "category") or DEFAULT_CATEGORY,
        )

    def list_agents(self) -> list[AgentMetadata]:
        if not self.personas_dir.is_dir():
            return []
        try:
            names = sorted(
                path.stem
                for path in self.personas_dir.iterdir()
                if path.suffix == FRAGMENT_SUFFIX and path.is_file()
            )
        except OSError as exc:
            logger.warning("Unable to list agent personas in %s: %s", self.personas_dir, exc)
            return []
        return [self.get_agent_metadata(name) for name in names]


@lru_cache(maxsize=8)
def _loader_for_root(root: str) -> BundleLoader:
    return BundleLoader(Path(root))


def get_bundle_loader() -> BundleLoader:
    """Process-wide loader for the configured agents root, so its cache is shared."""
    return _loader_for_root(get_settings().agents_root)
