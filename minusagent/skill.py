"""
Skills: named instruction templates stored as SKILL.md files.

A skill is a directory holding a SKILL.md whose header sits between `---` lines:

    ---
    name: deploy
    description: Deploy the application
    context: fork
    disable-model-invocation: true
    allowed-tools: Bash Read
    ---

    Deploy $ARGUMENTS to ${env}.

Skills are loaded once at startup and never modified afterwards.
"""
from __future__ import annotations

import json
import re
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from minusagent.errors import SkillError
from minusagent.logging_config import setup_logger

logger = setup_logger(__name__)

SKILL_FILE = "SKILL.md"
MAX_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 1024

_NAME_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_PLACEHOLDER_RE = re.compile(r"\$ARGUMENTS|\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$(\d+)")


class SkillContext(str, Enum):
    INLINE = "inline"
    FORK = "fork"


def validate_name(name: str) -> str:
    if not name or len(name) > MAX_NAME_LENGTH:
        raise SkillError(f"Skill name must be 1-{MAX_NAME_LENGTH} characters: {name!r}")
    if not _NAME_RE.match(name):
        raise SkillError(
            f"Skill name may only use lowercase letters, digits and single inner hyphens: {name!r}"
        )
    return name


def validate_description(description: str) -> str:
    if not description or len(description) > MAX_DESCRIPTION_LENGTH:
        raise SkillError(f"Skill description must be 1-{MAX_DESCRIPTION_LENGTH} characters")
    return description


def parse_frontmatter(content: str) -> Tuple[Dict[str, str], str]:
    meta: Dict[str, str] = {}
    if not content.startswith("---"):
        return meta, content
    rest = content[3:]
    end = rest.find("\n---")
    if end == -1:
        return meta, content

    header = rest[:end]
    body = rest[end + 4:]
    # Drop whatever trails the closing delimiter on its own line.
    newline = body.find("\n")
    body = body[newline + 1:] if newline != -1 else ""

    for line in header.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or ":" not in line:
            continue
        key, value = line.split(":", 1)
        meta[key.strip()] = value.strip().strip("\"'")
    return meta, body.lstrip("\n")


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("true", "yes", "1", "on")


class Skill(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    context: SkillContext = SkillContext.INLINE
    disable_model_invocation: bool = False
    allowed_tools: Tuple[str, ...] = ()
    script: str = ""
    parameters: Optional[Dict[str, Any]] = None
    path: Optional[Path] = None

    @classmethod
    def parse(cls, content: str, default_name: str, strict: bool = False, path: Optional[Path] = None) -> "Skill":
        """Build a skill from SKILL.md text; `strict` enforces the name and description rules."""
        meta, script = parse_frontmatter(content)
        name = meta.get("name") or default_name
        description = meta.get("description", "")
        if strict:
            validate_name(name)
            validate_description(description)

        context = meta.get("context", "inline").strip().lower()
        if strict and context not in ("inline", "fork"):
            raise SkillError(f"Unknown skill context {context!r} for skill {name!r}")

        parameters = None
        if meta.get("parameters"):
            try:
                parameters = json.loads(meta["parameters"])
            except ValueError:
                if strict:
                    raise SkillError(f"Skill {name!r} has invalid JSON parameters")
                parameters = None

        tools = re.split(r"[,\s]+", meta.get("allowed-tools", "").strip())
        return cls(
            name=name,
            description=description,
            context=SkillContext.FORK if context == "fork" else SkillContext.INLINE,
            disable_model_invocation=_flag(meta.get("disable-model-invocation")),
            allowed_tools=tuple(t for t in tools if t),
            script=script,
            parameters=parameters if isinstance(parameters, dict) else None,
            path=path,
        )

    @classmethod
    def load(cls, path: Path) -> "Skill":
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise SkillError(f"Cannot read skill file {path}: {e}") from e
        return cls.parse(content, default_name=path.parent.name, strict=True, path=path)

    def render(self, *args: Any, **kwargs: Any) -> str:
        """Fill `$ARGUMENTS`, positional `$0`..`$n` and named `${key}` placeholders; unknown ones stay."""
        positional = [str(a) for a in args]

        def substitute(match: re.Match) -> str:
            token = match.group(0)
            if token == "$ARGUMENTS":
                return " ".join(positional)
            if match.group(1) is not None:
                key = match.group(1)
                return str(kwargs[key]) if key in kwargs else token
            index = int(match.group(2))
            return positional[index] if index < len(positional) else token

        return _PLACEHOLDER_RE.sub(substitute, self.script)


def load_bundled(name: str) -> Skill:
    """Skill shipped inside the package (e.g. the chain-of-thought `plan` and `thinking` prompts)."""
    content = resources.files("minusagent").joinpath("skills", name, SKILL_FILE).read_text(encoding="utf-8")
    return Skill.parse(content, default_name=name, strict=True)


def not_found_marker(name: str) -> str:
    return f"[skill not found: {name}]"


class SkillRegistry:
    def __init__(self, skills: Optional[List[Skill]] = None):
        self._skills: Dict[str, Skill] = {}
        for skill in skills or []:
            self.add(skill)

    def add(self, skill: Skill) -> bool:
        if skill.name in self._skills:
            logger.warning(f"Duplicate skill {skill.name!r} ignored ({skill.path})")
            return False
        self._skills[skill.name] = skill
        return True

    @classmethod
    def load_dir(cls, skills_dir) -> "SkillRegistry":
        """Load every `<dir>/<skill>/SKILL.md`; invalid skills are logged and skipped."""
        registry = cls()
        root = Path(skills_dir) if skills_dir else None
        if root is None or not root.is_dir():
            logger.info(f"No skills directory at {root}")
            return registry
        for skill_dir in sorted(root.iterdir()):
            skill_file = skill_dir / SKILL_FILE
            if not skill_dir.is_dir() or not skill_file.is_file():
                continue
            try:
                skill = Skill.load(skill_file)
            except SkillError as e:
                logger.warning(f"Skipping skill at {skill_dir}: {e}")
                continue
            registry.add(skill)
        logger.info(f"Loaded {len(registry)} skills from {root}")
        return registry

    def __len__(self) -> int:
        return len(self._skills)

    def __iter__(self) -> Iterator[Skill]:
        return iter(self._skills.values())

    def __contains__(self, name: str) -> bool:
        return name in self._skills

    def get(self, name: str) -> Optional[Skill]:
        return self._skills.get(name)

    def names(self) -> List[str]:
        return list(self._skills)

    def model_invocable(self) -> List[Skill]:
        return [s for s in self._skills.values() if not s.disable_model_invocation]

    def resolve(self, names) -> str:
        """Concatenate the instruction bodies of `names`, with a marker for each unknown name."""
        parts = []
        for name in names:
            skill = self.get(name)
            if skill is None:
                logger.warning(f"Requested skill not found: {name}")
                parts.append(not_found_marker(name))
            else:
                parts.append(f"# Skill: {skill.name}\n\n{skill.script.strip()}")
        return "\n\n".join(parts)
