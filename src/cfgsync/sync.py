# Config operations exposed to the application boundary
import logging
from collections.abc import Callable, Iterator
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TypeVar

from cfgsync.config import PROJECT_WATCH_DIRS
from cfgsync.converter import convert_mcp_server
from cfgsync.models import ConfigScope, FileSignature, McpServer, Skill, ToolType
from cfgsync.platforms import get_adapter
from cfgsync.platforms.base import SKILL_FILE, BaseAdapter
from cfgsync.utils.validation import ConfigError, validate_name
from cfgsync.watcher import FileWatcher, WriteGuard

logger = logging.getLogger(__name__)

T = TypeVar("T")

MarkWritten = Callable[[Path, FileSignature | None], None]


@dataclass
class CopyResult:
    """Result of copying one MCP server between tools.

    ABOUTME: skipped means the destination already had that name; nothing was written
    ABOUTME: warnings list every lossy adjustment the converter made
    """
    server: McpServer | None = None
    warnings: list[str] = field(default_factory=list)
    skipped: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "server": self.server.to_dict() if self.server else None,
            "warnings": list(self.warnings),
            "skipped": self.skipped,
        }


@dataclass
class SkillCopyResult:
    skipped: bool = False


@dataclass
class ProjectConfigSummary:
    """Per-tool counts shown for a project.

    ABOUTME: Tools whose config can't be read report zero rather than failing
    """
    tool: ToolType
    mcp_count: int
    skills_count: int
    has_rules: bool


def _require_name(name: str, kind: str) -> str:
    name = name.strip()
    if not name:
        raise ValueError(f"{kind} name cannot be empty")
    return name


def detect_tools(project: Path) -> list[ToolType]:
    """Tools with a config directory inside project."""
    return [tool for relative, tool in PROJECT_WATCH_DIRS if (project / relative).is_dir()]


class ConfigService:
    """Read, write and copy tool configuration on behalf of a UI.

    ABOUTME: Every write is bracketed by watcher write guards when a watcher is attached
    ABOUTME: home overrides the user's home directory for global scope
    """

    def __init__(self, watcher: FileWatcher | None = None, home: Path | None = None) -> None:
        self.watcher = watcher
        self.home = home

    def adapter(self, tool: ToolType) -> BaseAdapter:
        return get_adapter(tool, home=self.home)

    @contextmanager
    def _guard(self, *paths: Path) -> Iterator[MarkWritten]:
        """Hold write guards on paths for the duration of a write.

        ABOUTME: Yields mark(path, signature) to record what the adapter wrote to a guarded path
        """
        guards: dict[Path, WriteGuard | None] = {}
        with ExitStack() as stack:
            if self.watcher is not None:
                for path in paths:
                    guards[path] = stack.enter_context(self.watcher.begin_write(path))

            def mark(path: Path, signature: FileSignature | None) -> None:
                guard = guards.get(path)
                if guard is not None:
                    guard.mark_written(signature)

            yield mark

    # MCP servers

    def get_mcp_servers(self, tool: ToolType, scope: ConfigScope) -> list[McpServer]:
        return self.adapter(tool).read_mcp_servers(scope)

    def save_mcp_server(self, tool: ToolType, server: McpServer, scope: ConfigScope) -> None:
        name = _require_name(server.name, "Server")
        if name != server.name:
            server = replace(server, name=name)
        adapter = self.adapter(tool)
        path = adapter.mcp_config_file(scope)
        with self._guard(path) as mark:
            mark(path, adapter.write_mcp_server(server, scope))
        logger.debug(f"Saved MCP server '{server.name}' for {adapter.tool_name} ({scope.label})")

    def delete_mcp_server(self, tool: ToolType, name: str, scope: ConfigScope) -> None:
        name = _require_name(name, "Server")
        adapter = self.adapter(tool)
        path = adapter.mcp_config_file(scope)
        with self._guard(path) as mark:
            mark(path, adapter.delete_mcp_server(name, scope))

    # Skills

    def get_skills(self, tool: ToolType, scope: ConfigScope) -> list[Skill]:
        return self.adapter(tool).read_skills(scope)

    def save_skill(self, tool: ToolType, skill: Skill, scope: ConfigScope) -> None:
        validate_name(skill.name)
        adapter = self.adapter(tool)
        skills_dir = adapter.skills_dir(scope)
        skill_dir = skills_dir / skill.name
        skill_file = skill_dir / SKILL_FILE
        with self._guard(skills_dir, skill_dir, skill_file) as mark:
            mark(skill_file, adapter.write_skill(skill, scope))

    def delete_skill(self, tool: ToolType, name: str, scope: ConfigScope) -> None:
        name = _require_name(name, "Skill")
        validate_name(name)
        adapter = self.adapter(tool)
        skills_dir = adapter.skills_dir(scope)
        skill_dir = skills_dir / name
        with self._guard(skills_dir, skill_dir, skill_dir / SKILL_FILE):
            adapter.delete_skill(name, scope)

    # Rules

    def get_rules(self, tool: ToolType, scope: ConfigScope) -> str:
        return self.adapter(tool).read_rules(scope)

    def save_rules(self, tool: ToolType, content: str, scope: ConfigScope) -> None:
        adapter = self.adapter(tool)
        path = adapter.rules_file(scope)
        with self._guard(path) as mark:
            mark(path, adapter.write_rules(content, scope))

    # Cross-tool copies

    def copy_mcp_to_tool(
        self, from_tool: ToolType, to_tool: ToolType, name: str, scope: ConfigScope
    ) -> CopyResult:
        """Copy one MCP server from one tool to another in the same scope.

        ABOUTME: Existing destination entries are never overwritten (skipped=True)
        ABOUTME: Raises LookupError when the source tool has no such server
        """
        name = _require_name(name, "Server")

        if any(server.name == name for server in self.get_mcp_servers(to_tool, scope)):
            logger.info(f"MCP server '{name}' already exists in {to_tool.display_name}, skipping")
            return CopyResult(skipped=True)

        source = next(
            (server for server in self.get_mcp_servers(from_tool, scope) if server.name == name),
            None,
        )
        if source is None:
            raise LookupError(f"MCP server not found: {name}")

        result = convert_mcp_server(source, from_tool, to_tool)
        for warning in result.warnings:
            logger.warning(f"Copying '{name}' to {to_tool.display_name}: {warning}")

        self.save_mcp_server(to_tool, result.server, scope)
        return CopyResult(server=result.server, warnings=result.warnings, skipped=False)

    def copy_skill_to_tool(
        self, from_tool: ToolType, to_tool: ToolType, name: str, scope: ConfigScope
    ) -> SkillCopyResult:
        name = _require_name(name, "Skill")

        if any(skill.name == name for skill in self.get_skills(to_tool, scope)):
            return SkillCopyResult(skipped=True)

        skill = next(
            (skill for skill in self.get_skills(from_tool, scope) if skill.name == name),
            None,
        )
        if skill is None:
            raise LookupError(f"Skill not found: {name}")

        self.save_skill(to_tool, skill, scope)
        return SkillCopyResult(skipped=False)

    # Projects

    def detect_project_tools(self, path: str | Path) -> list[ToolType]:
        project = Path(str(path).strip())
        if not project.is_dir():
            raise ValueError(f"Not a directory: {path}")
        return detect_tools(project)

    def get_project_config_summary(self, path: str | Path) -> list[ProjectConfigSummary]:
        """Count servers, skills and rules for each tool configured in a project."""
        project = Path(str(path).strip())
        if not project.is_dir():
            raise ValueError(f"Not a directory: {path}")

        scope = ConfigScope.for_project(project)
        summaries = []
        for tool in detect_tools(project):
            adapter = self.adapter(tool)
            summaries.append(
                ProjectConfigSummary(
                    tool=tool,
                    mcp_count=len(_read_or_default(adapter.read_mcp_servers, scope, [])),
                    skills_count=len(_read_or_default(adapter.read_skills, scope, [])),
                    has_rules=bool(_read_or_default(adapter.read_rules, scope, "").strip()),
                )
            )
        return summaries


def _read_or_default(read: Callable[[ConfigScope], T], scope: ConfigScope, default: T) -> T:
    try:
        return read(scope)
    except ConfigError as e:
        logger.warning(f"Failed to read config for {scope.label}: {e}")
        return default
