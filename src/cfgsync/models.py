# Core data models for cfgsync
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

# ABOUTME: Identity of one version of a file on disk: (inode, size, mtime_ns)
FileSignature = tuple[int, int, int]


class ToolType(str, Enum):
    """Supported AI coding-agent tools.

    ABOUTME: Values are the wire form used at the application boundary
    ABOUTME: Drives adapter selection and converter capability checks
    """
    CLAUDE_CODE = "ClaudeCode"
    CODEX = "Codex"
    GEMINI = "Gemini"
    OPENCODE = "OpenCode"

    @property
    def display_name(self) -> str:
        """Human-readable tool name."""
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: str) -> "ToolType":
        """Parse a tool name from user input.

        ABOUTME: Accepts enum values and short aliases, case-insensitively
        """
        key = value.strip().lower()
        for tool in cls:
            if key == tool.value.lower():
                return tool
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValueError(f"Unknown tool: {value}")


_DISPLAY_NAMES = {
    ToolType.CLAUDE_CODE: "Claude Code",
    ToolType.CODEX: "Codex",
    ToolType.GEMINI: "Gemini",
    ToolType.OPENCODE: "OpenCode",
}

_ALIASES = {
    "claude": ToolType.CLAUDE_CODE,
    "claude-code": ToolType.CLAUDE_CODE,
    "codex": ToolType.CODEX,
    "gemini": ToolType.GEMINI,
    "opencode": ToolType.OPENCODE,
}


@dataclass(frozen=True)
class ConfigScope:
    """Where configuration lives: user home (global) or a project directory.

    ABOUTME: project is None for the global scope
    ABOUTME: All adapter path derivations are pure functions of (tool, scope)
    """
    project: Path | None = None

    @classmethod
    def global_(cls) -> "ConfigScope":
        return cls()

    @classmethod
    def for_project(cls, path: str | Path) -> "ConfigScope":
        return cls(project=Path(path))

    @property
    def is_global(self) -> bool:
        return self.project is None

    @property
    def label(self) -> str:
        """Scope label carried by change events ("global" or the project path)."""
        return "global" if self.project is None else str(self.project)


@dataclass(frozen=True)
class McpServer:
    """Tool-agnostic MCP server configuration.

    ABOUTME: Remote when url is non-empty, local otherwise
    ABOUTME: enabled only matters for tools that can disable a server
    """
    name: str
    command: str = ""
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    url: str | None = None
    enabled: bool = True

    @property
    def is_remote(self) -> bool:
        return bool(self.url and self.url.strip())

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "command": self.command,
            "args": list(self.args),
            "env": dict(self.env),
            "url": self.url,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "McpServer":
        return cls(
            name=data["name"],
            command=data.get("command") or "",
            args=list(data.get("args") or []),
            env=dict(data.get("env") or {}),
            url=data.get("url"),
            enabled=data.get("enabled", True),
        )


@dataclass(frozen=True)
class Skill:
    """Reusable instruction bundle stored as <skills_dir>/<name>/SKILL.md.

    ABOUTME: path is informational (directory the skill was read from)
    """
    name: str
    description: str | None = None
    content: str = ""
    path: Path = field(default_factory=Path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "content": self.content,
            "path": str(self.path),
        }


@dataclass(frozen=True)
class WatchRoot:
    """A directory monitored by the watcher, owned by one tool and scope."""
    path: Path
    tool: ToolType
    scope: str


@dataclass(frozen=True)
class ConfigChangeEvent:
    """Notification that a watched config file changed outside the app."""
    tool: ToolType
    path: str
    scope: str

    def to_dict(self) -> dict[str, str]:
        return {"tool": self.tool.value, "path": self.path, "scope": self.scope}


@runtime_checkable
class ConfigAdapter(Protocol):
    """Protocol for per-tool config adapters.

    ABOUTME: Defines interface all tool adapters must implement
    ABOUTME: Reads of absent files return empty results, deletes of absent names are no-ops
    """

    @property
    def tool(self) -> ToolType:
        ...

    @property
    def tool_name(self) -> str:
        """Human-readable tool name."""
        ...

    def global_config_path(self) -> Path:
        """Tool config directory under the user's home."""
        ...

    def project_config_path(self, project: Path) -> Path:
        """Tool config directory inside a project."""
        ...

    def mcp_config_file(self, scope: ConfigScope) -> Path:
        ...

    def skills_dir(self, scope: ConfigScope) -> Path:
        ...

    def rules_file(self, scope: ConfigScope) -> Path:
        ...

    def read_mcp_servers(self, scope: ConfigScope) -> list[McpServer]:
        ...

    def write_mcp_server(self, server: McpServer, scope: ConfigScope) -> FileSignature:
        """Upsert one server; returns the signature of the file written."""
        ...

    def delete_mcp_server(self, name: str, scope: ConfigScope) -> FileSignature | None:
        """Remove one server; None when nothing was written."""
        ...

    def read_skills(self, scope: ConfigScope) -> list[Skill]:
        ...

    def write_skill(self, skill: Skill, scope: ConfigScope) -> FileSignature:
        ...

    def delete_skill(self, name: str, scope: ConfigScope) -> None:
        ...

    def read_rules(self, scope: ConfigScope) -> str:
        ...

    def write_rules(self, content: str, scope: ConfigScope) -> FileSignature:
        ...
