# Platform adapter base utilities
import contextlib
import json
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, cast

from cfgsync.config import TEMP_SUFFIX, get_home_dir
from cfgsync.models import ConfigScope, FileSignature, McpServer, Skill, ToolType
from cfgsync.utils.frontmatter import parse_skill_frontmatter, render_skill
from cfgsync.utils.validation import ConfigIOError, ConfigParseError, validate_name

logger = logging.getLogger(__name__)

SKILL_FILE = "SKILL.md"


def read_text_file(path: Path) -> str | None:
    """Read a UTF-8 text file.

    ABOUTME: Returns None if the file doesn't exist
    ABOUTME: Raises ConfigIOError for any other read failure
    """
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigIOError(f"Failed to read {path}: {e}") from e


def write_text_file(path: Path, content: str) -> FileSignature:
    """Write a text file atomically.

    ABOUTME: Creates parent directories if needed
    ABOUTME: Writes a sibling temp file then renames it over the target
    ABOUTME: Returns the signature of the written file, taken before the rename
    """
    try:
        data = content.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ConfigIOError(f"Failed to write {path}: {e}") from e

    ensure_dir(path.parent)

    try:
        mode = path.stat().st_mode & 0o777
    except OSError:
        mode = 0o644

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=TEMP_SUFFIX, dir=path.parent)
    except OSError as e:
        raise ConfigIOError(f"Failed to write {path}: {e}") from e

    replaced = False
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp_name, mode)
        # rename keeps inode, size and mtime, so this is the target's signature too
        st = os.stat(tmp_name)
        os.replace(tmp_name, path)
        replaced = True
    except OSError as e:
        raise ConfigIOError(f"Failed to write {path}: {e}") from e
    finally:
        if not replaced:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)

    return (st.st_ino, st.st_size, st.st_mtime_ns)


def ensure_dir(path: Path) -> None:
    """Create a directory and its parents."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigIOError(f"Failed to create dir {path}: {e}") from e


def read_json_file(path: Path) -> dict[str, Any] | None:
    """Read JSON file with error handling.

    ABOUTME: Returns None if file doesn't exist
    ABOUTME: Raises ConfigParseError for invalid JSON or a non-object document
    """
    text = read_text_file(path)
    if text is None:
        return None

    try:
        result = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigParseError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(result, dict):
        raise ConfigParseError(f"Invalid JSON in {path}: expected an object at top level")
    return cast(dict[str, Any], result)


def write_json_file(path: Path, data: dict[str, Any]) -> FileSignature:
    """Write JSON file with error handling.

    ABOUTME: 2-space indentation, sorted keys, trailing newline
    """
    text = json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"
    return write_text_file(path, text)


def servers_section(data: dict[str, Any], key: str, path: Path) -> dict[str, dict[str, Any]]:
    """Return the server map stored under key, validating its shape.

    ABOUTME: Missing section means no servers
    ABOUTME: Every entry must itself be a mapping
    """
    section = data.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigParseError(f"Invalid config in {path}: '{key}' must be a table of servers")

    for name, entry in section.items():
        if not isinstance(entry, dict):
            raise ConfigParseError(f"Invalid config in {path}: server '{name}' must be a table")
    return cast(dict[str, dict[str, Any]], section)


def split_extra(entry: dict[str, Any], known: frozenset[str]) -> dict[str, Any]:
    """Collect keys of a native entry that the adapter doesn't model."""
    return {key: value for key, value in entry.items() if key not in known}


def string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def string_map(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) for key, item in value.items()}


def sort_servers(servers: list[McpServer]) -> list[McpServer]:
    return sorted(servers, key=lambda server: server.name)


def load_skills_from_dirs(dirs: list[Path]) -> list[Skill]:
    """Load skills from one or more skills directories.

    ABOUTME: Each skill is <dir>/<name>/SKILL.md with YAML frontmatter
    ABOUTME: Unreadable or malformed skill files are skipped, not fatal
    ABOUTME: Earlier directories win when two define the same skill name
    """
    skills: list[Skill] = []
    seen: set[str] = set()

    for skills_dir in dirs:
        if not skills_dir.is_dir():
            continue

        try:
            entries = sorted(skills_dir.iterdir())
        except OSError as e:
            raise ConfigIOError(f"Failed to read {skills_dir}: {e}") from e

        for entry in entries:
            if not entry.is_dir():
                continue

            skill_file = entry / SKILL_FILE
            try:
                text = skill_file.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue

            parsed = parse_skill_frontmatter(text)
            if parsed is None:
                logger.debug(f"Skipping skill with malformed frontmatter: {skill_file}")
                continue

            name, description, body = parsed
            if name in seen:
                continue
            seen.add(name)
            skills.append(Skill(name=name, description=description, content=body, path=entry))

    return sorted(skills, key=lambda skill: skill.name)


class BaseAdapter(ABC):
    """Shared skills and rules handling for tool adapters.

    ABOUTME: Subclasses provide path derivation and the MCP server format
    ABOUTME: home defaults to the user's home directory
    """

    tool: ToolType

    def __init__(self, home: Path | None = None) -> None:
        self._home = home

    @property
    def home(self) -> Path:
        return self._home if self._home is not None else get_home_dir()

    @property
    def tool_name(self) -> str:
        """Human-readable tool name."""
        return self.tool.display_name

    def config_dir(self, scope: ConfigScope) -> Path:
        if scope.project is None:
            return self.global_config_path()
        return self.project_config_path(scope.project)

    @abstractmethod
    def global_config_path(self) -> Path:
        """Tool config directory under the user's home."""

    @abstractmethod
    def project_config_path(self, project: Path) -> Path:
        """Tool config directory inside a project."""

    @abstractmethod
    def mcp_config_file(self, scope: ConfigScope) -> Path:
        """File holding the MCP server definitions for scope."""

    def skills_dir(self, scope: ConfigScope) -> Path:
        return self.config_dir(scope) / "skills"

    def skill_search_dirs(self, scope: ConfigScope) -> list[Path]:
        """Directories read by read_skills, highest priority first."""
        return [self.skills_dir(scope)]

    @abstractmethod
    def rules_file(self, scope: ConfigScope) -> Path:
        """Instruction file for scope."""

    @abstractmethod
    def read_mcp_servers(self, scope: ConfigScope) -> list[McpServer]:
        """Servers in scope, sorted by name."""

    @abstractmethod
    def write_mcp_server(self, server: McpServer, scope: ConfigScope) -> FileSignature:
        """Upsert one server, preserving unmodelled settings."""

    @abstractmethod
    def delete_mcp_server(self, name: str, scope: ConfigScope) -> FileSignature | None:
        """Remove one server; None when the file was left untouched."""

    def read_skills(self, scope: ConfigScope) -> list[Skill]:
        return load_skills_from_dirs(self.skill_search_dirs(scope))

    def write_skill(self, skill: Skill, scope: ConfigScope) -> FileSignature:
        """Create or replace a skill directory.

        ABOUTME: Validates the name before touching the filesystem
        """
        validate_name(skill.name)
        skill_dir = self.skills_dir(scope) / skill.name
        return write_text_file(
            skill_dir / SKILL_FILE,
            render_skill(skill.name, skill.description, skill.content),
        )

    def delete_skill(self, name: str, scope: ConfigScope) -> None:
        """Remove a skill directory; absent skills are a no-op."""
        validate_name(name)
        skill_dir = self.skills_dir(scope) / name
        if not skill_dir.exists():
            return
        try:
            shutil.rmtree(skill_dir)
        except OSError as e:
            raise ConfigIOError(f"Failed to delete {skill_dir}: {e}") from e

    def read_rules(self, scope: ConfigScope) -> str:
        content = read_text_file(self.rules_file(scope))
        return content if content is not None else ""

    def write_rules(self, content: str, scope: ConfigScope) -> FileSignature:
        return write_text_file(self.rules_file(scope), content)
