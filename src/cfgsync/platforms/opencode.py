# OpenCode platform adapter
from pathlib import Path
from typing import Any

from cfgsync.models import ConfigScope, FileSignature, McpServer, ToolType
from cfgsync.platforms.base import (
    BaseAdapter,
    read_json_file,
    read_text_file,
    servers_section,
    sort_servers,
    split_extra,
    string_list,
    string_map,
    write_json_file,
)

MCP_KEY = "mcp"
KNOWN_FIELDS = frozenset({"type", "command", "environment", "url"})


def is_remote_entry(entry: dict[str, Any]) -> bool:
    """Decide whether an OpenCode entry describes a remote server.

    ABOUTME: Explicit type wins; otherwise a url with no command means remote
    """
    server_type = entry.get("type")
    if server_type == "remote":
        return True
    if server_type == "local":
        return False
    return bool(entry.get("url")) and not entry.get("command")


def entry_to_server(name: str, entry: dict[str, Any]) -> McpServer:
    """Convert an OpenCode mcp entry to McpServer.

    ABOUTME: command is one array [program, *args], split back into command/args
    ABOUTME: Local entries never carry a url, remote entries never carry a command
    """
    remote = is_remote_entry(entry)
    command = ""
    args: list[str] = []

    if not remote:
        parts = string_list(entry.get("command"))
        if parts:
            command, args = parts[0], parts[1:]

    url = entry.get("url") if remote else None
    return McpServer(
        name=name,
        command=command,
        args=args,
        env=string_map(entry.get("environment")),
        url=str(url) if url else None,
        enabled=True,
    )


def server_to_entry(server: McpServer, extra: dict[str, Any]) -> dict[str, Any]:
    """Convert McpServer to an OpenCode mcp entry.

    ABOUTME: Always writes an explicit type discriminator
    ABOUTME: Joins command and args into one array for local servers
    """
    remote = server.is_remote
    entry: dict[str, Any] = dict(extra)
    entry["type"] = "remote" if remote else "local"

    if not remote and (server.command or server.args):
        entry["command"] = [server.command, *server.args]
    if server.env:
        entry["environment"] = dict(server.env)
    if remote:
        entry["url"] = server.url
    return entry


class OpenCodeAdapter(BaseAdapter):
    """Adapter for OpenCode (~/.config/opencode/opencode.json).

    ABOUTME: Implements ConfigAdapter protocol for OpenCode
    ABOUTME: Global skills and rules fall back to legacy Claude/agents locations
    """

    tool = ToolType.OPENCODE

    def global_config_path(self) -> Path:
        return self.home / ".config" / "opencode"

    def project_config_path(self, project: Path) -> Path:
        return project / ".opencode"

    def mcp_config_file(self, scope: ConfigScope) -> Path:
        return self.config_dir(scope) / "opencode.json"

    def rules_file(self, scope: ConfigScope) -> Path:
        if scope.project is None:
            return self.global_config_path() / "AGENTS.md"
        return scope.project / "AGENTS.md"

    def legacy_skills_dirs(self) -> list[Path]:
        return [
            self.home / ".claude" / "skills",
            self.home / ".agents" / "skills",
        ]

    def legacy_rules_file(self) -> Path:
        return self.home / ".claude" / "CLAUDE.md"

    def skill_search_dirs(self, scope: ConfigScope) -> list[Path]:
        """Primary skills dir first; global scope adds the legacy fallbacks."""
        dirs = [self.skills_dir(scope)]
        if scope.is_global:
            dirs.extend(self.legacy_skills_dirs())
        return dirs

    def read_rules(self, scope: ConfigScope) -> str:
        """Read AGENTS.md, falling back to ~/.claude/CLAUDE.md for global scope."""
        content = read_text_file(self.rules_file(scope))
        if content is None and scope.is_global:
            content = read_text_file(self.legacy_rules_file())
        return content if content is not None else ""

    def read_mcp_servers(self, scope: ConfigScope) -> list[McpServer]:
        path = self.mcp_config_file(scope)
        data = read_json_file(path)
        if data is None:
            return []

        section = servers_section(data, MCP_KEY, path)
        return sort_servers([entry_to_server(name, entry) for name, entry in section.items()])

    def write_mcp_server(self, server: McpServer, scope: ConfigScope) -> FileSignature:
        """Insert or replace one server under the "mcp" key.

        ABOUTME: Keeps $schema, provider and other OpenCode settings
        """
        path = self.mcp_config_file(scope)
        data = read_json_file(path) or {}

        section = dict(servers_section(data, MCP_KEY, path))
        previous = section.get(server.name, {})
        section[server.name] = server_to_entry(server, split_extra(previous, KNOWN_FIELDS))
        data[MCP_KEY] = section

        return write_json_file(path, data)

    def delete_mcp_server(self, name: str, scope: ConfigScope) -> FileSignature | None:
        path = self.mcp_config_file(scope)
        data = read_json_file(path)
        if data is None:
            return None

        section = dict(servers_section(data, MCP_KEY, path))
        if name not in section:
            return None
        del section[name]
        data[MCP_KEY] = section

        return write_json_file(path, data)
