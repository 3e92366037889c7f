# Claude Code platform adapter
from pathlib import Path
from typing import Any

from cfgsync.models import ConfigScope, FileSignature, McpServer, ToolType
from cfgsync.platforms.base import (
    BaseAdapter,
    read_json_file,
    servers_section,
    sort_servers,
    split_extra,
    string_list,
    string_map,
    write_json_file,
)

MCP_KEY = "mcpServers"
KNOWN_FIELDS = frozenset({"command", "args", "env", "url"})


def entry_to_server(name: str, entry: dict[str, Any]) -> McpServer:
    """Convert a Claude mcpServers entry to McpServer.

    ABOUTME: Missing command reads as empty string
    ABOUTME: Claude has no enable flag so servers are always enabled
    """
    url = entry.get("url")
    return McpServer(
        name=name,
        command=str(entry.get("command") or ""),
        args=string_list(entry.get("args")),
        env=string_map(entry.get("env")),
        url=str(url) if url else None,
        enabled=True,
    )


def server_to_entry(server: McpServer, extra: dict[str, Any]) -> dict[str, Any]:
    """Convert McpServer to a Claude mcpServers entry.

    ABOUTME: Unrecognized keys from the previous entry are carried over
    ABOUTME: Omits empty env dict and empty url for cleaner output
    """
    entry: dict[str, Any] = dict(extra)
    entry["command"] = server.command
    entry["args"] = list(server.args)
    if server.env:
        entry["env"] = dict(server.env)
    if server.url:
        entry["url"] = server.url
    return entry


class ClaudeAdapter(BaseAdapter):
    """Adapter for Claude Code (~/.claude/.mcp.json, <project>/.claude/.mcp.json).

    ABOUTME: Implements ConfigAdapter protocol for Claude Code
    ABOUTME: Rules live in CLAUDE.md, skills under .claude/skills/
    """

    tool = ToolType.CLAUDE_CODE

    def global_config_path(self) -> Path:
        return self.home / ".claude"

    def project_config_path(self, project: Path) -> Path:
        return project / ".claude"

    def mcp_config_file(self, scope: ConfigScope) -> Path:
        return self.config_dir(scope) / ".mcp.json"

    def rules_file(self, scope: ConfigScope) -> Path:
        if scope.project is None:
            return self.global_config_path() / "CLAUDE.md"
        return scope.project / "CLAUDE.md"

    def read_mcp_servers(self, scope: ConfigScope) -> list[McpServer]:
        """Load MCP servers from the scope's .mcp.json.

        ABOUTME: Returns empty list if config doesn't exist
        """
        path = self.mcp_config_file(scope)
        data = read_json_file(path)
        if data is None:
            return []

        section = servers_section(data, MCP_KEY, path)
        return sort_servers([entry_to_server(name, entry) for name, entry in section.items()])

    def write_mcp_server(self, server: McpServer, scope: ConfigScope) -> FileSignature:
        """Insert or replace one server, preserving the rest of the file."""
        path = self.mcp_config_file(scope)
        data = read_json_file(path) or {}

        section = dict(servers_section(data, MCP_KEY, path))
        previous = section.get(server.name, {})
        section[server.name] = server_to_entry(server, split_extra(previous, KNOWN_FIELDS))
        data[MCP_KEY] = section

        return write_json_file(path, data)

    def delete_mcp_server(self, name: str, scope: ConfigScope) -> FileSignature | None:
        """Remove one server; absent files and names are a no-op."""
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
