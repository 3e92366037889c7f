# Gemini CLI platform adapter
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
KNOWN_FIELDS = frozenset({"command", "args", "env", "httpUrl"})


def entry_to_server(name: str, entry: dict[str, Any]) -> McpServer:
    """Convert a Gemini mcpServers entry to McpServer.

    ABOUTME: Remote servers are detected by the camelCase httpUrl key
    ABOUTME: Gemini has no enable flag, servers always read as enabled
    """
    http_url = entry.get("httpUrl")
    return McpServer(
        name=name,
        command=str(entry.get("command") or ""),
        args=string_list(entry.get("args")),
        env=string_map(entry.get("env")),
        url=str(http_url) if http_url else None,
        enabled=True,
    )


def server_to_entry(server: McpServer, extra: dict[str, Any]) -> dict[str, Any]:
    """Convert McpServer to a Gemini mcpServers entry.

    ABOUTME: Empty command, args and env are omitted
    """
    entry: dict[str, Any] = dict(extra)
    if server.command:
        entry["command"] = server.command
    if server.args:
        entry["args"] = list(server.args)
    if server.env:
        entry["env"] = dict(server.env)
    if server.url:
        entry["httpUrl"] = server.url
    return entry


class GeminiAdapter(BaseAdapter):
    """Adapter for Gemini CLI (~/.gemini/settings.json).

    ABOUTME: Implements ConfigAdapter protocol for Gemini CLI
    ABOUTME: Preserves other settings like selectedAuthType, theme
    """

    tool = ToolType.GEMINI

    def global_config_path(self) -> Path:
        return self.home / ".gemini"

    def project_config_path(self, project: Path) -> Path:
        return project / ".gemini"

    def mcp_config_file(self, scope: ConfigScope) -> Path:
        return self.config_dir(scope) / "settings.json"

    def rules_file(self, scope: ConfigScope) -> Path:
        if scope.project is None:
            return self.global_config_path() / "GEMINI.md"
        return scope.project / "GEMINI.md"

    def read_mcp_servers(self, scope: ConfigScope) -> list[McpServer]:
        """Load MCP servers from settings.json.

        ABOUTME: Returns empty list if config doesn't exist
        """
        path = self.mcp_config_file(scope)
        data = read_json_file(path)
        if data is None:
            return []

        section = servers_section(data, MCP_KEY, path)
        return sort_servers([entry_to_server(name, entry) for name, entry in section.items()])

    def write_mcp_server(self, server: McpServer, scope: ConfigScope) -> FileSignature:
        """Insert or replace one server, keeping non-MCP settings."""
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
