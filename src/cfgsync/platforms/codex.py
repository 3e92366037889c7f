# Codex CLI platform adapter
from pathlib import Path
from typing import Any

from cfgsync.models import ConfigScope, FileSignature, McpServer, ToolType
from cfgsync.platforms.base import (
    BaseAdapter,
    read_text_file,
    servers_section,
    sort_servers,
    split_extra,
    string_list,
    string_map,
    write_text_file,
)
from cfgsync.utils.toml_writer import dump_toml, parse_toml

MCP_KEY = "mcp_servers"
KNOWN_FIELDS = frozenset({"command", "args", "env", "url", "enabled"})


def entry_to_server(name: str, entry: dict[str, Any]) -> McpServer:
    """Convert a Codex [mcp_servers.<name>] table to McpServer.

    ABOUTME: enabled is native to Codex and defaults to true when absent
    """
    url = entry.get("url")
    return McpServer(
        name=name,
        command=str(entry.get("command") or ""),
        args=string_list(entry.get("args")),
        env=string_map(entry.get("env")),
        url=str(url) if url else None,
        enabled=bool(entry.get("enabled", True)),
    )


def server_to_entry(server: McpServer, extra: dict[str, Any]) -> dict[str, Any]:
    """Convert McpServer to a Codex server table.

    ABOUTME: command, args and enabled are always written
    ABOUTME: Unrecognized keys (startup_timeout_sec, cwd, ...) are carried over
    """
    entry: dict[str, Any] = {
        "command": server.command,
        "args": list(server.args),
    }
    if server.env:
        entry["env"] = dict(server.env)
    if server.url:
        entry["url"] = server.url
    entry["enabled"] = server.enabled
    for key, value in extra.items():
        entry.setdefault(key, value)
    return entry


class CodexAdapter(BaseAdapter):
    """Adapter for Codex CLI (~/.codex/config.toml).

    ABOUTME: Implements ConfigAdapter protocol for Codex CLI
    ABOUTME: Uses snake_case mcp_servers key (not mcpServers)
    ABOUTME: Skills live in the shared .agents/skills root, not under .codex
    """

    tool = ToolType.CODEX

    def global_config_path(self) -> Path:
        return self.home / ".codex"

    def project_config_path(self, project: Path) -> Path:
        return project / ".codex"

    def mcp_config_file(self, scope: ConfigScope) -> Path:
        return self.config_dir(scope) / "config.toml"

    def skills_dir(self, scope: ConfigScope) -> Path:
        base = self.home if scope.project is None else scope.project
        return base / ".agents" / "skills"

    def rules_file(self, scope: ConfigScope) -> Path:
        if scope.project is None:
            return self.global_config_path() / "AGENTS.md"
        return scope.project / "AGENTS.md"

    def _load(self, path: Path) -> dict[str, Any] | None:
        text = read_text_file(path)
        if text is None:
            return None
        return parse_toml(text, path)

    def read_mcp_servers(self, scope: ConfigScope) -> list[McpServer]:
        """Load MCP servers from config.toml.

        ABOUTME: Returns empty list if config doesn't exist
        ABOUTME: Raises ConfigParseError on invalid TOML
        """
        path = self.mcp_config_file(scope)
        data = self._load(path)
        if data is None:
            return []

        section = servers_section(data, MCP_KEY, path)
        return sort_servers([entry_to_server(name, entry) for name, entry in section.items()])

    def write_mcp_server(self, server: McpServer, scope: ConfigScope) -> FileSignature:
        """Insert or replace one server table.

        ABOUTME: Other top-level settings (model, profiles, ...) are preserved
        ABOUTME: Server tables are kept sorted by name
        """
        path = self.mcp_config_file(scope)
        data = self._load(path) or {}

        section = dict(servers_section(data, MCP_KEY, path))
        previous = section.get(server.name, {})
        section[server.name] = server_to_entry(server, split_extra(previous, KNOWN_FIELDS))
        data[MCP_KEY] = dict(sorted(section.items()))

        return write_text_file(path, dump_toml(data))

    def delete_mcp_server(self, name: str, scope: ConfigScope) -> FileSignature | None:
        path = self.mcp_config_file(scope)
        data = self._load(path)
        if data is None:
            return None

        section = dict(servers_section(data, MCP_KEY, path))
        if name not in section:
            return None
        del section[name]
        data[MCP_KEY] = section

        return write_text_file(path, dump_toml(data))
