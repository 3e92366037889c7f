# Cross-tool MCP server conversion
from dataclasses import dataclass, field, replace
from enum import Enum

from cfgsync.models import McpServer, ToolType


class ConfigFormat(str, Enum):
    JSON = "json"
    TOML = "toml"


@dataclass
class ConversionResult:
    """Server adjusted for a destination tool plus what was lost.

    ABOUTME: warnings are ordered and deduplicated by message text
    """
    server: McpServer
    warnings: list[str] = field(default_factory=list)

    def add_warning(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)


def config_format(tool: ToolType) -> ConfigFormat:
    """Native serialization format of a tool's MCP config."""
    return ConfigFormat.TOML if tool is ToolType.CODEX else ConfigFormat.JSON


def requires_format_conversion(from_tool: ToolType, to_tool: ToolType) -> bool:
    return config_format(from_tool) != config_format(to_tool)


def supports_remote(tool: ToolType) -> bool:
    """Whether a tool can store url-based (remote) servers for conversion."""
    return tool in (ToolType.CODEX, ToolType.OPENCODE)


def supports_disable(tool: ToolType) -> bool:
    """Whether a tool can store enabled=false."""
    return tool is ToolType.CODEX


def convert_mcp_server(server: McpServer, from_tool: ToolType, to_tool: ToolType) -> ConversionResult:
    """Adapt a server read from one tool to another tool's constraints.

    ABOUTME: Never fails; lossy adjustments are reported as warnings
    ABOUTME: The input server is not modified

    Rules, in order:
        1. Same tool: unchanged
        2. Blank url becomes None
        3. enabled=false from a tool that supports it to one that doesn't: force enabled
        4. Remote server to a tool without remote support: drop url
        5. Remote server to OpenCode: clear command/args
        6. Local server with blank command: warn
    """
    result = ConversionResult(server=replace(server, args=list(server.args), env=dict(server.env)))

    if from_tool is to_tool:
        return result

    out = result.server
    if out.url is not None and not out.url.strip():
        out = replace(out, url=None)

    if supports_disable(from_tool) and not supports_disable(to_tool) and not out.enabled:
        result.add_warning(
            f"`enabled=false` not supported by {to_tool.display_name}, will be treated as enabled"
        )
        out = replace(out, enabled=True)

    remote = out.is_remote
    if remote and not supports_remote(to_tool):
        result.add_warning(f"`url` not supported by {to_tool.display_name}, dropped")
        out = replace(out, url=None)
        remote = False

    if to_tool is ToolType.OPENCODE and remote:
        if out.command or out.args:
            result.add_warning("OpenCode remote servers ignore `command`/`args`, dropped")
        out = replace(out, command="", args=[])

    if not remote and not out.command.strip():
        result.add_warning("Empty `command` for local server")

    result.server = out
    return result


def convert_mcp_servers(
    servers: list[McpServer], from_tool: ToolType, to_tool: ToolType
) -> list[ConversionResult]:
    return [convert_mcp_server(server, from_tool, to_tool) for server in servers]
