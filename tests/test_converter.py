# Tests for cross-tool MCP server conversion
from pathlib import Path

import pytest

from cfgsync.converter import (
    ConfigFormat,
    config_format,
    convert_mcp_server,
    convert_mcp_servers,
    requires_format_conversion,
    supports_disable,
    supports_remote,
)
from cfgsync.models import ConfigScope, McpServer, ToolType
from cfgsync.platforms import get_adapter


def test_same_tool_no_warnings():
    server = McpServer(name="test", command="", url="  ", enabled=False)
    result = convert_mcp_server(server, ToolType.CODEX, ToolType.CODEX)

    assert result.warnings == []
    assert result.server == server


def test_result_is_a_copy():
    server = McpServer(name="test", command="npx", args=["a"], env={"K": "v"})
    result = convert_mcp_server(server, ToolType.CLAUDE_CODE, ToolType.GEMINI)

    result.server.args.append("b")
    result.server.env["X"] = "y"
    assert server.args == ["a"]
    assert server.env == {"K": "v"}


def test_format_detection():
    assert config_format(ToolType.CODEX) is ConfigFormat.TOML
    assert config_format(ToolType.CLAUDE_CODE) is ConfigFormat.JSON
    assert requires_format_conversion(ToolType.CLAUDE_CODE, ToolType.CODEX)
    assert not requires_format_conversion(ToolType.CLAUDE_CODE, ToolType.GEMINI)


def test_capabilities():
    assert [tool for tool in ToolType if supports_remote(tool)] == [ToolType.CODEX, ToolType.OPENCODE]
    assert [tool for tool in ToolType if supports_disable(tool)] == [ToolType.CODEX]


def test_disabled_remote_to_claude():
    """Disabled remote Codex server loses both enabled=false and url."""
    server = McpServer(name="api", command="npx", url="https://example.com/mcp", enabled=False)
    result = convert_mcp_server(server, ToolType.CODEX, ToolType.CLAUDE_CODE)

    assert result.server.enabled is True
    assert result.server.url is None
    assert result.warnings == [
        "`enabled=false` not supported by Claude Code, will be treated as enabled",
        "`url` not supported by Claude Code, dropped",
    ]


def test_remote_with_empty_command_also_warns():
    server = McpServer(name="api", url="http://example.com")
    result = convert_mcp_server(server, ToolType.CODEX, ToolType.CLAUDE_CODE)

    assert result.server.url is None
    assert "`url` not supported by Claude Code, dropped" in result.warnings
    assert "Empty `command` for local server" in result.warnings


def test_disabled_only_warns_when_leaving_codex():
    server = McpServer(name="x", command="echo", enabled=False)

    assert convert_mcp_server(server, ToolType.CLAUDE_CODE, ToolType.GEMINI).warnings == []
    kept = convert_mcp_server(server, ToolType.CLAUDE_CODE, ToolType.CODEX)
    assert kept.server.enabled is False
    assert kept.warnings == []


def test_remote_to_opencode_clears_command():
    server = McpServer(name="api", command="npx", args=["x"], url="https://example.com/mcp")
    result = convert_mcp_server(server, ToolType.CODEX, ToolType.OPENCODE)

    assert result.server.command == ""
    assert result.server.args == []
    assert result.server.url == "https://example.com/mcp"
    assert result.warnings == ["OpenCode remote servers ignore `command`/`args`, dropped"]


def test_blank_url_normalized():
    server = McpServer(name="local", command="npx", url="   ")
    result = convert_mcp_server(server, ToolType.OPENCODE, ToolType.CODEX)

    assert result.server.url is None
    assert result.warnings == []


def test_empty_local_command_warns():
    result = convert_mcp_server(McpServer(name="bad"), ToolType.CLAUDE_CODE, ToolType.GEMINI)
    assert result.warnings == ["Empty `command` for local server"]


@pytest.mark.parametrize("source", [ToolType.CLAUDE_CODE, ToolType.CODEX, ToolType.GEMINI])
def test_local_server_through_opencode_keeps_command(tmp_path: Path, source):
    """Command and args survive a trip through OpenCode's combined command array."""
    scope = ConfigScope.global_()
    server = McpServer(name="fs", command="npx", args=["-y", "@scope/server", "--flag=1"])

    to_opencode = convert_mcp_server(server, source, ToolType.OPENCODE)
    opencode = get_adapter(ToolType.OPENCODE, home=tmp_path)
    opencode.write_mcp_server(to_opencode.server, scope)
    stored = opencode.read_mcp_servers(scope)[0]

    back = convert_mcp_server(stored, ToolType.OPENCODE, source)

    assert back.server.command == "npx"
    assert back.server.args == ["-y", "@scope/server", "--flag=1"]
    assert to_opencode.warnings == []
    assert back.warnings == []


def test_convert_many():
    servers = [McpServer(name="a", command="x"), McpServer(name="b")]
    results = convert_mcp_servers(servers, ToolType.CLAUDE_CODE, ToolType.CODEX)

    assert [result.server.name for result in results] == ["a", "b"]
    assert results[0].warnings == []
    assert results[1].warnings == ["Empty `command` for local server"]
