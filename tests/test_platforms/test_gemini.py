# Tests for Gemini CLI platform adapter
import json
from pathlib import Path

import pytest

from cfgsync.models import ConfigScope, McpServer
from cfgsync.platforms.gemini import GeminiAdapter
from cfgsync.utils.validation import ConfigIOError, ConfigParseError

GLOBAL = ConfigScope.global_()


def test_gemini_paths(tmp_path: Path) -> None:
    adapter = GeminiAdapter(home=tmp_path)
    project = ConfigScope.for_project(tmp_path / "proj")

    assert adapter.mcp_config_file(GLOBAL) == tmp_path / ".gemini" / "settings.json"
    assert adapter.mcp_config_file(project) == tmp_path / "proj" / ".gemini" / "settings.json"
    assert adapter.skills_dir(GLOBAL) == tmp_path / ".gemini" / "skills"
    assert adapter.rules_file(GLOBAL) == tmp_path / ".gemini" / "GEMINI.md"
    assert adapter.rules_file(project) == tmp_path / "proj" / "GEMINI.md"


def test_gemini_load_http_url(tmp_path: Path) -> None:
    """Remote servers are stored under the camelCase httpUrl key."""
    settings = tmp_path / ".gemini" / "settings.json"
    settings.parent.mkdir()
    settings.write_text(
        json.dumps(
            {
                "mcpServers": {
                    "remote": {"httpUrl": "https://example.com/mcp"},
                    "local": {"command": "uvx", "args": ["server"]},
                }
            }
        )
    )

    local, remote = GeminiAdapter(home=tmp_path).read_mcp_servers(GLOBAL)

    assert local.command == "uvx"
    assert local.url is None
    assert remote.url == "https://example.com/mcp"
    assert remote.enabled is True


def test_gemini_write_preserves_settings(tmp_path: Path) -> None:
    """Test that non-MCP settings like theme are preserved."""
    settings = tmp_path / ".gemini" / "settings.json"
    settings.parent.mkdir()
    settings.write_text(json.dumps({"theme": "GitHub", "selectedAuthType": "oauth-personal"}))

    adapter = GeminiAdapter(home=tmp_path)
    adapter.write_mcp_server(McpServer(name="remote", url="https://example.com/mcp"), GLOBAL)

    data = json.loads(settings.read_text())
    assert data["theme"] == "GitHub"
    assert data["selectedAuthType"] == "oauth-personal"
    assert data["mcpServers"] == {"remote": {"httpUrl": "https://example.com/mcp"}}


def test_gemini_write_then_read(tmp_path: Path) -> None:
    adapter = GeminiAdapter(home=tmp_path)
    server = McpServer(name="fs", command="npx", args=["-y", "fs"], env={"K": "v"})

    adapter.write_mcp_server(server, GLOBAL)

    assert adapter.read_mcp_servers(GLOBAL) == [server]


def test_gemini_delete_missing_is_noop(tmp_path: Path) -> None:
    settings = tmp_path / ".gemini" / "settings.json"
    settings.parent.mkdir()
    original = '{"theme":"GitHub"}'
    settings.write_text(original)

    GeminiAdapter(home=tmp_path).delete_mcp_server("missing", GLOBAL)

    assert settings.read_text() == original


def test_gemini_invalid_json(tmp_path: Path) -> None:
    settings = tmp_path / ".gemini" / "settings.json"
    settings.parent.mkdir()
    settings.write_text("not json")

    with pytest.raises(ConfigParseError):
        GeminiAdapter(home=tmp_path).read_mcp_servers(GLOBAL)


def test_gemini_write_is_idempotent(tmp_path: Path) -> None:
    adapter = GeminiAdapter(home=tmp_path)
    settings = tmp_path / ".gemini" / "settings.json"
    server = McpServer(name="fs", command="npx", args=["-y", "fs"], env={"ROOT": "/tmp"})

    adapter.write_mcp_server(server, GLOBAL)
    first = settings.read_bytes()
    adapter.write_mcp_server(server, GLOBAL)

    assert settings.read_bytes() == first


def test_gemini_write_preserves_server_fields(tmp_path: Path) -> None:
    """Per-server settings Gemini understands but cfgsync doesn't model survive an overwrite."""
    settings = tmp_path / ".gemini" / "settings.json"
    settings.parent.mkdir()
    settings.write_text(
        json.dumps({"mcpServers": {"fs": {"command": "npx", "timeout": 30, "trust": True}}})
    )

    GeminiAdapter(home=tmp_path).write_mcp_server(McpServer(name="fs", command="uvx"), GLOBAL)

    entry = json.loads(settings.read_text())["mcpServers"]["fs"]
    assert entry == {"command": "uvx", "timeout": 30, "trust": True}


def test_gemini_unencodable_settings_leave_no_temp_file(tmp_path: Path) -> None:
    """A lone surrogate escape decodes fine but can't be written back as UTF-8."""
    settings = tmp_path / ".gemini" / "settings.json"
    settings.parent.mkdir()
    settings.write_text('{"note": "\\ud83d"}')

    with pytest.raises(ConfigIOError, match="Failed to write"):
        GeminiAdapter(home=tmp_path).write_mcp_server(McpServer(name="fs", command="npx"), GLOBAL)

    assert [p.name for p in settings.parent.iterdir()] == ["settings.json"]
    assert settings.read_text() == '{"note": "\\ud83d"}'
