# Tests for CLI commands and exit codes
import os
import subprocess
import sys
from pathlib import Path

import pytest

from cfgsync.cli import EXIT_CONFIG_ERROR, EXIT_PARTIAL, EXIT_SUCCESS, main
from cfgsync.config import HOME_ENV_VAR
from cfgsync.models import ConfigScope, McpServer, Skill, ToolType
from cfgsync.sync import ConfigService

GLOBAL = ConfigScope.global_()


@pytest.fixture
def home(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.setenv(HOME_ENV_VAR, str(tmp_path))
    return tmp_path


@pytest.fixture
def service(home: Path) -> ConfigService:
    return ConfigService(home=home)


def test_no_command_prints_help(capsys):
    assert main([]) == EXIT_SUCCESS
    assert "usage" in capsys.readouterr().out.lower()


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0
    assert "cfgsync v0.1.0" in capsys.readouterr().out


def test_unknown_tool_is_usage_error(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["servers", "cursor"])
    assert exc_info.value.code == 2
    assert "Unknown tool" in capsys.readouterr().err


def test_servers_lists_entries(home, service, capsys):
    service.save_mcp_server(ToolType.CODEX, McpServer(name="fs", command="npx", args=["-y", "fs"]), GLOBAL)
    service.save_mcp_server(
        ToolType.CODEX, McpServer(name="api", url="https://example.com/mcp", enabled=False), GLOBAL
    )

    assert main(["servers", "codex"]) == EXIT_SUCCESS

    out = capsys.readouterr().out
    assert "MCP servers for Codex (global)" in out
    assert "command: npx -y fs" in out
    assert "url: https://example.com/mcp" in out
    assert "disabled" in out
    assert "Total: 2 server(s)" in out


def test_servers_project_scope(home, service, tmp_path, capsys):
    project = tmp_path / "proj"
    service.save_mcp_server(
        ToolType.CLAUDE_CODE, McpServer(name="local", command="x"), ConfigScope.for_project(project)
    )

    assert main(["servers", "claude", "--project", str(project)]) == EXIT_SUCCESS
    assert "local" in capsys.readouterr().out


def test_servers_invalid_config(home, capsys):
    (home / ".gemini").mkdir()
    (home / ".gemini" / "settings.json").write_text("{oops")

    assert main(["servers", "gemini"]) == EXIT_CONFIG_ERROR
    assert "Invalid JSON" in capsys.readouterr().err


def test_skills_and_rules(home, service, capsys):
    service.save_skill(ToolType.CLAUDE_CODE, Skill(name="review", description="Reviews", content="x"), GLOBAL)
    service.save_rules(ToolType.CLAUDE_CODE, "Be kind.", GLOBAL)

    assert main(["skills", "claude"]) == EXIT_SUCCESS
    assert "review - Reviews" in capsys.readouterr().out

    assert main(["rules", "claude"]) == EXIT_SUCCESS
    assert capsys.readouterr().out == "Be kind.\n"


def test_copy_mcp(home, service, capsys):
    service.save_mcp_server(
        ToolType.CODEX, McpServer(name="api", command="npx", url="https://example.com/mcp"), GLOBAL
    )

    assert main(["copy-mcp", "codex", "claude", "api"]) == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert "Copied 'api' from Codex to Claude Code" in out
    assert "Warning: `url` not supported by Claude Code, dropped" in out

    assert main(["copy-mcp", "codex", "claude", "api"]) == EXIT_PARTIAL
    assert "skipped" in capsys.readouterr().out


def test_copy_mcp_missing(home, capsys):
    assert main(["copy-mcp", "claude", "codex", "ghost"]) == EXIT_CONFIG_ERROR
    assert "MCP server not found: ghost" in capsys.readouterr().err


def test_copy_skill(home, service, capsys):
    service.save_skill(ToolType.GEMINI, Skill(name="deploy", content="x"), GLOBAL)

    assert main(["copy-skill", "gemini", "opencode", "deploy"]) == EXIT_SUCCESS
    assert (home / ".config" / "opencode" / "skills" / "deploy" / "SKILL.md").is_file()
    assert main(["copy-skill", "gemini", "opencode", "deploy"]) == EXIT_PARTIAL


def test_detect_and_summary(home, service, tmp_path, capsys):
    project = tmp_path / "proj"
    service.save_mcp_server(
        ToolType.CLAUDE_CODE, McpServer(name="a", command="x"), ConfigScope.for_project(project)
    )
    (project / ".opencode").mkdir()

    assert main(["detect", str(project)]) == EXIT_SUCCESS
    assert capsys.readouterr().out.splitlines() == ["Claude Code", "OpenCode"]

    assert main(["summary", str(project)]) == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert "Claude Code: 1 server(s), 0 skill(s), rules: no" in out
    assert "OpenCode: 0 server(s), 0 skill(s), rules: no" in out


def test_detect_missing_directory(home, tmp_path, capsys):
    assert main(["detect", str(tmp_path / "missing")]) == EXIT_CONFIG_ERROR
    assert "Not a directory" in capsys.readouterr().err


class TestCliIntegration:
    """Integration tests that run the CLI via subprocess."""

    def test_integration_module_invocation(self, tmp_path: Path):
        """Test that python -m cfgsync works."""
        result = subprocess.run(
            [sys.executable, "-m", "cfgsync", "--version"],
            capture_output=True,
            text=True,
            timeout=10,
        )

        assert result.returncode == 0
        assert "cfgsync" in result.stdout

    def test_integration_servers_empty_home(self, tmp_path: Path):
        env = {**os.environ, HOME_ENV_VAR: str(tmp_path)}
        result = subprocess.run(
            [sys.executable, "-m", "cfgsync", "servers", "opencode"],
            capture_output=True,
            text=True,
            timeout=10,
            env=env,
        )

        assert result.returncode == 0
        assert "Total: 0 server(s)" in result.stdout
