# TOML reading and writing for the Codex config
from pathlib import Path
from typing import Any

import tomli
import tomli_w

from cfgsync.utils.validation import ConfigParseError


def parse_toml(text: str, path: Path) -> dict[str, Any]:
    """Parse TOML text read from path.

    ABOUTME: Raises ConfigParseError naming the file on syntax errors
    """
    try:
        return tomli.loads(text)
    except tomli.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML in {path}: {e}") from e


def dump_toml(data: dict[str, Any]) -> str:
    """Serialize a document to TOML text.

    ABOUTME: Deterministic for equal input (tomli_w keeps mapping order)
    ABOUTME: Nested tables such as mcp_servers.<name>.env become sub-tables

    Example output:
        [mcp_servers.github]
        command = "npx"
        args = [
            "-y",
            "@modelcontextprotocol/server-github",
        ]
        enabled = true

        [mcp_servers.github.env]
        GITHUB_TOKEN = "ghp_xxxx"
    """
    return tomli_w.dumps(data, multiline_strings=False)
