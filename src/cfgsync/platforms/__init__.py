# Platform adapter registry
from pathlib import Path

from cfgsync.models import ConfigAdapter, ToolType
from cfgsync.platforms.base import BaseAdapter
from cfgsync.platforms.claude import ClaudeAdapter
from cfgsync.platforms.codex import CodexAdapter
from cfgsync.platforms.gemini import GeminiAdapter
from cfgsync.platforms.opencode import OpenCodeAdapter

# Registry of all available platform adapters, one per tool
ADAPTERS: dict[ToolType, type[BaseAdapter]] = {
    ToolType.CLAUDE_CODE: ClaudeAdapter,
    ToolType.CODEX: CodexAdapter,
    ToolType.GEMINI: GeminiAdapter,
    ToolType.OPENCODE: OpenCodeAdapter,
}

__all__ = [
    "ConfigAdapter",
    "BaseAdapter",
    "ClaudeAdapter",
    "CodexAdapter",
    "GeminiAdapter",
    "OpenCodeAdapter",
    "ADAPTERS",
    "get_adapter",
    "get_all_adapters",
]


def get_adapter(tool: ToolType, home: Path | None = None) -> BaseAdapter:
    """Instantiate the adapter for a tool.

    ABOUTME: home overrides the user's home directory for global scope
    """
    return ADAPTERS[tool](home=home)


def get_all_adapters(home: Path | None = None) -> list[BaseAdapter]:
    """Instantiate and return all platform adapters.

    ABOUTME: Creates instances of all registered adapters
    ABOUTME: Returns list for easy iteration
    """
    return [adapter_cls(home=home) for adapter_cls in ADAPTERS.values()]
