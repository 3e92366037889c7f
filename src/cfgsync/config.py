# Runtime configuration for cfgsync
import os
from pathlib import Path

from cfgsync.models import ConfigScope, ToolType

# ABOUTME: Overrides the home directory used for global scope paths
HOME_ENV_VAR = "CFGSYNC_HOME"

# ABOUTME: Watcher tunables (seconds / queue slots)
DEBOUNCE_SECONDS = 0.5
POLL_INTERVAL_SECONDS = 0.1
EVENT_QUEUE_SIZE = 1000

# ABOUTME: Suffix of temp files used for atomic writes; the watcher ignores them
TEMP_SUFFIX = ".cfgsync-tmp"

# ABOUTME: Tool config directories watched under the home directory
GLOBAL_WATCH_DIRS: tuple[tuple[str, ToolType], ...] = (
    (".claude", ToolType.CLAUDE_CODE),
    (".codex", ToolType.CODEX),
    (".gemini", ToolType.GEMINI),
    (".config/opencode", ToolType.OPENCODE),
)

# ABOUTME: Tool config directories watched (and detected) inside a project
PROJECT_WATCH_DIRS: tuple[tuple[str, ToolType], ...] = (
    (".claude", ToolType.CLAUDE_CODE),
    (".codex", ToolType.CODEX),
    (".gemini", ToolType.GEMINI),
    (".opencode", ToolType.OPENCODE),
)


def get_home_dir() -> Path:
    """Return the home directory for global scope paths.

    ABOUTME: Honours CFGSYNC_HOME, falls back to Path.home()
    """
    override = os.environ.get(HOME_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home()


def scope_from(project_path: str | Path | None) -> ConfigScope:
    """Map an optional project path from the boundary to a scope.

    ABOUTME: None or a blank string selects the global scope
    ABOUTME: Surrounding whitespace is trimmed

    Examples:
        >>> scope_from(None).is_global
        True
        >>> scope_from("  /work/app ").project
        PosixPath('/work/app')
    """
    if project_path is None:
        return ConfigScope.global_()
    text = str(project_path).strip()
    if not text:
        return ConfigScope.global_()
    return ConfigScope.for_project(text)
