# cfgsync - MCP server, skill and rules sync across AI coding tools
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models and the scope helper
from cfgsync.config import scope_from
from cfgsync.converter import ConversionResult, convert_mcp_server, convert_mcp_servers
from cfgsync.models import (
    ConfigAdapter,
    ConfigChangeEvent,
    ConfigScope,
    McpServer,
    Skill,
    ToolType,
)
from cfgsync.platforms import get_adapter, get_all_adapters
from cfgsync.sync import ConfigService, CopyResult, ProjectConfigSummary

# ABOUTME: Export error types
from cfgsync.utils import (
    ConfigError,
    ConfigIOError,
    ConfigParseError,
    InvalidNameError,
    WatcherError,
)
from cfgsync.watcher import FileWatcher

__all__ = [
    "__version__",
    "ConfigAdapter",
    "ConfigChangeEvent",
    "ConfigScope",
    "McpServer",
    "Skill",
    "ToolType",
    "scope_from",
    "get_adapter",
    "get_all_adapters",
    "ConversionResult",
    "convert_mcp_server",
    "convert_mcp_servers",
    "ConfigService",
    "CopyResult",
    "ProjectConfigSummary",
    "FileWatcher",
    "ConfigError",
    "ConfigIOError",
    "ConfigParseError",
    "InvalidNameError",
    "WatcherError",
]
