# ABOUTME: Utility modules for cfgsync
# ABOUTME: Exports error types, name validation, frontmatter and TOML helpers

from cfgsync.utils.frontmatter import parse_skill_frontmatter, render_skill
from cfgsync.utils.toml_writer import dump_toml, parse_toml
from cfgsync.utils.validation import (
    ConfigError,
    ConfigIOError,
    ConfigParseError,
    InvalidNameError,
    WatcherError,
    is_valid_name,
    validate_name,
)

__all__ = [
    "ConfigError",
    "ConfigIOError",
    "ConfigParseError",
    "InvalidNameError",
    "WatcherError",
    "is_valid_name",
    "validate_name",
    "parse_skill_frontmatter",
    "render_skill",
    "parse_toml",
    "dump_toml",
]
