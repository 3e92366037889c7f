# ABOUTME: Error types shared by adapters, converter callers and the watcher
# ABOUTME: Skill name validation guarding every skills directory join
import ntpath
import posixpath


class ConfigError(Exception):
    """Base class for cfgsync errors.

    ABOUTME: Messages are display-ready and carry the offending path or name
    """


class ConfigParseError(ConfigError, ValueError):
    """Native config file content could not be parsed."""


class ConfigIOError(ConfigError, OSError):
    """A read, write, mkdir or remove failed."""


class InvalidNameError(ConfigError, ValueError):
    """A skill name is not a single path-safe component."""


class WatcherError(ConfigError, RuntimeError):
    """The OS-level file watcher could not be created."""


def is_valid_name(name: str) -> bool:
    """Check that a name is exactly one normal path component.

    ABOUTME: Rejects empty, ".", "..", absolute and multi-segment names
    ABOUTME: Checks both POSIX and Windows separators

    Examples:
        >>> is_valid_name("valid-name")
        True
        >>> is_valid_name("../evil")
        False
    """
    if not name or name in (".", ".."):
        return False
    if posixpath.isabs(name) or ntpath.isabs(name):
        return False
    if "/" in name or "\\" in name or "\x00" in name:
        return False
    # Drive-relative names such as "C:foo"
    if ntpath.splitdrive(name)[0]:
        return False
    return True


def validate_name(name: str) -> None:
    """Raise InvalidNameError unless name is a single path-safe component."""
    if not is_valid_name(name):
        raise InvalidNameError(f"Invalid name: {name}")
