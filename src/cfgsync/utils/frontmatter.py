# ABOUTME: SKILL.md frontmatter parsing and rendering
# ABOUTME: Header is a small YAML mapping with required name and optional description
import logging
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DELIMITER = "---"


def parse_skill_frontmatter(text: str) -> tuple[str, str | None, str] | None:
    """Split a skill file into (name, description, body).

    ABOUTME: Returns None for anything malformed so callers can skip the file
    ABOUTME: Body is everything after the closing marker, leading whitespace trimmed

    Examples:
        >>> parse_skill_frontmatter("---\\nname: demo\\n---\\n\\n# Body")
        ('demo', None, '# Body')
    """
    text = text.lstrip()
    if not text.startswith(DELIMITER):
        return None

    rest = text[len(DELIMITER):]
    end = rest.find("\n" + DELIMITER)
    if end == -1:
        return None

    header = rest[:end]
    body = rest[end + len(DELIMITER) + 1:].lstrip()

    try:
        data = yaml.safe_load(header)
    except yaml.YAMLError as e:
        logger.debug(f"Invalid skill frontmatter: {e}")
        return None

    if not isinstance(data, dict):
        return None

    name = data.get("name")
    if not isinstance(name, str) or not name:
        return None

    description = data.get("description")
    if description is not None and not isinstance(description, str):
        description = str(description)

    return name, description, body


def render_skill(name: str, description: str | None, content: str) -> str:
    """Build SKILL.md text from its parts.

    ABOUTME: Content is appended unchanged after a blank line
    """
    header: dict[str, Any] = {"name": name}
    if description is not None:
        header["description"] = description

    yaml_text = yaml.safe_dump(header, sort_keys=False, allow_unicode=True)
    return f"{DELIMITER}\n{yaml_text}{DELIMITER}\n\n{content}"
