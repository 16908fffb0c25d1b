"""YAML front-matter parsing for agent and command definitions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from csf.validator.errors import FrontmatterError

DELIMITER = "---"

# "Bash(git:*)" declares the Bash capability
_TOOL_ARGUMENT_SUFFIX = re.compile(r"\(.*\)$")
# Commas inside an argument list do not separate tools
_TOOL_SEPARATOR = re.compile(r",(?![^()]*\))")


@dataclass(frozen=True)
class Frontmatter:
    """Parsed front-matter fields and the markdown body after it."""

    fields: Dict[str, Any] = field(default_factory=dict)
    body: str = ""

    def get_stripped(self, key: str) -> Optional[str]:
        """Return a stripped string field, or None if absent, null or blank."""
        value = self.fields.get(key)
        if not isinstance(value, str):
            return None
        stripped = value.strip()
        return stripped if stripped else None


def parse_frontmatter(text: str) -> Frontmatter:
    """Split a markdown document into front-matter fields and body.

    Raises:
        FrontmatterError: If the document does not open with ``---``, the
            block is never closed, the YAML is invalid, or it is not a mapping.
    """
    lines = text.splitlines()
    if not lines or lines[0].strip() != DELIMITER:
        raise FrontmatterError("document does not start with '---'")

    closing = None
    for index in range(1, len(lines)):
        if lines[index].strip() == DELIMITER:
            closing = index
            break
    if closing is None:
        raise FrontmatterError("front-matter block is not closed with '---'")

    block = "\n".join(lines[1:closing])
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise FrontmatterError(f"invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(f"front matter must be a mapping (got {type(data).__name__})")

    body = "\n".join(lines[closing + 1:])
    return Frontmatter(fields=data, body=body)


def parse_tools(value: Any) -> List[str]:
    """Normalise a ``tools`` field to a list of capability names.

    Accepts a YAML list (``[Read, Write]``) or a comma-separated string
    (``Read, Write``). Anything else yields an empty list.

    Examples:
        >>> parse_tools("Read, Bash(git:*)")
        ['Read', 'Bash']
    """
    if isinstance(value, str):
        items = _TOOL_SEPARATOR.split(value)
    elif isinstance(value, list):
        items = [str(item) for item in value if item is not None]
    else:
        return []

    tools = []
    for item in items:
        name = _TOOL_ARGUMENT_SUFFIX.sub("", item.strip()).strip()
        if name:
            tools.append(name)
    return tools
