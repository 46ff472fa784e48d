"""Prompt file serialization: HTML-comment metadata header + body.

Persisted prompt files look like:

    <!--
    name: 'Tool Description: Bash'
    description: Run shell commands
    ccVersion: 2.0.44
    variables:
      - BASH_TOOL_NAME
    -->
    Runs shell commands.

The header is YAML-shaped but is written without YAML escaping, so parsing
falls back to line-level extraction when the header is not valid YAML.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from prompt_sync.models import Prompt

logger = logging.getLogger(__name__)

_HEADER_RE = re.compile(r"<!--\n(.*?)\n-->\n?", re.DOTALL)
_NAME_RE = re.compile(r"name: '(.+)'")
_DESCRIPTION_RE = re.compile(r"description: (.+?)(?=\nccVersion:)", re.DOTALL)
_VERSION_RE = re.compile(r"^ccVersion: (.*)$", re.MULTILINE)
_VARIABLE_RE = re.compile(r"^  - (.*)$", re.MULTILINE)


@dataclass
class PromptDocument:
    """A persisted prompt file split into metadata and body."""

    name: str | None
    description: str | None
    version: str | None
    body: str
    full_content: str
    variables: list[str] = field(default_factory=list)


def _format_description(description: str) -> str:
    if "\n" in description:
        return ">\n  " + description.replace("\n", "\n  ")
    return description


def render_document(prompt: Prompt, body: str) -> str:
    """Serialize a prompt and its reconstructed body. Always newline-terminated."""
    lines = [
        "<!--",
        f"name: '{prompt.name}'",
        f"description: {_format_description(prompt.description)}",
        f"ccVersion: {prompt.version}",
    ]
    variables = prompt.variables
    if variables:
        lines.append("variables:")
        lines.extend(f"  - {var}" for var in variables)
    lines.append("-->")

    content = "\n".join(lines) + "\n" + body
    if not content.endswith("\n"):
        content += "\n"
    return content


def _load_header_yaml(header: str) -> dict[str, Any] | None:
    # BaseLoader keeps every scalar a string ("2.10" must not become 2.1)
    try:
        data = yaml.load(header, Loader=yaml.BaseLoader)
    except yaml.YAMLError:
        return None
    if not isinstance(data, dict):
        return None
    return data


def _extract_header_fields(header: str) -> dict[str, Any]:
    """Line-level extraction for headers that are not valid YAML."""
    name = _NAME_RE.search(header)
    description = _DESCRIPTION_RE.search(header)
    version = _VERSION_RE.search(header)
    variables: list[str] = []
    if "\nvariables:\n" in header:
        variables = _VARIABLE_RE.findall(header.split("\nvariables:\n", 1)[1])
    return {
        "name": name.group(1) if name else None,
        "description": (
            re.sub(r">\n\s+", "", description.group(1)).strip() if description else None
        ),
        "ccVersion": version.group(1) if version else None,
        "variables": variables,
    }


def parse_document(content: str) -> PromptDocument | None:
    """Split a persisted prompt file into metadata and body.

    Returns None when no metadata header is present.
    """
    match = _HEADER_RE.search(content)
    if not match:
        return None

    header = match.group(1)
    fields = _load_header_yaml(header)
    if fields is None:
        fields = _extract_header_fields(header)

    variables = fields.get("variables") or []
    if not isinstance(variables, list):
        variables = []

    description = fields.get("description")
    return PromptDocument(
        name=fields.get("name"),
        description=description.strip() if isinstance(description, str) else None,
        version=fields.get("ccVersion"),
        body=content[match.end():],
        full_content=content,
        variables=[str(v) for v in variables],
    )


def read_document(path: Path) -> PromptDocument | None:
    """Read and parse a persisted prompt file.

    Unreadable or header-less files are reported as absent (None).
    """
    if not path.exists():
        return None
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to read {path}: {e}")
        return None

    document = parse_document(content)
    if document is None:
        logger.warning(f"No metadata header in {path}; treating as new")
    return document


def same_content(existing: str, rendered: str) -> bool:
    """Whitespace-trimmed full-text equality."""
    return existing.strip() == rendered.strip()
