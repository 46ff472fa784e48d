"""Deterministic prompt name -> markdown filename mapping."""

import re

# (name prefix, filename prefix), first match wins
NAME_PREFIXES: tuple[tuple[str, str], ...] = (
    ("Agent Prompt: ", "agent-prompt-"),
    ("System Prompt: ", "system-prompt-"),
    ("System Reminder: ", "system-reminder-"),
    ("Tool Description: ", "tool-description-"),
    ("Data: ", "data-"),
)


def slugify(text: str) -> str:
    """Lowercase, hyphenate whitespace, keep only ``[a-z0-9_-]``."""
    slug = re.sub(r"\s+", "-", text.lower())
    slug = re.sub(r"[^a-z0-9_-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def filename_for(name: str) -> str:
    """Return the markdown filename for a prompt name.

    Examples:
        "Agent Prompt: Explore" -> "agent-prompt-explore.md"
        "Tool Description: Bash (sandbox note)" -> "tool-description-bash-sandbox-note.md"

    Not injective: distinct names may map to the same file.
    """
    prefix = ""
    remainder = name
    for name_prefix, file_prefix in NAME_PREFIXES:
        if name.startswith(name_prefix):
            prefix = file_prefix
            remainder = name[len(name_prefix):]
            break
    return f"{prefix}{slugify(remainder)}.md"
