"""Index document (README) regeneration.

Everything before the ``### Agent Prompts`` sentinel heading is hand-written
preface and is copied verbatim, except for the version header line which is
rewritten on every run. Everything from the sentinel onwards is regenerated
from the current prompt set.
"""

import re
from dataclasses import dataclass
from pathlib import Path

from prompt_sync._fs import atomic_write_text
from prompt_sync.categories import (
    ADDITIONAL_NOTES,
    AGENT_PROMPTS,
    CREATION_ASSISTANTS,
    DATA,
    SLASH_COMMANDS,
    SUB_AGENTS,
    SYSTEM_PROMPT,
    SYSTEM_REMINDERS,
    TOOL_DESCRIPTIONS,
    UTILITIES,
    categorize,
)
from prompt_sync.remote.npm_registry import package_page_url

SENTINEL_HEADING = "### Agent Prompts"
HEADER_LINE_INDEX = 2
BOLD_PROMPT_NAME = "System Prompt: Main system prompt"

HEADER_TEMPLATE = (
    "This repository contains an up-to-date list of all Claude Code's various system prompts "
    "and their associated token counts as of **[Claude Code v{version}]({url}){date}.**  "
    "It also contains a [**CHANGELOG.md**](./CHANGELOG.md) for the system prompts across "
    "{version_count} versions since v2.0.14.  From the team behind "
    '[<img src="https://github.com/Piebald-AI/piebald/raw/main/assets/logo.svg" width="15"> '
    "**Piebald.**](https://piebald.ai/)"
)

REMINDERS_NOTE = (
    "> [!NOTE]",
    "> Note that we're planning to add a **system reminder creator/editor** to "
    "[tweakcc](https://github.com/Piebald-AI/tweakcc); :+1: "
    "[this issue](https://github.com/Piebald-AI/tweakcc/issues/113) if you're interested in that idea.",
)

MAIN = None

# Leaf groups that receive entries, keyed by (category, subcategory)
SECTION_KEYS: tuple[tuple[str, str | None], ...] = (
    (AGENT_PROMPTS, SUB_AGENTS),
    (AGENT_PROMPTS, CREATION_ASSISTANTS),
    (AGENT_PROMPTS, SLASH_COMMANDS),
    (AGENT_PROMPTS, UTILITIES),
    (DATA, MAIN),
    (SYSTEM_PROMPT, MAIN),
    (SYSTEM_REMINDERS, MAIN),
    (TOOL_DESCRIPTIONS, MAIN),
    (TOOL_DESCRIPTIONS, ADDITIONAL_NOTES),
)


@dataclass(frozen=True)
class IndexEntry:
    name: str
    description: str
    filename: str
    tokens: int


def normalize_description(description: str) -> str:
    """Collapse embedded newlines (and following indentation) to single spaces."""
    return re.sub(r"\s*\n\s*", " ", description).strip()


def format_entry(entry: IndexEntry, link_prefix: str) -> str:
    """``- [Name](path) (**N** tks) - description.``"""
    label = f"**{entry.name}**" if entry.name == BOLD_PROMPT_NAME else entry.name
    path = f"{link_prefix}/{entry.filename}"
    return f"- [{label}]({path}) (**{entry.tokens}** tks) - {normalize_description(entry.description)}."


def group_entries(entries: list[IndexEntry], link_prefix: str) -> dict[tuple[str, str | None], list[str]]:
    """Bucket rendered entry lines into leaf groups, each sorted by its literal text.

    Entries whose category has no section (e.g. "Other") are left out.
    """
    groups: dict[tuple[str, str | None], list[str]] = {key: [] for key in SECTION_KEYS}
    for entry in entries:
        category = categorize(entry.name)
        key = (category.name, category.subcategory)
        if key in groups:
            groups[key].append(format_entry(entry, link_prefix))
    for lines in groups.values():
        lines.sort()
    return groups


def build_header_line(
    version: str,
    release_date: str | None,
    version_count: int,
    package: str,
) -> str:
    return HEADER_TEMPLATE.format(
        version=version,
        url=package_page_url(package, version),
        date=f" ({release_date})" if release_date else "",
        version_count=version_count,
    )


def split_preface(previous: str | None) -> list[str]:
    """Lines of the previous document before the sentinel heading."""
    if not previous:
        return []
    preface: list[str] = []
    for line in previous.split("\n"):
        if line.startswith(SENTINEL_HEADING):
            break
        preface.append(line)
    return preface


def _section(title: str, intro: tuple[str, ...], entries: list[str]) -> list[str]:
    lines = [title, ""]
    for paragraph in intro:
        lines.extend([paragraph, ""])
    lines.extend(entries)
    lines.append("")
    return lines


def render_index(
    previous: str | None,
    groups: dict[tuple[str, str | None], list[str]],
    header_line: str,
) -> str:
    """Assemble the full index document text."""
    lines = split_preface(previous)
    while len(lines) <= HEADER_LINE_INDEX:
        lines.append("")
    lines[HEADER_LINE_INDEX] = header_line

    lines += [SENTINEL_HEADING, "", "Sub-agents and utilities.", ""]
    lines += _section("#### Sub-agents", (), groups[(AGENT_PROMPTS, SUB_AGENTS)])
    lines += _section("### Creation Assistants", (), groups[(AGENT_PROMPTS, CREATION_ASSISTANTS)])
    lines += _section("### Slash commands", (), groups[(AGENT_PROMPTS, SLASH_COMMANDS)])
    lines += _section("### Utilities", (), groups[(AGENT_PROMPTS, UTILITIES)])

    data_entries = groups[(DATA, MAIN)]
    if data_entries:
        lines.append("<!--")
        lines += _section("### Data", ("Misc large strings.",), data_entries)[:-1]
        lines += ["-->", ""]

    lines += _section("### System Prompt", ("Parts of the main system prompt.",), groups[(SYSTEM_PROMPT, MAIN)])
    lines += _section(
        "### System Reminders",
        ("Text for large system reminders.", "\n".join(REMINDERS_NOTE)),
        groups[(SYSTEM_REMINDERS, MAIN)],
    )
    lines += _section("### Builtin Tool Descriptions", (), groups[(TOOL_DESCRIPTIONS, MAIN)])
    lines += _section(f"**{ADDITIONAL_NOTES}**", (), groups[(TOOL_DESCRIPTIONS, ADDITIONAL_NOTES)])

    return "\n".join(lines)


def read_index(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def write_index(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    atomic_write_text(path, text)
