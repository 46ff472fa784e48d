"""Prompt name -> (category, subcategory) classification.

Classification is an ordered rule table: the first rule whose name prefix
matches decides the category, and its subcategory resolver (if any) sees the
name with that prefix stripped.
"""

from dataclasses import dataclass
from typing import Callable

AGENT_PROMPTS = "Agent Prompts"
SYSTEM_PROMPT = "System Prompt"
SYSTEM_REMINDERS = "System Reminders"
TOOL_DESCRIPTIONS = "Builtin Tool Descriptions"
DATA = "Data"
OTHER = "Other"

SUB_AGENTS = "Sub-agents"
CREATION_ASSISTANTS = "Creation Assistants"
SLASH_COMMANDS = "Slash commands"
UTILITIES = "Utilities"
ADDITIONAL_NOTES = "Additional notes for some Tool Descriptions"

# Matched against the start of the name (after "Agent Prompt: ")
SUB_AGENT_NAMES = ("Explore", "Plan mode (enhanced)", "Task tool")
# Matched anywhere in the name (after "Agent Prompt: ")
CREATION_ASSISTANT_NAMES = ("Agent creation architect", "CLAUDE.md creation", "Status line setup")


@dataclass(frozen=True)
class Category:
    name: str
    subcategory: str | None = None


@dataclass(frozen=True)
class AgentRule:
    predicate: Callable[[str], bool]
    subcategory: str


AGENT_RULES: tuple[AgentRule, ...] = (
    AgentRule(lambda rest: any(rest.startswith(n) for n in SUB_AGENT_NAMES), SUB_AGENTS),
    AgentRule(lambda rest: any(n in rest for n in CREATION_ASSISTANT_NAMES), CREATION_ASSISTANTS),
    AgentRule(lambda rest: "slash command" in rest or rest.startswith("/"), SLASH_COMMANDS),
    AgentRule(lambda rest: True, UTILITIES),
)


def _agent_subcategory(rest: str) -> str:
    return next(rule.subcategory for rule in AGENT_RULES if rule.predicate(rest))


def _tool_subcategory(rest: str) -> str | None:
    # Bare parenthesis check; "Bash (sandbox note)" style names are notes
    if "(" in rest and ")" in rest:
        return ADDITIONAL_NOTES
    return None


@dataclass(frozen=True)
class CategoryRule:
    prefix: str
    category: str
    subcategory: Callable[[str], str | None] | None = None


CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule("Agent Prompt: ", AGENT_PROMPTS, _agent_subcategory),
    CategoryRule("System Prompt: ", SYSTEM_PROMPT),
    CategoryRule("System Reminder: ", SYSTEM_REMINDERS),
    CategoryRule("Tool Description: ", TOOL_DESCRIPTIONS, _tool_subcategory),
    CategoryRule("Data: ", DATA),
)


def categorize(name: str) -> Category:
    """Classify a prompt name. Total: unmatched names land in "Other"."""
    for rule in CATEGORY_RULES:
        if name.startswith(rule.prefix):
            rest = name[len(rule.prefix):]
            sub = rule.subcategory(rest) if rule.subcategory else None
            return Category(rule.category, sub)
    return Category(OTHER)
