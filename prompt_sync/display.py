"""Themed terminal display: console, semantic styles and display helpers."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from prompt_sync.config import settings

# -- Theme palettes (keyed by theme name) ------------------------------------

_THEMES: dict[str, dict[str, str]] = {
    "dark":  {"status": "yellow",      "info": "cyan", "accent": "bold cyan",  "error": "bold red", "success": "green", "warning": "orange3", "new": "green", "changed": "yellow", "deleted": "red", "hint": "dim"},
    "light": {"status": "dark_orange", "info": "blue", "accent": "bold blue",  "error": "bold red", "success": "green", "warning": "orange3", "new": "green", "changed": "dark_orange", "deleted": "red", "hint": "dim"},
}

# -- Console (single instance, themed) --------------------------------------

console = Console(theme=Theme(_THEMES.get(settings.theme, _THEMES["light"])))
err_console = Console(stderr=True, theme=Theme(_THEMES.get(settings.theme, _THEMES["light"])))

# -- Indicators ------------------------------------------------------------

BULLET      = "▸"
SUCCESS     = "✦"
ERROR       = "✖"
INFO        = "◈"

# -- Theme switching -------------------------------------------------------


def set_theme(name: str) -> None:
    """Switch the console theme at runtime (e.g. from --theme flag)."""
    for c in (console, err_console):
        c.push_theme(Theme(_THEMES.get(name, _THEMES["light"])))


# -- Display helpers -------------------------------------------------------


def display_status(message: str, style: str | None = None) -> None:
    """Themed bullet + message."""
    s = style or "status"
    console.print(f"[{s}]{BULLET} {escape(message)}[/{s}]", highlight=False)


def display_error(message: str, hint: str | None = None) -> None:
    """Red-bordered panel on stderr with optional recovery hint."""
    body = f"[bold red]{ERROR} {escape(message)}[/bold red]"
    if hint:
        body += f"\n[dim]{escape(hint)}[/dim]"
    err_console.print(Panel(body, border_style="red", title="Error", title_align="left"))


def display_info(message: str) -> None:
    """Themed info message."""
    console.print(f"[info]{INFO} {message}[/info]")


def display_prompt_status(status: str, filename: str, changes: list[str] | None = None) -> None:
    """``New: file.md`` / ``Changed: file.md (body)`` as each prompt is classified."""
    detail = f" ({escape(', '.join(changes))})" if changes else ""
    console.print(f"[{status}]{status.capitalize()}: {filename}{detail}[/{status}]", highlight=False)


def display_deleted(filename: str) -> None:
    console.print(f"[deleted]   - Deleted: {filename}[/deleted]", highlight=False)


def render_summary_table(new: int, changed: int, unchanged: int, deleted: int) -> Table:
    """Final per-classification counts."""
    table = Table(title=f"{SUCCESS} Update complete!", title_style="success", show_header=False)
    table.add_column("Classification", style="accent")
    table.add_column("Count", justify="right")
    table.add_row("New", str(new))
    table.add_row("Changed", str(changed))
    table.add_row("Unchanged", str(unchanged))
    table.add_row("Deleted", str(deleted))
    return table
