"""Functional tests for terminal display behavior."""

from rich.console import Console
from rich.theme import Theme

from prompt_sync import display


def _recording_console() -> Console:
    return Console(record=True, force_terminal=False, color_system=None, width=80, theme=Theme(display._THEMES["light"]))


def test_status_lines_are_not_parsed_as_markup(monkeypatch):
    recording_console = _recording_console()
    monkeypatch.setattr(display, "console", recording_console)

    display.display_status("Reading JSON from: data/[red]prompts.json")

    assert recording_console.export_text() == "▸ Reading JSON from: data/[red]prompts.json\n"


def test_prompt_status_lines(monkeypatch):
    recording_console = _recording_console()
    monkeypatch.setattr(display, "console", recording_console)

    display.display_prompt_status("new", "tool-description-bash.md")
    display.display_prompt_status("changed", "agent-prompt-explore.md")
    display.display_prompt_status("changed", "tool-description-bash.md", ["ccVersion 2.0.43 -> 2.0.44", "body"])
    display.display_deleted("old.md")

    assert recording_console.export_text() == (
        "New: tool-description-bash.md\n"
        "Changed: agent-prompt-explore.md\n"
        "Changed: tool-description-bash.md (ccVersion 2.0.43 -> 2.0.44, body)\n"
        "   - Deleted: old.md\n"
    )


def test_summary_table_rows():
    recording_console = _recording_console()
    recording_console.print(display.render_summary_table(new=2, changed=1, unchanged=40, deleted=0))

    text = recording_console.export_text()
    assert "Update complete!" in text
    for label, count in (("New", "2"), ("Changed", "1"), ("Unchanged", "40"), ("Deleted", "0")):
        line = next(l for l in text.splitlines() if f" {label} " in l)
        assert count in line
