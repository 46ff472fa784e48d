import asyncio
import logging
from pathlib import Path

import typer
from rich.logging import RichHandler

from prompt_sync.config import settings
from prompt_sync.deps import create_deps
from prompt_sync.display import console, display_error, display_info, render_summary_table, set_theme
from prompt_sync.pipeline import InputError, MissingCredentialError, update_from_json

app = typer.Typer(
    help="Sync extracted prompt strings from a JSON export into markdown files and the README index.",
    context_settings={"help_option_names": ["--help", "-h"]},
    add_completion=False,
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=verbose, markup=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.INFO if verbose else logging.WARNING)


@app.command()
def update(
    json_path: Path = typer.Argument(..., help="Path to the prompts JSON export, e.g. data/prompts/prompts-2.0.44.json"),
    prompts_dir: Path = typer.Option(None, "--prompts-dir", "-d", help="Directory holding one markdown file per prompt"),
    readme: Path = typer.Option(None, "--readme", "-r", help="Index document to regenerate"),
    theme: str = typer.Option(None, "--theme", "-t", help="Color theme: dark or light"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Update prompt files and the README index from a prompts JSON export."""
    if theme:
        set_theme(theme)
    _setup_logging(verbose)

    if not settings.anthropic_api_key:
        display_error(
            "ANTHROPIC_API_KEY environment variable is required",
            hint="Set it with: export ANTHROPIC_API_KEY=your-api-key",
        )
        raise typer.Exit(code=1)

    deps = create_deps(settings, prompts_dir=prompts_dir, readme_path=readme)
    try:
        report = asyncio.run(update_from_json(json_path, deps))
    except (InputError, MissingCredentialError) as e:
        display_error(str(e))
        raise typer.Exit(code=1)

    if not (report.new or report.changed or report.deleted):
        display_info("No prompt changes; index regenerated.")
    console.print(render_summary_table(
        new=len(report.new),
        changed=len(report.changed),
        unchanged=len(report.unchanged),
        deleted=len(report.deleted),
    ))


if __name__ == "__main__":
    app()
