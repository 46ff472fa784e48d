"""One sync run: export JSON -> prompt files -> token counts -> index document."""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

import httpx
from pydantic import ValidationError

from prompt_sync.categories import OTHER, categorize
from prompt_sync.deps import SyncDeps
from prompt_sync.display import display_deleted, display_prompt_status, display_status
from prompt_sync.models import PromptExport
from prompt_sync.remote.npm_registry import get_release_date
from prompt_sync.remote.token_count import CountRequest, count_tokens_batch, parse_published_counts
from prompt_sync.render import IndexEntry, build_header_line, group_entries, read_index, render_index, write_index
from prompt_sync.sync import Classification, SyncResult, sync_prompts

logger = logging.getLogger(__name__)

_VERSION_FILE_RE = re.compile(r"^prompts-[\d.]+\.json$")


class InputError(Exception):
    """The export JSON could not be read or does not match the expected shape."""


class MissingCredentialError(Exception):
    """A required credential is not configured."""


@dataclass
class RunReport:
    version: str
    new: list[str] = field(default_factory=list)
    changed: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    counted: int = 0
    release_date: str | None = None


def load_export(json_path: Path) -> PromptExport:
    """Read and validate the export. Raises InputError; nothing is written."""
    try:
        raw = json_path.read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Cannot read {json_path}: {e}") from e
    try:
        return PromptExport.model_validate(json.loads(raw))
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON in {json_path}: {e}") from e
    except ValidationError as e:
        raise InputError(f"Unexpected export structure in {json_path}: {e}") from e


def count_version_files(directory: Path) -> int:
    """Number of ``prompts-<version>.json`` exports alongside the input."""
    return sum(1 for p in directory.iterdir() if p.is_file() and _VERSION_FILE_RE.match(p.name))


def _report_status(status: Classification, filename: str, changes: list[str]) -> None:
    if status is Classification.DELETED:
        display_deleted(filename)
    else:
        display_prompt_status(status.value, filename, changes)


async def _measure(client: httpx.AsyncClient, result: SyncResult, deps: SyncDeps) -> dict[str, int]:
    requests = [CountRequest(r.filename, r.body) for r in result.to_count]
    if not requests:
        return {}
    display_status(f"Counting tokens for {len(requests)} new/changed prompts...", style="info")
    return await count_tokens_batch(client, requests, deps)


def resolve_token_counts(
    result: SyncResult,
    measured: dict[str, int],
    published: dict[str, int],
) -> dict[str, int]:
    """Fresh counts for new/changed prompts, published counts for unchanged ones."""
    counts: dict[str, int] = {}
    for filename, record in result.records.items():
        source = measured if record.needs_count else published
        counts[filename] = source.get(filename, 0)
    return counts


async def update_from_json(
    json_path: Path,
    deps: SyncDeps,
    *,
    client: httpx.AsyncClient | None = None,
) -> RunReport:
    """Synchronize the prompt files and index document with one export.

    Input problems raise InputError and a missing API key raises
    MissingCredentialError, both before anything is written.
    """
    if not deps.anthropic_api_key:
        raise MissingCredentialError("ANTHROPIC_API_KEY environment variable is required")

    display_status(f"Reading JSON from: {json_path}")
    export = load_export(json_path)
    display_status(f"Version: {export.version}")
    display_status(f"Prompts count: {len(export.prompts)}")

    version_count = count_version_files(json_path.resolve().parent)
    previous_index = read_index(deps.readme_path)
    published = parse_published_counts(previous_index) if previous_index else {}

    result = sync_prompts(export.prompts, deps.prompts_dir, report=_report_status)

    for record in result.records.values():
        if categorize(record.prompt.name).name == OTHER:
            logger.warning(f"'{record.prompt.name}' matches no category; not listed in the index")

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=deps.http_timeout)
    try:
        measured = await _measure(client, result, deps)
        display_status("Fetching npm release date...", style="info")
        release_date = await get_release_date(client, export.version, deps)
    finally:
        if owns_client:
            await client.aclose()

    counts = resolve_token_counts(result, measured, published)

    display_status(f"Updating {deps.readme_path.name}...", style="info")
    entries = [
        IndexEntry(
            name=r.prompt.name,
            description=r.prompt.description,
            filename=filename,
            tokens=counts[filename],
        )
        for filename, r in result.records.items()
    ]
    text = render_index(
        previous_index,
        group_entries(entries, deps.link_prefix),
        build_header_line(export.version, release_date, version_count, deps.npm_package),
    )
    write_index(deps.readme_path, text)

    return RunReport(
        version=export.version,
        new=[r.filename for r in result.with_status(Classification.NEW)],
        changed=[r.filename for r in result.with_status(Classification.CHANGED)],
        unchanged=[r.filename for r in result.with_status(Classification.UNCHANGED)],
        deleted=list(result.deleted),
        counted=len(measured),
        release_date=release_date,
    )
