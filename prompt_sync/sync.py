"""Prompt file synchronization against the persisted snapshot.

Each input prompt is classified against the file already on disk:

- NEW: no readable file with a metadata header exists; written.
- CHANGED: file exists but differs after whitespace trimming; replaced.
- UNCHANGED: identical after trimming; left alone.

Afterwards every ``*.md`` file in the prompts directory that no input prompt
maps to is DELETED, so the directory mirrors the current input exactly.
"""

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from prompt_sync._document import PromptDocument, read_document, render_document, same_content
from prompt_sync._fs import atomic_write_text
from prompt_sync.filenames import filename_for
from prompt_sync.models import Prompt
from prompt_sync.reconstruct import reconstruct_prompt

logger = logging.getLogger(__name__)


class Classification(enum.Enum):
    NEW = "new"
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    DELETED = "deleted"


@dataclass
class PromptRecord:
    """One input prompt after reconstruction and classification."""

    prompt: Prompt
    filename: str
    body: str
    status: Classification
    # Fields that differ from the persisted file, for CHANGED records
    changes: list[str] = field(default_factory=list)
    # Name recorded in the persisted header, if the file had one
    previous_name: str | None = None

    @property
    def needs_count(self) -> bool:
        return self.status in (Classification.NEW, Classification.CHANGED)


@dataclass
class SyncResult:
    # Keyed by filename; a later prompt with a colliding filename replaces the earlier one
    records: dict[str, PromptRecord] = field(default_factory=dict)
    deleted: list[str] = field(default_factory=list)

    def with_status(self, status: Classification) -> list[PromptRecord]:
        return [r for r in self.records.values() if r.status is status]

    @property
    def to_count(self) -> list[PromptRecord]:
        return [r for r in self.records.values() if r.needs_count]


SyncReporter = Callable[[Classification, str, list[str]], None]


def _squash(text: str | None) -> str:
    return " ".join((text or "").split())


def describe_changes(existing: PromptDocument, prompt: Prompt, body: str) -> list[str]:
    """Which parts of a persisted prompt file differ from the incoming prompt.

    Descriptions are compared with whitespace collapsed, since the folded
    header form re-wraps them.
    """
    changes: list[str] = []
    if existing.name != prompt.name:
        changes.append("name")
    if _squash(existing.description) != _squash(prompt.description):
        changes.append("description")
    if (existing.version or "") != prompt.version:
        changes.append(f"ccVersion {existing.version or '?'} -> {prompt.version or '?'}")
    if existing.variables != prompt.variables:
        changes.append("variables")
    if existing.body.strip() != body.strip():
        changes.append("body")
    return changes


def classify_prompt(prompt: Prompt, prompts_dir: Path) -> tuple[PromptRecord, str]:
    """Reconstruct and classify one prompt without touching disk.

    Returns the record plus the rendered file content.
    """
    filename = filename_for(prompt.name)
    body = reconstruct_prompt(prompt)
    rendered = render_document(prompt, body)

    existing = read_document(prompts_dir / filename)
    changes: list[str] = []
    if existing is None:
        status = Classification.NEW
    elif same_content(existing.full_content, rendered):
        status = Classification.UNCHANGED
    else:
        status = Classification.CHANGED
        changes = describe_changes(existing, prompt, body)
    record = PromptRecord(
        prompt=prompt,
        filename=filename,
        body=body,
        status=status,
        changes=changes,
        previous_name=existing.name if existing else None,
    )
    return record, rendered


def sync_prompts(
    prompts: list[Prompt],
    prompts_dir: Path,
    *,
    report: SyncReporter | None = None,
) -> SyncResult:
    """Apply writes and deletes so ``prompts_dir`` mirrors ``prompts``.

    Write and delete failures (OSError) propagate; files already written
    stay written.
    """
    prompts_dir.mkdir(parents=True, exist_ok=True)
    result = SyncResult()

    for prompt in prompts:
        record, rendered = classify_prompt(prompt, prompts_dir)

        previous = result.records.get(record.filename)
        if previous is not None:
            logger.warning(
                f"Filename collision: '{previous.prompt.name}' and '{prompt.name}' "
                f"both map to {record.filename}; keeping the latter"
            )
        elif record.previous_name and record.previous_name != prompt.name:
            # Same file, different prompt than last run: a collision across exports
            logger.warning(
                f"{record.filename} previously held '{record.previous_name}', "
                f"now '{prompt.name}'"
            )

        if record.needs_count:
            atomic_write_text(prompts_dir / record.filename, rendered)
            if report:
                report(record.status, record.filename, record.changes)
        result.records[record.filename] = record

    for path in sorted(prompts_dir.glob("*.md")):
        if path.name in result.records:
            continue
        path.unlink()
        result.deleted.append(path.name)
        if report:
            report(Classification.DELETED, path.name, [])

    return result
