"""End-to-end sync runs against a temp directory and a mocked HTTP layer."""

import json
from pathlib import Path

import httpx
import pytest

from prompt_sync.deps import SyncDeps
from prompt_sync.pipeline import (
    InputError,
    MissingCredentialError,
    count_version_files,
    update_from_json,
)

BASH_PROMPT = {
    "name": "Tool Description: Bash",
    "description": "Run shell commands",
    "version": "9.9.9",
    "pieces": ["Runs shell commands."],
    "identifiers": [],
    "identifierMap": {},
}

EXPLORE_PROMPT = {
    "name": "Agent Prompt: Explore",
    "description": "Fast codebase search\nsub-agent",
    "version": "9.9.9",
    "pieces": ["Use ${", "} to search."],
    "identifiers": [0],
    "identifierMap": {"0": "GREP_TOOL_NAME"},
}


class FakeServices:
    """Token counting and npm registry endpoints behind one MockTransport."""

    def __init__(self, tokens_per_char: int = 1):
        self.count_calls: list[str] = []
        self.registry_calls = 0
        self.tokens_per_char = tokens_per_char

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.anthropic.com":
            text = json.loads(request.content)["messages"][0]["content"]
            self.count_calls.append(text)
            return httpx.Response(200, json={"input_tokens": len(text) * self.tokens_per_char})
        if request.url.host == "registry.npmjs.org":
            self.registry_calls += 1
            return httpx.Response(200, json={"time": {"9.9.9": "2025-11-01T10:00:00.000Z"}})
        return httpx.Response(404)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def workspace(tmp_path):
    repo = tmp_path / "repo"
    repo.mkdir()
    data = tmp_path / "data"
    data.mkdir()
    deps = SyncDeps(
        prompts_dir=repo / "system-prompts",
        readme_path=repo / "README.md",
        anthropic_api_key="test-key",
        batch_delay_seconds=0.0,
    )
    return deps, data


def _write_export(data_dir: Path, prompts: list[dict], version: str = "9.9.9") -> Path:
    path = data_dir / f"prompts-{version}.json"
    path.write_text(json.dumps({"version": version, "prompts": prompts}))
    return path


async def _run(json_path: Path, deps: SyncDeps, services: FakeServices):
    async with services.client() as client:
        return await update_from_json(json_path, deps, client=client)


@pytest.mark.asyncio
async def test_first_run_scenario(workspace):
    deps, data = workspace
    services = FakeServices()
    export = _write_export(data, [BASH_PROMPT])

    report = await _run(export, deps, services)

    assert report.new == ["tool-description-bash.md"]
    assert services.count_calls == ["Runs shell commands."]
    assert (deps.prompts_dir / "tool-description-bash.md").read_text() == (
        "<!--\n"
        "name: 'Tool Description: Bash'\n"
        "description: Run shell commands\n"
        "ccVersion: 9.9.9\n"
        "-->\n"
        "Runs shell commands.\n"
    )

    readme = deps.readme_path.read_text()
    n = len("Runs shell commands.")
    entry = f"- [Tool Description: Bash](./system-prompts/tool-description-bash.md) (**{n}** tks) - Run shell commands."
    lines = readme.split("\n")
    tools_at = lines.index("### Builtin Tool Descriptions")
    notes_at = lines.index("**Additional notes for some Tool Descriptions**")
    assert entry in lines[tools_at:notes_at]
    assert "(November 1st, 2025)" in readme
    assert "across 1 versions" in readme


@pytest.mark.asyncio
async def test_second_identical_run_is_idempotent(workspace):
    deps, data = workspace
    export = _write_export(data, [BASH_PROMPT, EXPLORE_PROMPT])

    await _run(export, deps, FakeServices())
    readme_before = deps.readme_path.read_bytes()
    files_before = {p.name: (p.read_bytes(), p.stat().st_mtime_ns) for p in deps.prompts_dir.iterdir()}

    services = FakeServices()
    report = await _run(export, deps, services)

    assert report.new == [] and report.changed == [] and report.deleted == []
    assert sorted(report.unchanged) == ["agent-prompt-explore.md", "tool-description-bash.md"]
    assert services.count_calls == []
    assert deps.readme_path.read_bytes() == readme_before
    assert {p.name: (p.read_bytes(), p.stat().st_mtime_ns) for p in deps.prompts_dir.iterdir()} == files_before


@pytest.mark.asyncio
async def test_unchanged_prompt_keeps_published_count(workspace):
    deps, data = workspace
    export = _write_export(data, [BASH_PROMPT, EXPLORE_PROMPT])
    await _run(export, deps, FakeServices(tokens_per_char=1))

    changed_explore = dict(EXPLORE_PROMPT, pieces=["Use ${", "} to search quickly."])
    export = _write_export(data, [BASH_PROMPT, changed_explore])
    services = FakeServices(tokens_per_char=100)
    report = await _run(export, deps, services)

    assert report.changed == ["agent-prompt-explore.md"]
    assert report.unchanged == ["tool-description-bash.md"]
    # only the changed prompt was measured again
    assert services.count_calls == ["Use ${GREP_TOOL_NAME} to search quickly."]

    readme = deps.readme_path.read_text()
    assert f"tool-description-bash.md) (**{len('Runs shell commands.')}** tks)" in readme
    assert f"agent-prompt-explore.md) (**{len('Use ${GREP_TOOL_NAME} to search quickly.') * 100}** tks)" in readme
    assert "Fast codebase search sub-agent." in readme


@pytest.mark.asyncio
async def test_removed_prompt_is_deleted_everywhere(workspace):
    deps, data = workspace
    await _run(_write_export(data, [BASH_PROMPT, EXPLORE_PROMPT]), deps, FakeServices())
    assert "agent-prompt-explore.md" in deps.readme_path.read_text()

    report = await _run(_write_export(data, [BASH_PROMPT]), deps, FakeServices())

    assert report.deleted == ["agent-prompt-explore.md"]
    assert not (deps.prompts_dir / "agent-prompt-explore.md").exists()
    assert "agent-prompt-explore.md" not in deps.readme_path.read_text()


@pytest.mark.asyncio
async def test_preface_survives_regeneration(workspace):
    deps, data = workspace
    deps.readme_path.write_text(
        "# Prompts\n\nplaceholder header\n\nKeep this paragraph.\n\n### Agent Prompts\n\nstale\n"
    )

    await _run(_write_export(data, [BASH_PROMPT]), deps, FakeServices())

    lines = deps.readme_path.read_text().split("\n")
    assert lines[0] == "# Prompts"
    assert lines[2].startswith("This repository contains")
    assert lines[4] == "Keep this paragraph."
    assert "stale" not in lines


@pytest.mark.asyncio
async def test_missing_credential_aborts_before_writes(workspace):
    deps, data = workspace
    deps.anthropic_api_key = ""

    with pytest.raises(MissingCredentialError):
        await _run(_write_export(data, [BASH_PROMPT]), deps, FakeServices())

    assert not deps.prompts_dir.exists()
    assert not deps.readme_path.exists()


@pytest.mark.asyncio
async def test_malformed_json_aborts_before_writes(workspace):
    deps, data = workspace
    bad = data / "prompts-1.0.0.json"
    bad.write_text("{not json")

    with pytest.raises(InputError, match="Invalid JSON"):
        await _run(bad, deps, FakeServices())

    assert not deps.prompts_dir.exists()


@pytest.mark.asyncio
async def test_wrong_shape_aborts_before_writes(workspace):
    deps, data = workspace
    bad = data / "prompts-1.0.0.json"
    bad.write_text(json.dumps({"prompts": [{"description": "no name"}]}))

    with pytest.raises(InputError, match="Unexpected export structure"):
        await _run(bad, deps, FakeServices())

    assert not deps.prompts_dir.exists()


@pytest.mark.asyncio
async def test_missing_input_file(workspace):
    deps, data = workspace
    with pytest.raises(InputError, match="Cannot read"):
        await _run(data / "nope.json", deps, FakeServices())


def test_count_version_files(tmp_path):
    for name in ("prompts-2.0.14.json", "prompts-2.0.15.json", "prompts-latest.json", "other.json"):
        (tmp_path / name).write_text("{}")
    (tmp_path / "prompts-2.0.16.json").mkdir()

    assert count_version_files(tmp_path) == 2
