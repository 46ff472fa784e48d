"""CLI surface: argument handling and exit codes."""

import json

import pytest
from typer.testing import CliRunner

from prompt_sync import main
from prompt_sync.config import Settings
from prompt_sync.pipeline import RunReport

runner = CliRunner()


@pytest.fixture
def configured(monkeypatch):
    for var in ("ANTHROPIC_API_KEY", "PROMPT_SYNC_PROMPTS_DIR", "PROMPT_SYNC_README_PATH"):
        monkeypatch.delenv(var, raising=False)

    def _configure(**overrides) -> Settings:
        settings = Settings(**overrides)
        monkeypatch.setattr(main, "settings", settings)
        return settings

    return _configure


def test_missing_argument_is_usage_error(configured):
    configured(anthropic_api_key="k")
    result = runner.invoke(main.app, [])
    assert result.exit_code != 0


def test_missing_api_key_exits_1(configured, tmp_path):
    configured()
    export = tmp_path / "prompts-1.0.0.json"
    export.write_text(json.dumps({"version": "1.0.0", "prompts": []}))

    result = runner.invoke(main.app, [str(export), "--readme", str(tmp_path / "README.md")])

    assert result.exit_code == 1
    assert not (tmp_path / "README.md").exists()


def test_invalid_json_exits_1(configured, tmp_path):
    configured(anthropic_api_key="k")
    export = tmp_path / "prompts-1.0.0.json"
    export.write_text("{oops")

    result = runner.invoke(main.app, [
        str(export),
        "--prompts-dir", str(tmp_path / "system-prompts"),
        "--readme", str(tmp_path / "README.md"),
    ])

    assert result.exit_code == 1
    assert not (tmp_path / "system-prompts").exists()
    assert not (tmp_path / "README.md").exists()


def test_path_overrides_reach_the_pipeline(configured, monkeypatch, tmp_path):
    configured(anthropic_api_key="k", batch_delay_ms=0)
    seen = {}

    async def fake_update(json_path, deps, *, client=None):
        seen["json_path"] = json_path
        seen["deps"] = deps
        return RunReport(version="1.0.0", new=["a.md"], unchanged=["b.md", "c.md"])

    monkeypatch.setattr(main, "update_from_json", fake_update)

    result = runner.invoke(main.app, [
        str(tmp_path / "prompts-1.0.0.json"),
        "-d", str(tmp_path / "out"),
        "-r", str(tmp_path / "INDEX.md"),
    ])

    assert result.exit_code == 0, result.output
    assert seen["json_path"] == tmp_path / "prompts-1.0.0.json"
    assert seen["deps"].prompts_dir == tmp_path / "out"
    assert seen["deps"].readme_path == tmp_path / "INDEX.md"
    assert seen["deps"].anthropic_api_key == "k"
    assert "Update complete!" in result.output
