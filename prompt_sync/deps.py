from dataclasses import dataclass
from pathlib import Path

from prompt_sync.config import DEFAULT_NPM_REGISTRY_URL, DEFAULT_TOKEN_COUNT_URL, Settings


@dataclass
class SyncDeps:
    """Runtime dependencies for one sync run.

    Flat fields only, no config objects. main.py reads Settings once and
    injects scalar values here. Pipeline stages read deps.field_name directly.
    """

    prompts_dir: Path
    readme_path: Path
    anthropic_api_key: str = ""

    # Token counting
    token_count_url: str = DEFAULT_TOKEN_COUNT_URL
    token_count_model: str = "claude-sonnet-4-20250514"
    anthropic_version: str = "2023-06-01"
    batch_size: int = 5
    batch_delay_seconds: float = 0.1
    http_timeout: float = 30.0

    # Release date lookup
    npm_package: str = "@anthropic-ai/claude-code"
    npm_registry_url: str = DEFAULT_NPM_REGISTRY_URL

    @property
    def link_prefix(self) -> str:
        """Relative markdown link prefix from the index document to the prompt files."""
        try:
            rel = self.prompts_dir.resolve().relative_to(self.readme_path.resolve().parent)
        except ValueError:
            return self.prompts_dir.resolve().as_posix()
        return f"./{rel.as_posix()}"


def create_deps(
    settings: Settings,
    *,
    prompts_dir: Path | None = None,
    readme_path: Path | None = None,
) -> SyncDeps:
    """Create deps from settings, with optional per-run path overrides."""
    return SyncDeps(
        prompts_dir=prompts_dir or Path(settings.prompts_dir),
        readme_path=readme_path or Path(settings.readme_path),
        anthropic_api_key=settings.anthropic_api_key or "",
        token_count_url=settings.token_count_url,
        token_count_model=settings.token_count_model,
        anthropic_version=settings.anthropic_version,
        batch_size=settings.batch_size,
        batch_delay_seconds=settings.batch_delay_ms / 1000.0,
        http_timeout=settings.http_timeout,
        npm_package=settings.npm_package,
        npm_registry_url=settings.npm_registry_url,
    )
