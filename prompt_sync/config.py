import os
import json
from pathlib import Path
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

APP_NAME = "prompt-sync"

# XDG Paths - Explicit XDG resolution so ~/.config/ is used even on macOS
CONFIG_DIR = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config")) / APP_NAME
SETTINGS_FILE = CONFIG_DIR / "settings.json"

DEFAULT_TOKEN_COUNT_URL = "https://api.anthropic.com/v1/messages/count_tokens"
DEFAULT_NPM_REGISTRY_URL = "https://registry.npmjs.org"


class Settings(BaseModel):
    # Credentials
    anthropic_api_key: Optional[str] = Field(default=None)

    # Token counting
    token_count_url: str = Field(default=DEFAULT_TOKEN_COUNT_URL)
    token_count_model: str = Field(default="claude-sonnet-4-20250514")
    anthropic_version: str = Field(default="2023-06-01")
    batch_size: int = Field(default=5, ge=1, le=50)
    batch_delay_ms: int = Field(default=100, ge=0)
    http_timeout: float = Field(default=30.0, gt=0)

    # Release date lookup
    npm_package: str = Field(default="@anthropic-ai/claude-code")
    npm_registry_url: str = Field(default=DEFAULT_NPM_REGISTRY_URL)

    # Output locations (relative paths resolve against cwd)
    prompts_dir: str = Field(default="system-prompts")
    readme_path: str = Field(default="README.md")

    # Display
    theme: Literal["light", "dark"] = Field(default="light")

    @field_validator("token_count_url", "npm_registry_url")
    @classmethod
    def _validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://, got '{v}'")
        return v.rstrip("/")

    @model_validator(mode='before')
    @classmethod
    def fill_from_env(cls, data: dict) -> dict:
        """Env vars override all file-based values (highest precedence layer)."""
        env_map = {
            "anthropic_api_key": "ANTHROPIC_API_KEY",
            "token_count_url": "PROMPT_SYNC_TOKEN_COUNT_URL",
            "token_count_model": "PROMPT_SYNC_TOKEN_COUNT_MODEL",
            "anthropic_version": "PROMPT_SYNC_ANTHROPIC_VERSION",
            "batch_size": "PROMPT_SYNC_BATCH_SIZE",
            "batch_delay_ms": "PROMPT_SYNC_BATCH_DELAY_MS",
            "http_timeout": "PROMPT_SYNC_HTTP_TIMEOUT",
            "npm_package": "PROMPT_SYNC_NPM_PACKAGE",
            "npm_registry_url": "PROMPT_SYNC_NPM_REGISTRY_URL",
            "prompts_dir": "PROMPT_SYNC_PROMPTS_DIR",
            "readme_path": "PROMPT_SYNC_README_PATH",
            "theme": "PROMPT_SYNC_THEME",
        }

        for field, env_var in env_map.items():
            val = os.getenv(env_var)
            if val:
                data[field] = val
        return data


def find_project_config() -> Path | None:
    """Return .prompt-sync/settings.json in cwd if it exists, else None."""
    candidate = Path.cwd() / ".prompt-sync" / "settings.json"
    return candidate if candidate.is_file() else None


def load_config() -> Settings:
    data: dict = {}

    # Layer 1: User config (~/.config/prompt-sync/settings.json)
    if SETTINGS_FILE.exists():
        with open(SETTINGS_FILE, "r") as f:
            try:
                data = json.load(f)
            except Exception as e:
                print(f"Error loading settings.json: {e}. Using defaults.")

    # Layer 2: Project config (<cwd>/.prompt-sync/settings.json), shallow merge
    project_config = find_project_config()
    if project_config is not None:
        with open(project_config, "r") as f:
            try:
                data |= json.load(f)
            except Exception as e:
                print(f"Error loading project config {project_config}: {e}. Skipping.")

    # Layer 3: Env vars (handled by fill_from_env model_validator)
    return Settings.model_validate(data)


# Lazy settings singleton, loaded on first access, not at import time.
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the global Settings instance, creating it on first call."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def __getattr__(name: str):
    """Lazy module attribute: ``from prompt_sync.config import settings`` works without import-time side effects."""
    if name == "settings":
        return get_settings()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
