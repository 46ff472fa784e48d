"""Input data model for the upstream prompt export."""

from pydantic import BaseModel, ConfigDict, Field


def _is_index_key(key: str) -> bool:
    # "7" counts, "07" and "-1" do not
    return key.isdigit() and str(int(key)) == key


class Prompt(BaseModel):
    """One extracted prompt string, encoded as pieces joined by variable slots."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    version: str = ""
    pieces: list[str] = Field(default_factory=list)
    identifiers: list[int] = Field(default_factory=list)
    identifier_map: dict[str, str] = Field(default_factory=dict, alias="identifierMap")

    @property
    def variables(self) -> list[str]:
        """Variable-reference names, integer keys ascending, then other keys in insertion order."""
        numeric = sorted((k for k in self.identifier_map if _is_index_key(k)), key=int)
        named = [k for k in self.identifier_map if not _is_index_key(k)]
        return [self.identifier_map[k] for k in numeric + named]


class PromptExport(BaseModel):
    """Top-level JSON document: ``{version, prompts: [...]}``."""

    version: str
    prompts: list[Prompt] = Field(default_factory=list)
