"""Configuration schema — validates pilot-config.yml."""

from pydantic import BaseModel, field_validator

from promptpilot.schemas.matching import ModelConfig


class PilotConfig(BaseModel):
    """Top-level configuration loaded from pilot-config.yml.

    Every field has a default, so an empty mapping is a valid config.
    """

    # Corpus
    corpus_dir: str = "docs/reference-prompts"
    corpus_extensions: list[str] = [".md"]

    # Routing
    use_default_policy: bool = True
    router_model: str = "gpt-4o"
    default_instruction: str = ""  # empty = built-in golden standard text

    # Guidance tuning
    relevance_top_n: int = 5
    inspiration_count: int = 3

    # Extra target models merged into the built-in registry
    models: list[ModelConfig] = []

    @field_validator("relevance_top_n", "inspiration_count")
    @classmethod
    def check_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("corpus_extensions")
    @classmethod
    def check_extensions(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("At least one corpus extension is required")
        for ext in v:
            if not ext.startswith("."):
                raise ValueError(f"Extension must start with '.': {ext!r}")
        return [ext.lower() for ext in v]
