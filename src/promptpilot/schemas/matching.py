"""Pydantic models for model configuration and model-to-prompt matching."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from promptpilot.schemas.corpus import ReferencePrompt


class ModelConfig(BaseModel):
    """A target model the assistant can generate prompts for."""

    id: str
    name: str
    provider: str  # "openai", "deepseek", "googleai" for built-ins
    capabilities: list[str] = []
    description: str = ""
    max_tokens: int = 8192
    is_latest: bool = False


class ModelMatch(BaseModel):
    """Reference prompts matched to a target model."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    model_name: str
    provider: str
    exact_match: ReferencePrompt | None = None
    fallback_matches: list[ReferencePrompt] = []  # best first
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = ""
