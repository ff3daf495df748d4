"""Guidance context and resolution models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from promptpilot.schemas.corpus import ReferencePrompt
from promptpilot.schemas.matching import ModelMatch
from promptpilot.schemas.routing import RouterDecision

TaskKind = Literal["generate", "improve", "rewrite", "evaluate"]


class ModelEnrichment(BaseModel):
    """Model-specific guidance folded into a GuidanceContext."""

    match: ModelMatch
    guidance: str

    @property
    def exact_match(self) -> ReferencePrompt | None:
        return self.match.exact_match

    @property
    def confidence(self) -> float:
        return self.match.confidence


class GuidanceContext(BaseModel):
    """Reference-prompt guidance for a single request.

    ``model_enrichment`` is None when no model id was given or when the
    model-specific lookup failed.
    """

    model_config = ConfigDict(protected_namespaces=())

    relevant_prompts: list[ReferencePrompt] = []
    inspiration_examples: list[ReferencePrompt] = []
    guidance_text: str = ""
    structure_recommendations: list[str] = []
    quality_indicators: list[str] = []
    model_enrichment: ModelEnrichment | None = None


class PromptAnalysis(BaseModel):
    """Gaps found in a user prompt compared with reference prompts."""

    issues: list[str] = []
    recommendations: list[str] = []


class Resolution(BaseModel):
    """Routing decision plus guidance for one request."""

    decision: RouterDecision
    guidance: GuidanceContext
