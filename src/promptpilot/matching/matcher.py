"""Match a target model to reference prompts from the corpus.

Exact matches come from a static pattern table keyed on model id
substrings.  The table is closed: new model versions only get exact
matches once a row is added here.  Everything else falls back to additive
scoring (provider family, model family, capabilities, recency).
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict

from promptpilot.corpus.patterns import extract_key_pattern
from promptpilot.corpus.service import ReferencePromptCorpus
from promptpilot.matching.registry import ModelRegistry
from promptpilot.schemas.corpus import ReferencePrompt
from promptpilot.schemas.matching import ModelConfig, ModelMatch

logger = logging.getLogger(__name__)

EXACT_CONFIDENCE = 0.95
FALLBACK_BASE_CONFIDENCE = 0.6
FALLBACK_MAX_CONFIDENCE = 0.9
NO_MATCH_CONFIDENCE = 0.3
MAX_FALLBACKS = 3
RECENT_YEAR = 2024

PROVIDER_SCORE = 10
FAMILY_SCORE = 5
CAPABILITY_SCORE = 3
RECENCY_SCORE = 2


class ExactPattern(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    provider: str
    model_name: str
    version: str | None = None

    def matches(self, prompt: ReferencePrompt) -> bool:
        prompt_id = prompt.id.lower()
        model_name = self.model_name.lower()
        if self.provider.lower() not in prompt.provider.lower():
            return False
        if model_name not in prompt_id and model_name not in prompt.model.lower():
            return False
        return self.version is None or self.version in prompt_id


# (app provider, model id substring or None for any model, patterns)
EXACT_PATTERNS: list[tuple[str, str | None, tuple[ExactPattern, ...]]] = [
    ("openai", "gpt-4.1", (
        ExactPattern(provider="openai", model_name="chatgpt4o", version="20240520"),
        ExactPattern(provider="openai", model_name="chatgpt4o", version="20250324"),
        ExactPattern(provider="openai", model_name="chatgpt4o", version="20250506"),
    )),
    ("openai", "gpt-5", (
        ExactPattern(provider="openai", model_name="chatgpt5", version="20250807"),
        ExactPattern(provider="openai", model_name="chatgpt5", version="20250808"),
    )),
    ("googleai", "gemini-2.5", (
        ExactPattern(provider="google", model_name="gemini-1.5", version="20240411"),
    )),
    ("googleai", "gemini-2.0", (
        ExactPattern(provider="google", model_name="gemini-cli", version="20250626"),
    )),
    ("deepseek", None, (
        ExactPattern(provider="deepseek", model_name="R1", version="20250430"),
    )),
]

PROVIDER_ALIASES: dict[str, list[str]] = {
    "openai": ["openai", "chatgpt", "gpt"],
    "googleai": ["google", "gemini"],
    "deepseek": ["deepseek"],
}

# Order matters: the first family found in the model id is used.
MODEL_FAMILIES: list[tuple[str, list[str]]] = [
    ("gpt-4.1", ["gpt-4", "chatgpt4", "gpt4"]),
    ("gpt-5", ["gpt-5", "chatgpt5", "gpt5"]),
    ("gemini-2.5", ["gemini-1.5", "gemini-2", "gemini"]),
    ("gemini-2.0", ["gemini-2", "gemini"]),
    ("deepseek-v3.1", ["deepseek", "v3"]),
]

CAPABILITY_KEYWORDS = frozenset({
    "coding", "vision", "multimodal", "function-calling",
    "reasoning", "thinking", "advanced",
})


def exact_patterns_for(model: ModelConfig) -> list[ExactPattern]:
    patterns: list[ExactPattern] = []
    for provider, id_fragment, rows in EXACT_PATTERNS:
        if model.provider != provider:
            continue
        if id_fragment is None or id_fragment in model.id:
            patterns.extend(rows)
    return patterns


def _is_recent(prompt: ReferencePrompt) -> bool:
    year = prompt.year
    return year is not None and year >= RECENT_YEAR


class ModelPromptMatcher:
    """Find the reference prompts that best describe a target model."""

    def __init__(self, corpus: ReferencePromptCorpus, registry: ModelRegistry) -> None:
        self.corpus = corpus
        self.registry = registry

    def match(self, model_id: str) -> ModelMatch:
        """Return exact and fallback matches for ``model_id``.

        Raises ``UnknownModelError`` if the model isn't registered.
        """
        model = self.registry.get(model_id)

        exact = self.find_exact_match(model)
        scored = self.find_fallback_matches(model)
        confidence = self.calculate_confidence(exact, scored)
        reasoning = self._reasoning(model, exact, scored)

        logger.debug(
            "Model %s: exact=%s fallbacks=%d confidence=%.2f",
            model.id, exact.id if exact else None, len(scored), confidence,
        )
        return ModelMatch(
            model_id=model.id,
            model_name=model.name,
            provider=model.provider,
            exact_match=exact,
            fallback_matches=scored[:MAX_FALLBACKS],
            confidence=confidence,
            reasoning=reasoning,
        )

    # ------------------------------------------------------------------
    # Exact matching
    # ------------------------------------------------------------------

    def find_exact_match(self, model: ModelConfig) -> ReferencePrompt | None:
        patterns = exact_patterns_for(model)
        for prompt in self.corpus.get_all():
            if any(pattern.matches(prompt) for pattern in patterns):
                return prompt
        return None

    # ------------------------------------------------------------------
    # Fallback scoring
    # ------------------------------------------------------------------

    def score(self, model: ModelConfig, prompt: ReferencePrompt) -> int:
        total = 0
        if self._matches_provider(model.provider, prompt):
            total += PROVIDER_SCORE
        if self._matches_family(model.id, prompt):
            total += FAMILY_SCORE
        if self._matches_capabilities(model.capabilities, prompt):
            total += CAPABILITY_SCORE
        if _is_recent(prompt):
            total += RECENCY_SCORE
        return total

    def find_fallback_matches(self, model: ModelConfig) -> list[ReferencePrompt]:
        """All positively scored prompts, best first (stable)."""
        scored = [(p, self.score(model, p)) for p in self.corpus.get_all()]
        scored = [(p, s) for p, s in scored if s > 0]
        scored.sort(key=lambda item: item[1], reverse=True)
        return [p for p, _ in scored]

    @staticmethod
    def _matches_provider(app_provider: str, prompt: ReferencePrompt) -> bool:
        aliases = PROVIDER_ALIASES.get(app_provider, [app_provider])
        provider = prompt.provider.lower()
        return any(alias.lower() in provider for alias in aliases)

    @staticmethod
    def _matches_family(model_id: str, prompt: ReferencePrompt) -> bool:
        prompt_id = prompt.id.lower()
        prompt_model = prompt.model.lower()
        for family, aliases in MODEL_FAMILIES:
            if family in model_id:
                return any(a in prompt_id or a in prompt_model for a in aliases)
        return False

    @staticmethod
    def _matches_capabilities(capabilities: list[str], prompt: ReferencePrompt) -> bool:
        content = prompt.content.lower()
        tags = {t.lower() for t in prompt.tags}
        for capability in capabilities:
            cap = capability.lower()
            if cap in CAPABILITY_KEYWORDS and (cap in content or cap in tags):
                return True
        return False

    # ------------------------------------------------------------------
    # Confidence and reasoning
    # ------------------------------------------------------------------

    @staticmethod
    def calculate_confidence(
        exact: ReferencePrompt | None,
        fallbacks: list[ReferencePrompt],
    ) -> float:
        if exact is not None:
            return EXACT_CONFIDENCE
        if not fallbacks:
            return NO_MATCH_CONFIDENCE

        confidence = FALLBACK_BASE_CONFIDENCE
        if len(fallbacks) >= 3:
            confidence += 0.2
        if len(fallbacks) >= 5:
            confidence += 0.1
        if _is_recent(fallbacks[0]):
            confidence += 0.1
        return round(min(confidence, FALLBACK_MAX_CONFIDENCE), 2)

    @staticmethod
    def _reasoning(
        model: ModelConfig,
        exact: ReferencePrompt | None,
        fallbacks: list[ReferencePrompt],
    ) -> str:
        if exact is not None:
            return (
                f"Found exact match: {exact.name} ({exact.provider}) - {exact.date}. "
                f"This reference prompt is specifically for the {model.name} model."
            )
        if fallbacks:
            top = fallbacks[0]
            return (
                f"No exact match found, but found {len(fallbacks)} similar prompts. "
                f"Best match: {top.name} ({top.provider}) - {top.date}. "
                f"Using this as reference for {model.name} model."
            )
        return (
            f"No matching reference prompts found for {model.name}. "
            "Will use general best practices from available prompts."
        )

    # ------------------------------------------------------------------
    # Guidance text
    # ------------------------------------------------------------------

    def model_specific_guidance(self, model_id: str, match: ModelMatch | None = None) -> str:
        """Markdown guidance block for ``model_id``.

        Pass an existing ``match`` to avoid recomputing it.
        """
        match = match or self.match(model_id)
        lines = [
            f"**Model-Specific Guidance for {match.model_name}**",
            "",
            f"**Confidence:** {round(match.confidence * 100)}%",
            "",
            f"**Reasoning:** {match.reasoning}",
            "",
        ]

        if match.exact_match is not None:
            exact = match.exact_match
            lines += [
                "**Exact Match Found:**",
                f"- **Source:** {exact.name} ({exact.provider})",
                f"- **Date:** {exact.date}",
                f"- **Key Pattern:** {extract_key_pattern(exact.content)}",
                "",
                "**Relevant Content:**",
                f"{exact.content[:1000]}...",
                "",
            ]
        elif match.fallback_matches:
            lines.append("**Fallback Matches:**")
            for i, prompt in enumerate(match.fallback_matches, 1):
                lines.append(f"{i}. **{prompt.name}** ({prompt.provider}) - {prompt.date}")
                lines.append(f"   Key pattern: {extract_key_pattern(prompt.content)}")
            lines.append("")

        lines += [
            "**Recommendations:**",
            "- Follow the structure and patterns from the matched prompt(s)",
            "- Adapt the guidance to your specific use case",
            "- Combine with the golden standard instruction set",
            "- Use the matched prompt as a quality benchmark",
        ]
        return "\n".join(lines) + "\n"
