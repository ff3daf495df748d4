"""Turn ranked reference prompts into guidance text.

Relevance-based guidance is always produced.  Model-specific enrichment is
best-effort: a failed lookup is logged and leaves ``model_enrichment`` as
None.
"""

from __future__ import annotations

import logging
from collections import Counter

from promptpilot.corpus.patterns import analyze_structure, extract_key_pattern
from promptpilot.corpus.service import ReferencePromptCorpus
from promptpilot.guidance.relevance import RelevanceScorer
from promptpilot.matching.matcher import ModelPromptMatcher
from promptpilot.schemas.corpus import ReferencePrompt
from promptpilot.schemas.guidance import (
    GuidanceContext,
    ModelEnrichment,
    PromptAnalysis,
    TaskKind,
)

logger = logging.getLogger(__name__)

# An element must appear in this many ranked prompts to be recommended.
MIN_STRUCTURE_SUPPORT = 2
DETAILED_PROMPT_LENGTH = 1000
BRIEF_PROMPT_LENGTH = 200


def common_patterns(prompts: list[ReferencePrompt]) -> list[str]:
    """Describe the structural patterns present in any of ``prompts``."""
    def any_contains(*markers: str) -> bool:
        return any(m in p.content for p in prompts for m in markers)

    patterns: list[str] = []
    if any_contains("You are", "You will"):
        patterns.append('Clear role definition with "You are" statements')
    if any_contains("DO NOT", "Never"):
        patterns.append("Explicit constraints and limitations")
    if any_contains("```", "##"):
        patterns.append("Structured formatting with markdown")
    if any_contains("Example", "For example"):
        patterns.append("Concrete examples and demonstrations")
    return patterns


def structure_recommendations(prompts: list[ReferencePrompt]) -> list[str]:
    """Structure elements shared by the ranked prompts, most common first.

    With fewer than two prompts, an element is recommended when every
    prompt has it.
    """
    if not prompts:
        return []
    threshold = min(MIN_STRUCTURE_SUPPORT, len(prompts))
    counts: Counter[str] = Counter()
    for prompt in prompts:
        counts.update(analyze_structure(prompt.content))
    # Counter.most_common keeps first-seen order for ties
    return [element for element, count in counts.most_common() if count >= threshold]


def quality_indicators(prompts: list[ReferencePrompt]) -> list[str]:
    indicators: list[str] = []
    if any(len(p.content) > DETAILED_PROMPT_LENGTH for p in prompts):
        indicators.append("Detailed and specific instructions")
    if any("clearly" in p.content or "specifically" in p.content for p in prompts):
        indicators.append("Clear and unambiguous language")
    if any("consistent" in p.content or "always" in p.content for p in prompts):
        indicators.append("Consistent behavior patterns")
    return indicators


def analyze_prompt(prompt: str) -> PromptAnalysis:
    """Compare a user prompt against the structure of reference prompts."""
    analysis = PromptAnalysis()
    if "You are" not in prompt and "You will" not in prompt:
        analysis.issues.append("Missing clear role definition")
        analysis.recommendations.append("Add a clear \"You are\" statement to define the AI's role")
    if "DO NOT" not in prompt and "Never" not in prompt:
        analysis.issues.append("Missing explicit constraints")
        analysis.recommendations.append("Add clear constraints and limitations")
    if len(prompt) < BRIEF_PROMPT_LENGTH:
        analysis.issues.append("Prompt may be too brief")
        analysis.recommendations.append("Add more specific instructions and examples")
    if "Example" not in prompt and "For example" not in prompt:
        analysis.issues.append("Missing concrete examples")
        analysis.recommendations.append("Include specific examples to guide behavior")
    return analysis


class GuidanceComposer:
    """Assemble relevance ranking and model matching into a GuidanceContext."""

    def __init__(
        self,
        corpus: ReferencePromptCorpus,
        scorer: RelevanceScorer,
        matcher: ModelPromptMatcher,
        *,
        top_n: int = 5,
        inspiration_count: int = 3,
    ) -> None:
        self.corpus = corpus
        self.scorer = scorer
        self.matcher = matcher
        self.top_n = top_n
        self.inspiration_count = inspiration_count

    def compose(
        self,
        user_prompt: str,
        task_kind: TaskKind = "improve",
        model_id: str | None = None,
    ) -> GuidanceContext:
        relevant = self.scorer.rank(user_prompt, self.top_n)
        context = GuidanceContext(
            relevant_prompts=relevant,
            inspiration_examples=self.corpus.get_random(self.inspiration_count),
            guidance_text=self.guidance_text(task_kind, relevant),
            structure_recommendations=structure_recommendations(relevant),
            quality_indicators=quality_indicators(relevant),
        )
        if model_id:
            context.model_enrichment = self._enrich(model_id)
        return context

    def _enrich(self, model_id: str) -> ModelEnrichment | None:
        try:
            match = self.matcher.match(model_id)
            guidance = self.matcher.model_specific_guidance(model_id, match)
        except Exception as exc:
            logger.warning("Failed to get model-specific guidance for %s: %s", model_id, exc)
            return None
        return ModelEnrichment(match=match, guidance=guidance)

    @staticmethod
    def guidance_text(task_kind: str, prompts: list[ReferencePrompt]) -> str:
        provider_counts = Counter(p.provider for p in prompts)
        top_provider = provider_counts.most_common(1)[0][0] if provider_counts else None

        lines = [
            f"Based on analysis of {len(prompts)} relevant reference system prompts "
            f"from major AI providers, here's guidance for your prompt {task_kind}:",
            "",
        ]
        if top_provider:
            lines += [
                f"**Primary Reference Provider:** {top_provider} "
                f"(appears in {provider_counts[top_provider]} relevant examples)",
                "",
            ]
        lines.append("**Key Patterns Found:**")
        lines += [f"- {pattern}" for pattern in common_patterns(prompts)]
        lines += [
            "",
            "**Structure Recommendations:**",
            f"- Follow the proven patterns from {top_provider or 'major providers'}",
            "- Maintain consistency with industry standards",
            "- Include clear role definitions and constraints",
        ]
        return "\n".join(lines) + "\n\n"

    def improvement_guidance(self, original_prompt: str, goal: str) -> str:
        """Markdown report of gaps in ``original_prompt`` with reference examples."""
        relevant = self.scorer.rank(original_prompt, self.top_n)
        analysis = analyze_prompt(original_prompt)

        lines = [
            "**Prompt Improvement Guidance**",
            "",
            f"**Goal:** {goal}",
            "",
            f"**Based on {len(relevant)} relevant reference prompts:**",
            "",
            "**Current Prompt Analysis:**",
        ]
        lines += [f"- ❌ {issue}" for issue in analysis.issues]
        lines += ["", "**Recommended Improvements:**"]
        lines += [f"- ✅ {rec}" for rec in analysis.recommendations]
        lines += ["", "**Reference Examples:**"]
        for i, prompt in enumerate(relevant[:3], 1):
            lines.append(f"{i}. **{prompt.name}** ({prompt.provider})")
            lines.append(f"   Key pattern: {extract_key_pattern(prompt.content)}")
            lines.append("")
        return "\n".join(lines)
