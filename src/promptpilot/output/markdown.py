"""Markdown report builder — renders a Resolution to a Markdown document."""

from __future__ import annotations

from promptpilot.schemas.corpus import ReferencePrompt
from promptpilot.schemas.guidance import Resolution


def _prompt_line(prompt: ReferencePrompt) -> str:
    tags = f" — tags: {', '.join(prompt.tags)}" if prompt.tags else ""
    return f"- **{prompt.name}** ({prompt.category}, {prompt.date}){tags}"


def render_resolution(resolution: Resolution, *, user_prompt: str = "") -> str:
    """Render a Resolution into a Markdown string."""
    decision = resolution.decision
    guidance = resolution.guidance
    sections: list[str] = ["# PromptPilot Guidance\n"]

    if user_prompt:
        sections.append(f"> {user_prompt}\n")

    # Routing
    sections.append("## System Instruction\n")
    source = "Default instruction set" if decision.should_use_default else "User instruction"
    sections.append(f"- **Applied source:** {source} (`{decision.applied_source}`)")
    sections.append(f"- **Reasoning:** {decision.reasoning}\n")
    sections.append("```text")
    sections.append(decision.final_instruction)
    sections.append("```\n")

    # Reference prompts
    sections.append("## Reference Guidance\n")
    sections.append(guidance.guidance_text.rstrip() + "\n")

    if guidance.relevant_prompts:
        sections.append("### Most Relevant Reference Prompts\n")
        sections.extend(_prompt_line(p) for p in guidance.relevant_prompts)
        sections.append("")

    if guidance.structure_recommendations:
        sections.append("### Recommended Structure\n")
        sections.extend(f"- `{element}`" for element in guidance.structure_recommendations)
        sections.append("")

    if guidance.quality_indicators:
        sections.append("### Quality Indicators\n")
        sections.extend(f"- {indicator}" for indicator in guidance.quality_indicators)
        sections.append("")

    if guidance.inspiration_examples:
        sections.append("### For Inspiration\n")
        sections.extend(_prompt_line(p) for p in guidance.inspiration_examples)
        sections.append("")

    # Model-specific
    if guidance.model_enrichment is not None:
        sections.append("## Model-Specific Guidance\n")
        sections.append(guidance.model_enrichment.guidance)

    return "\n".join(sections)
