"""Parse reference prompt source documents into ReferencePrompt records.

Source files are named ``<provider>-<model>_<date>.<ext>``, e.g.
``openai-chatgpt4o_20240520.md``.  The body is everything after the first
markdown heading line.
"""

from __future__ import annotations

import re
from pathlib import Path

from promptpilot.schemas.corpus import ReferencePrompt

_HEADING_RE = re.compile(r"^#{1,6}(\s|$)")

# Order matters: the first keyword hit decides the category.
_CATEGORY_KEYWORDS: list[tuple[tuple[str, str], str]] = [
    (("openai", "gpt"), "OpenAI"),
    (("anthropic", "claude"), "Anthropic"),
    (("google", "gemini"), "Google"),
    (("xai", "grok"), "xAI"),
    (("meta", "llama"), "Meta"),
]

_TAG_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("assistant", ("assistant", "helpful")),
    ("creative", ("creative", "writing")),
    ("coding", ("code", "programming")),
    ("analysis", ("analysis", "reasoning")),
    ("safety", ("safety", "harmful")),
]


def split_source_name(filename: str) -> tuple[str, str, str]:
    """Return ``(provider, model, date)`` from a corpus file name.

    The stem is split on its last underscore (date) and the remainder on
    its first hyphen (provider, model).  Missing parts are ``"unknown"``.
    """
    stem = Path(filename).stem
    head, sep, date = stem.rpartition("_")
    if not sep:
        head, date = stem, ""
    provider, _, model = head.partition("-")
    return provider or "unknown", model or "unknown", date or "unknown"


def extract_body(text: str) -> str:
    """Return the text after the first heading line, stripped.

    A document without any heading keeps its whole text.
    """
    lines = text.splitlines()
    for i, line in enumerate(lines):
        if _HEADING_RE.match(line):
            return "\n".join(lines[i + 1:]).strip()
    return text.strip()


def categorize(provider: str, model: str) -> str:
    """Map provider/model tokens to a provider category."""
    provider = provider.lower()
    model = model.lower()
    for (provider_kw, model_kw), category in _CATEGORY_KEYWORDS:
        if provider_kw in provider or model_kw in model:
            return category
    return "Other"


def extract_tags(content: str) -> tuple[str, ...]:
    """Infer semantic tags from content via case-insensitive keyword tests."""
    lowered = content.lower()
    return tuple(
        tag for tag, keywords in _TAG_KEYWORDS
        if any(kw in lowered for kw in keywords)
    )


def parse_reference_prompt(filename: str, text: str) -> ReferencePrompt | None:
    """Build a ReferencePrompt from a source document.

    Returns None when nothing remains after the heading is removed.
    """
    body = extract_body(text)
    if not body:
        return None

    provider, model, date = split_source_name(filename)
    return ReferencePrompt(
        id=Path(filename).stem,
        name=f"{provider} {model}",
        provider=provider,
        model=model,
        date=date,
        content=body,
        category=categorize(provider, model),
        tags=extract_tags(body),
    )
