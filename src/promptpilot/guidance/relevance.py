"""Rank reference prompts against free-text user input."""

from __future__ import annotations

from promptpilot.corpus.service import ReferencePromptCorpus
from promptpilot.schemas.corpus import ReferencePrompt

MIN_TOKEN_LENGTH = 4
TAG_BONUS = 2
MAJOR_PROVIDER_BONUS = 1
MAJOR_PROVIDERS = frozenset({"OpenAI", "Anthropic", "Google"})

# (prompt tag, keyword that must appear in the user text)
_TAG_TRIGGERS: list[tuple[str, str]] = [
    ("assistant", "assistant"),
    ("creative", "creative"),
    ("coding", "code"),
    ("analysis", "analyze"),
]


class RelevanceScorer:
    """Additive, deterministic relevance scoring over a corpus."""

    def __init__(self, corpus: ReferencePromptCorpus) -> None:
        self.corpus = corpus

    def score(self, prompt: ReferencePrompt, user_text: str) -> int:
        text = user_text.lower()
        content = prompt.content.lower()

        total = sum(
            1 for token in text.split()
            if len(token) >= MIN_TOKEN_LENGTH and token in content
        )
        for tag, keyword in _TAG_TRIGGERS:
            if tag in prompt.tags and keyword in text:
                total += TAG_BONUS
        if prompt.category in MAJOR_PROVIDERS:
            total += MAJOR_PROVIDER_BONUS
        return total

    def rank(self, user_text: str, top_n: int = 5) -> list[ReferencePrompt]:
        """Best-scoring prompts first; ties keep corpus order."""
        prompts = self.corpus.get_all()
        scores = {p.id: self.score(p, user_text) for p in prompts}
        ranked = sorted(prompts, key=lambda p: scores[p.id], reverse=True)
        return ranked[:top_n]
