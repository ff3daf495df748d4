"""Reference prompt record: one captured provider system prompt."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class ReferencePrompt(BaseModel):
    """A reference system prompt parsed from the corpus directory.

    Immutable once loaded.  ``id`` is the source file stem and is unique
    within a corpus.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    provider: str
    model: str
    date: str = "unknown"
    content: str
    category: str = "Other"  # OpenAI, Anthropic, Google, xAI, Meta, Other
    tags: tuple[str, ...] = ()

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content must not be empty")
        return v

    @property
    def year(self) -> int | None:
        """Four-digit year from ``date``, or None when it isn't numeric."""
        head = self.date[:4]
        return int(head) if head.isdigit() else None
