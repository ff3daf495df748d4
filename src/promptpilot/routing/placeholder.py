"""Detect generic or placeholder system instructions."""

from __future__ import annotations

import re

# Instructions shorter than this can't carry specific guidance.
MIN_MEANINGFUL_LENGTH = 50

_PLACEHOLDER_PATTERNS: list[re.Pattern[str]] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^enter detailed instructions",
        r"^for example",
        r"^you are a helpful assistant[.!]?$",
        r"^you are a helpful ai[.!]?$",
        r"^you are an ai assistant[.!]?$",
        r"^you are chatgpt[.!]?$",
        r"^you are claude[.!]?$",
        r"^you are gemini[.!]?$",
        r"^you are a language model[.!]?$",
        r"^you are an ai[.!]?$",
        r"^assistant[.!]?$",
        r"^ai assistant[.!]?$",
        r"^helpful assistant[.!]?$",
        r"^ai[.!]?$",
        r"^bot[.!]?$",
        r"^chatbot[.!]?$",
        r"^provide accurate and helpful responses[.!]?$",
        r"^be polite and professional[.!]?$",
        r"^placeholder",
        r"^example",
        r"^enter your",
        r"^type your",
        r"^add your",
    )
]


def is_placeholder(text: str) -> bool:
    """Return True if ``text`` is too short or matches a generic phrase."""
    trimmed = text.strip()
    if len(trimmed) < MIN_MEANINGFUL_LENGTH:
        return True
    return any(pattern.search(trimmed) for pattern in _PLACEHOLDER_PATTERNS)
