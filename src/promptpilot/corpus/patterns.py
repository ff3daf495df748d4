"""Structural pattern detection shared by the matcher and the composer."""

from __future__ import annotations

import re

# (element, marker); markers are case-sensitive substrings
STRUCTURE_MARKERS: list[tuple[str, str]] = [
    ("role_definition", "You are"),
    ("constraints", "DO NOT"),
    ("sections", "##"),
    ("examples", "Example"),
    ("code_blocks", "```"),
    ("step_by_step", "Step"),
]

_ROLE_SENTENCE_RE = re.compile(r"You are[^.!?]*[.!?]")


def analyze_structure(content: str) -> list[str]:
    """List the structure elements present in a prompt body."""
    return [element for element, marker in STRUCTURE_MARKERS if marker in content]


def extract_key_pattern(content: str) -> str:
    """Short label for the most prominent pattern in a prompt."""
    if "You are" in content:
        m = _ROLE_SENTENCE_RE.search(content)
        return m.group(0)[:100] + "..." if m else "Role definition pattern"
    if "DO NOT" in content:
        return "Explicit constraints pattern"
    if "Example" in content:
        return "Example-driven pattern"
    return "Standard structure pattern"
