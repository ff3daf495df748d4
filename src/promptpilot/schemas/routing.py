"""Pydantic models for system instruction routing."""

from typing import Literal

from pydantic import BaseModel, Field


class RouterInput(BaseModel):
    """A single routing request."""

    user_instruction: str | None = None
    user_prompt: str
    context: str | None = None


class RouterDecision(BaseModel):
    """Which system instruction governs the request, and why."""

    should_use_default: bool
    final_instruction: str = Field(min_length=1)
    reasoning: str = ""
    applied_source: Literal["user_instruction", "default"]
