"""Base agent ABC — a single LLM completion parsed into a Pydantic model."""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from promptpilot.shared.llm_client import LLMClient

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """Abstract base class for completion-based agents.

    Subclasses implement:
    - ``name`` — human-readable agent name
    - ``get_system_prompt()`` — returns the system prompt string
    - ``parse_output(raw_text)`` — parses the reply into a Pydantic model
    """

    def __init__(self, client: LLMClient) -> None:
        self.client = client

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logs."""

    @abstractmethod
    def get_system_prompt(self) -> str:
        """Return the system prompt for this agent."""

    @abstractmethod
    def parse_output(self, raw_text: str) -> BaseModel:
        """Parse the model's reply into a Pydantic model."""

    async def run(self, user_message: str) -> BaseModel:
        """Send ``user_message`` and return the parsed output model.

        If parsing fails, asks the model once to re-format as JSON.
        """
        messages: list[dict[str, Any]] = [{"role": "user", "content": user_message}]
        raw = await self.client.chat_completion(
            system=self.get_system_prompt(),
            messages=messages,
        )
        logger.debug("Agent %s raw output:\n%s", self.name, raw[:500])
        return await self._parse_with_retry(raw, messages)

    async def _parse_with_retry(
        self,
        raw: str,
        messages: list[dict[str, Any]],
    ) -> BaseModel:
        """Try to parse model output; on failure ask the model to re-format."""
        try:
            return self.parse_output(raw)
        except (ValueError, json.JSONDecodeError, KeyError) as first_err:
            logger.warning(
                "Agent %s output was not valid JSON, requesting re-format. Error: %s",
                self.name,
                first_err,
            )

        messages.append({"role": "assistant", "content": raw})
        messages.append({
            "role": "user",
            "content": (
                "I need the output as a single JSON object (no markdown, no "
                "explanation — just raw JSON) matching the schema described in "
                "your instructions. Please re-format your response now."
            ),
        })

        raw_retry = await self.client.chat_completion(
            system=self.get_system_prompt(),
            messages=messages,
        )
        logger.debug("Agent %s retry output:\n%s", self.name, raw_retry[:500])
        return self.parse_output(raw_retry)


def extract_json(text: str) -> dict[str, Any]:
    """Extract a JSON object from text that may contain markdown fences."""
    text = text.strip()

    # 1. Direct parse
    if text.startswith("{"):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            try:
                obj, _ = json.JSONDecoder().raw_decode(text)
                return obj
            except json.JSONDecodeError:
                pass

    # 2. ```json ... ``` or ``` ... ``` fenced blocks
    match = re.search(r"```(?:json)?\s*\n?(.*?)\n?```", text, re.DOTALL)
    if match:
        return json.loads(match.group(1).strip())

    # 3. First { onwards
    try:
        start = text.index("{")
        obj, _ = json.JSONDecoder().raw_decode(text, idx=start)
        return obj
    except (ValueError, json.JSONDecodeError):
        pass

    raise ValueError(
        f"Could not extract JSON from model response (length={len(text)}). "
        f"First 300 chars: {text[:300]!r}"
    )
