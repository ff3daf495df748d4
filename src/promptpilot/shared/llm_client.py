"""Async OpenAI API wrapper used by the routing delegate."""

from __future__ import annotations

import asyncio
import json
import logging
import random
import re
from typing import Any, Callable

from openai import AsyncOpenAI, APIConnectionError, APITimeoutError, RateLimitError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"
MAX_TOKENS = 4_096

# Retry settings for rate-limit (429) and connection errors
_MAX_RETRIES = 6
_BASE_DELAY = 2  # seconds, floor for exponential backoff


def _parse_retry_after(exc: RateLimitError) -> float | None:
    """Extract the suggested retry delay from an OpenAI rate limit error.

    Checks the ``Retry-After`` header first, then falls back to parsing
    the "Please try again in Xs / Xms" substring from the error message.
    """
    try:
        headers = exc.response.headers  # type: ignore[union-attr]
        if retry_after := headers.get("retry-after"):
            return float(retry_after)
    except (AttributeError, TypeError, ValueError):
        pass

    m = re.search(r"try again in (\d+(?:\.\d+)?)\s*(ms|s)\b", str(exc), re.IGNORECASE)
    if m:
        value = float(m.group(1))
        return value / 1000 if m.group(2).lower() == "ms" else value

    return None


TokensCallback = Callable[[int, int], None]
"""Called with (input_tokens, output_tokens) when a completion finishes."""


class LLMClient:
    """Thin async wrapper around the OpenAI SDK.

    - ``chat_completion`` — system prompt plus a message list, no tools.
    - ``simple_completion`` — single user message convenience wrapper.
    """

    def __init__(self, api_key: str | None = None, *, model: str = DEFAULT_MODEL) -> None:
        self._client = AsyncOpenAI(api_key=api_key)
        self.model = model

    async def _call_with_retry(self, **kwargs: Any) -> Any:
        """Call chat.completions.create with exponential backoff.

        Waits at least as long as the suggested retry-after time, with ±25%
        jitter.  Fails immediately when the request itself exceeds the token
        limit.
        """
        for attempt in range(_MAX_RETRIES):
            try:
                return await self._client.chat.completions.create(**kwargs)
            except RateLimitError as exc:
                msg = str(exc).lower()
                if "request too large" in msg or "context_length_exceeded" in msg:
                    logger.error("Request exceeds token limit (not retryable): %s", exc)
                    raise
                if attempt == _MAX_RETRIES - 1:
                    raise

                backoff = _BASE_DELAY * (2 ** attempt)
                suggested = _parse_retry_after(exc)
                base_delay = max(suggested or 0.0, backoff)
                jitter = random.uniform(-0.25 * base_delay, 0.25 * base_delay)
                delay = max(1.0, base_delay + jitter)

                logger.warning(
                    "Rate limited (429), retrying in %.1fs (attempt %d/%d, "
                    "suggested=%.1fs, backoff=%ds): %s",
                    delay, attempt + 1, _MAX_RETRIES, suggested or 0.0, backoff, exc,
                )
                await asyncio.sleep(delay)
            except (APIConnectionError, APITimeoutError) as exc:
                if attempt == _MAX_RETRIES - 1:
                    raise
                backoff = _BASE_DELAY * (2 ** min(attempt, 3))
                jitter = random.uniform(-0.25 * backoff, 0.25 * backoff)
                delay = max(1.0, backoff + jitter)
                logger.warning(
                    "Connection error, retrying in %.1fs (attempt %d/%d): %s",
                    delay, attempt + 1, _MAX_RETRIES, exc,
                )
                await asyncio.sleep(delay)

    async def chat_completion(
        self,
        *,
        system: str,
        messages: list[dict[str, Any]],
        json_mode: bool = True,
        on_tokens: TokensCallback | None = None,
    ) -> str:
        """Send ``messages`` after a system message and return the reply text.

        When ``json_mode`` is True (default), the OpenAI API guarantees
        the response is valid JSON.
        """
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": MAX_TOKENS,
            "messages": [{"role": "system", "content": system}, *messages],
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self._call_with_retry(**kwargs)
        usage = getattr(response, "usage", None)
        if on_tokens and usage:
            on_tokens(getattr(usage, "prompt_tokens", 0), getattr(usage, "completion_tokens", 0))
        return response.choices[0].message.content or ""

    async def simple_completion(
        self,
        *,
        system: str,
        user_message: str,
        json_mode: bool = True,
        on_tokens: TokensCallback | None = None,
    ) -> str:
        """Single request/response with one user message."""
        return await self.chat_completion(
            system=system,
            messages=[{"role": "user", "content": user_message}],
            json_mode=json_mode,
            on_tokens=on_tokens,
        )


# ======================================================================
# Dry-run mock client (no API calls)
# ======================================================================

_INSTRUCTION_TAG_RE = re.compile(
    r"<user_system_instruction>\n?(.*?)\n?</user_system_instruction>", re.DOTALL,
)


class DryRunClient:
    """Drop-in replacement for LLMClient that makes zero API calls.

    Returns a canned routing decision that accepts whatever user
    instruction it finds in the request.
    """

    model = "dry-run"

    async def chat_completion(
        self,
        *,
        system: str,
        messages: list[dict[str, Any]],
        json_mode: bool = True,
        on_tokens: TokensCallback | None = None,
    ) -> str:
        last_user = next(
            (m["content"] for m in reversed(messages) if m.get("role") == "user"), "",
        )
        m = _INSTRUCTION_TAG_RE.search(str(last_user))
        instruction = m.group(1).strip() if m else ""
        logger.info("[dry-run] Routing decision for %d-char instruction", len(instruction))
        if not instruction:
            return json.dumps({
                "should_use_default": True,
                "final_instruction": "(dry-run) default instruction",
                "reasoning": "[dry-run] No user instruction found in request.",
                "applied_source": "default",
            })
        return json.dumps({
            "should_use_default": False,
            "final_instruction": instruction,
            "reasoning": "[dry-run] Accepted the user instruction without an API call.",
            "applied_source": "user_instruction",
        })

    async def simple_completion(
        self,
        *,
        system: str,
        user_message: str,
        json_mode: bool = True,
        on_tokens: TokensCallback | None = None,
    ) -> str:
        return await self.chat_completion(
            system=system,
            messages=[{"role": "user", "content": user_message}],
            json_mode=json_mode,
            on_tokens=on_tokens,
        )
