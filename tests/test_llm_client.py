"""Tests for the LLMClient and DryRunClient — the OpenAI SDK is mocked."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from promptpilot.shared.llm_client import DryRunClient, LLMClient, _parse_retry_after


def _make_text_response(text: str, usage: SimpleNamespace | None = None):
    """Create a mock OpenAI response with text only."""
    message = SimpleNamespace(content=text, tool_calls=None)
    choice = SimpleNamespace(message=message)
    return SimpleNamespace(choices=[choice], usage=usage)


def _make_client(mock_create: AsyncMock) -> LLMClient:
    client = LLMClient.__new__(LLMClient)
    client._client = AsyncMock()
    client._client.chat.completions.create = mock_create
    client.model = "gpt-4o"
    return client


class TestSimpleCompletion:
    @pytest.mark.asyncio
    async def test_returns_text(self) -> None:
        client = _make_client(AsyncMock(return_value=_make_text_response("Hello!")))
        result = await client.simple_completion(system="sys", user_message="hi")
        assert result == "Hello!"

    @pytest.mark.asyncio
    async def test_sends_system_message_first(self) -> None:
        create = AsyncMock(return_value=_make_text_response("{}"))
        client = _make_client(create)

        await client.simple_completion(system="route things", user_message="hi")

        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["messages"][0] == {"role": "system", "content": "route things"}
        assert kwargs["messages"][1] == {"role": "user", "content": "hi"}
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_plain_text_mode(self) -> None:
        create = AsyncMock(return_value=_make_text_response("text"))
        client = _make_client(create)

        await client.simple_completion(system="s", user_message="u", json_mode=False)

        assert "response_format" not in create.call_args.kwargs

    @pytest.mark.asyncio
    async def test_none_content_becomes_empty_string(self) -> None:
        client = _make_client(AsyncMock(return_value=_make_text_response(None)))
        assert await client.simple_completion(system="s", user_message="u") == ""

    @pytest.mark.asyncio
    async def test_token_callback(self) -> None:
        usage = SimpleNamespace(prompt_tokens=120, completion_tokens=30)
        client = _make_client(AsyncMock(return_value=_make_text_response("{}", usage)))
        seen: list[tuple[int, int]] = []

        await client.simple_completion(
            system="s", user_message="u", on_tokens=lambda i, o: seen.append((i, o)),
        )
        assert seen == [(120, 30)]


class TestParseRetryAfter:
    def test_header_wins(self) -> None:
        exc = MagicMock()
        exc.response.headers = {"retry-after": "7"}
        assert _parse_retry_after(exc) == 7.0

    def test_seconds_from_message(self) -> None:
        exc = MagicMock()
        exc.response.headers = {}
        exc.__str__.return_value = "Rate limit reached. Please try again in 1.5s."
        assert _parse_retry_after(exc) == 1.5

    def test_milliseconds_from_message(self) -> None:
        exc = MagicMock()
        exc.response.headers = {}
        exc.__str__.return_value = "Please try again in 250ms"
        assert _parse_retry_after(exc) == pytest.approx(0.25)

    def test_nothing_found(self) -> None:
        exc = MagicMock()
        exc.response.headers = {}
        exc.__str__.return_value = "slow down"
        assert _parse_retry_after(exc) is None


class TestDryRunClient:
    @pytest.mark.asyncio
    async def test_echoes_user_instruction(self) -> None:
        message = (
            "<user_system_instruction>\nYou are a billing specialist.\n</user_system_instruction>\n"
            "<user_prompt>\nhi\n</user_prompt>"
        )
        raw = await DryRunClient().simple_completion(system="s", user_message=message)
        data = json.loads(raw)
        assert data["applied_source"] == "user_instruction"
        assert data["should_use_default"] is False
        assert data["final_instruction"] == "You are a billing specialist."

    @pytest.mark.asyncio
    async def test_without_instruction_returns_default_decision(self) -> None:
        raw = await DryRunClient().simple_completion(system="s", user_message="no tags here")
        data = json.loads(raw)
        assert data["applied_source"] == "default"
        assert data["should_use_default"] is True

    @pytest.mark.asyncio
    async def test_reads_last_user_message(self) -> None:
        raw = await DryRunClient().chat_completion(
            system="s",
            messages=[
                {"role": "user", "content": "<user_system_instruction>old</user_system_instruction>"},
                {"role": "assistant", "content": "not json"},
                {"role": "user", "content": "<user_system_instruction>new</user_system_instruction>"},
            ],
        )
        assert json.loads(raw)["final_instruction"] == "new"
