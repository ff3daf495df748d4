"""Tests for the BaseAgent ABC contract."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel

from promptpilot.agents.base import BaseAgent, extract_json
from promptpilot.shared.llm_client import LLMClient


class SampleOutput(BaseModel):
    result: str
    count: int = 0


class SampleAgent(BaseAgent):
    """Concrete test implementation of BaseAgent."""

    @property
    def name(self) -> str:
        return "Sample Agent"

    def get_system_prompt(self) -> str:
        return "You are a test agent."

    def parse_output(self, raw_text: str) -> SampleOutput:
        data = extract_json(raw_text)
        return SampleOutput(**data)


def _mock_openai_response(content: str) -> SimpleNamespace:
    """Build a fake OpenAI response with the given text content."""
    message = SimpleNamespace(content=content, tool_calls=None)
    choice = SimpleNamespace(message=message)
    return SimpleNamespace(choices=[choice], usage=None)


def _client(*responses: str) -> LLMClient:
    client = LLMClient.__new__(LLMClient)
    client._client = AsyncMock()
    client._client.chat.completions.create = AsyncMock(
        side_effect=[_mock_openai_response(r) for r in responses]
    )
    client.model = "gpt-4o"
    return client


class TestBaseAgent:
    @pytest.mark.asyncio
    async def test_run_returns_parsed_output(self) -> None:
        agent = SampleAgent(_client('{"result": "success", "count": 42}'))
        output = await agent.run("test input")

        assert isinstance(output, SampleOutput)
        assert output.result == "success"
        assert output.count == 42

    def test_name(self) -> None:
        agent = SampleAgent(LLMClient.__new__(LLMClient))
        assert agent.name == "Sample Agent"

    @pytest.mark.asyncio
    async def test_reformat_retry_on_bad_output(self) -> None:
        client = _client("Sure! The result is success.", '{"result": "success"}')
        output = await SampleAgent(client).run("go")

        assert output.result == "success"
        assert client._client.chat.completions.create.await_count == 2
        retry_messages = client._client.chat.completions.create.call_args.kwargs["messages"]
        assert retry_messages[-2] == {"role": "assistant", "content": "Sure! The result is success."}
        assert "JSON" in retry_messages[-1]["content"]

    @pytest.mark.asyncio
    async def test_second_failure_propagates(self) -> None:
        client = _client("nope", "still nope")
        with pytest.raises(ValueError, match="Could not extract JSON"):
            await SampleAgent(client).run("go")


class TestExtractJson:
    def test_nested_json(self) -> None:
        text = json.dumps({"a": {"b": [1, 2, 3]}})
        data = extract_json(text)
        assert data["a"]["b"] == [1, 2, 3]

    def test_json_with_whitespace(self) -> None:
        text = "  \n  {\"key\": \"value\"}  \n  "
        assert extract_json(text)["key"] == "value"

    def test_json_in_markdown_code_fence(self) -> None:
        text = 'Here is the decision:\n\n```json\n{"applied_source": "default"}\n```\n'
        assert extract_json(text)["applied_source"] == "default"

    def test_json_with_trailing_text(self) -> None:
        text = '{"result": "ok"}\n\nLet me know if you need anything else!'
        assert extract_json(text)["result"] == "ok"

    def test_json_inside_prose(self) -> None:
        text = 'My routing decision follows: {"result": "ok", "count": 1} as requested.'
        data = extract_json(text)
        assert data == {"result": "ok", "count": 1}

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(ValueError, match="Could not extract JSON"):
            extract_json("not json at all")
