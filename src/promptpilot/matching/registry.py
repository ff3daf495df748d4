"""Registry of target model configurations."""

from __future__ import annotations

from typing import Iterable

from promptpilot.schemas.matching import ModelConfig


class UnknownModelError(ValueError):
    """The model id is not in the registry."""


BUILTIN_MODELS: list[ModelConfig] = [
    # OpenAI
    ModelConfig(
        id="gpt-4o", name="GPT-4o", provider="openai",
        description="GPT-4 Omni model with multimodal capabilities",
        max_tokens=128_000,
        capabilities=["text", "vision", "function-calling", "multimodal"],
    ),
    ModelConfig(
        id="gpt-4o-mini", name="GPT-4o Mini", provider="openai",
        description="Efficient GPT-4o mini for faster responses and lower costs",
        max_tokens=128_000,
        capabilities=["text", "vision", "function-calling"],
    ),
    ModelConfig(
        id="gpt-4.1", name="GPT-4.1", provider="openai",
        description="GPT-4.1 model with enhanced performance and coding capabilities",
        max_tokens=1_000_000, is_latest=True,
        capabilities=["text", "vision", "function-calling", "coding", "long-context"],
    ),
    ModelConfig(
        id="gpt-4.1-mini", name="GPT-4.1 Mini", provider="openai",
        max_tokens=1_000_000, is_latest=True,
        capabilities=["text", "vision", "function-calling", "coding"],
    ),
    ModelConfig(
        id="gpt-4.1-nano", name="GPT-4.1 Nano", provider="openai",
        max_tokens=1_000_000, is_latest=True,
        capabilities=["text", "coding", "fast"],
    ),
    ModelConfig(
        id="gpt-5", name="GPT-5", provider="openai",
        description="GPT-5 model with superior reasoning and multimodal capabilities",
        max_tokens=1_000_000, is_latest=True,
        capabilities=["text", "vision", "audio", "video", "function-calling", "advanced", "multimodal"],
    ),
    ModelConfig(
        id="gpt-5-mini", name="GPT-5 Mini", provider="openai",
        max_tokens=1_000_000, is_latest=True,
        capabilities=["text", "vision", "function-calling", "multimodal"],
    ),
    ModelConfig(
        id="gpt-5-nano", name="GPT-5 Nano", provider="openai",
        max_tokens=1_000_000, is_latest=True,
        capabilities=["text", "fast", "efficient"],
    ),
    # DeepSeek
    ModelConfig(
        id="deepseek-v3.1", name="DeepSeek-V3.1 (Non-thinking Model)", provider="deepseek",
        description="DeepSeek V3.1 for general tasks without thinking mode",
        is_latest=True,
        capabilities=["text", "code", "general"],
    ),
    ModelConfig(
        id="deepseek-v3.1-thinking", name="DeepSeek-V3.1 (Thinking Mode)", provider="deepseek",
        description="DeepSeek V3.1 with thinking mode for complex reasoning tasks",
        is_latest=True,
        capabilities=["text", "code", "thinking", "reasoning"],
    ),
    # Google AI
    ModelConfig(
        id="googleai/gemini-2.5-flash", name="Gemini 2.5 Flash", provider="googleai",
        description="Stable Gemini model", is_latest=True,
        capabilities=["text", "vision", "multimodal"],
    ),
    ModelConfig(
        id="googleai/gemini-2.0-flash-exp", name="Gemini 2.0 Flash (Experimental)", provider="googleai",
        description="Experimental Gemini model",
        capabilities=["text", "vision", "multimodal"],
    ),
]


class ModelRegistry:
    """Read-only lookup of ``model id -> ModelConfig``.

    Later entries with the same id replace earlier ones, so configured
    models can override built-ins.
    """

    def __init__(self, models: Iterable[ModelConfig] | None = None) -> None:
        self._models: dict[str, ModelConfig] = {}
        for model in BUILTIN_MODELS if models is None else models:
            self._models[model.id] = model

    @classmethod
    def with_builtins(cls, extra: Iterable[ModelConfig] = ()) -> "ModelRegistry":
        return cls([*BUILTIN_MODELS, *extra])

    def get(self, model_id: str) -> ModelConfig:
        try:
            return self._models[model_id]
        except KeyError:
            raise UnknownModelError(f"Model {model_id} not found") from None

    def all(self) -> list[ModelConfig]:
        return list(self._models.values())

    def by_provider(self, provider: str) -> list[ModelConfig]:
        return [m for m in self._models.values() if m.provider == provider]

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models
