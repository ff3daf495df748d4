"""Instruction routing agent — the LLM-backed DecisionDelegate."""

from __future__ import annotations

from promptpilot.agents.base import BaseAgent, extract_json
from promptpilot.agents.instruction_router.prompts import SYSTEM_PROMPT, USER_MESSAGE_TEMPLATE
from promptpilot.routing.router import DEFAULT_INSTRUCTION
from promptpilot.schemas.routing import RouterDecision, RouterInput
from promptpilot.shared.llm_client import LLMClient


class InstructionRouterAgent(BaseAgent):
    """Decides whether a meaningful user instruction is a deliberate override."""

    def __init__(self, client: LLMClient, *, default_instruction: str = DEFAULT_INSTRUCTION) -> None:
        super().__init__(client)
        self.default_instruction = default_instruction or DEFAULT_INSTRUCTION

    @property
    def name(self) -> str:
        return "Instruction Router"

    def get_system_prompt(self) -> str:
        return SYSTEM_PROMPT

    def build_user_message(self, request: RouterInput) -> str:
        return USER_MESSAGE_TEMPLATE.render(
            user_instruction=request.user_instruction or "",
            user_prompt=request.user_prompt,
            context=request.context or "",
            default_instruction=self.default_instruction,
        )

    def parse_output(self, raw_text: str) -> RouterDecision:
        data = extract_json(raw_text)
        return RouterDecision(**data)

    async def decide(self, request: RouterInput) -> RouterDecision:
        return await self.run(self.build_user_message(request))
