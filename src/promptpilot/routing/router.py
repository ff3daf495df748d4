"""System instruction router: user instruction vs. the default instruction set.

Two explicit branches:

1. A local heuristic that rejects missing, short or placeholder
   instructions and applies the default immediately.
2. A ``DecisionDelegate`` (normally an LLM) that decides whether a
   meaningful instruction really is a deliberate, specific override.
"""

from __future__ import annotations

import logging
from typing import Protocol

from promptpilot.routing.placeholder import MIN_MEANINGFUL_LENGTH, is_placeholder
from promptpilot.schemas.routing import RouterDecision, RouterInput

logger = logging.getLogger(__name__)

MINIMAL_FALLBACK_INSTRUCTION = "You are a helpful AI assistant."

DEFAULT_INSTRUCTION = """\
You are PromptPilot, an expert prompt engineering assistant. Your role is to help \
create, improve, and refine prompts for AI agents and chatbots.

## Your Purpose:
- Help users create high-quality prompts for AI systems
- Improve existing prompts while maintaining professional standards
- Ensure all prompts follow proven templates and best practices
- Provide guidance on prompt structure, tagging, and compliance

## Reference Standards:
You have access to golden standard prompt templates including:
- condition_agent: For classifying user queries and routing
- conversation_agent: For handling greetings and escalations
- complex_agent: For advanced troubleshooting with probing
- howto_agent: For step-by-step guidance and instructions
- general_agent: For general assistance with reasoning

## When Creating/Improving Prompts:
1. Use proven templates as your reference for structure and best practices
2. Ensure proper tagging system (#Answer, #Escalate, #Sensitive, etc.)
3. Include reasoning requirements and response guidelines
4. Maintain professional tone and compliance standards
5. Follow specific agent patterns from the golden standards

## Your Response Style:
- Be helpful and professional
- Provide clear, actionable guidance
- Reference the golden standards when relevant
- Explain your reasoning for prompt improvements
- Focus on creating effective AI agent prompts

Remember: You are helping users create prompts FOR their AI agents, not acting \
as an AI agent yourself."""


class RoutingError(RuntimeError):
    """The decision delegate failed; no local fallback is applied."""


class DecisionDelegate(Protocol):
    """Makes the final routing call for a meaningful user instruction."""

    async def decide(self, request: RouterInput) -> RouterDecision: ...


def has_meaningful_instruction(instruction: str | None) -> bool:
    """True if the instruction is long enough and not placeholder text."""
    if not instruction:
        return False
    return len(instruction.strip()) > MIN_MEANINGFUL_LENGTH and not is_placeholder(instruction)


class SystemInstructionRouter:
    """Decide which system instruction governs a request."""

    def __init__(
        self,
        delegate: DecisionDelegate,
        *,
        default_instruction: str = DEFAULT_INSTRUCTION,
    ) -> None:
        self.delegate = delegate
        self.default_instruction = default_instruction or DEFAULT_INSTRUCTION

    async def route(
        self,
        request: RouterInput,
        use_default_policy: bool = True,
    ) -> RouterDecision:
        """Return the routing decision for ``request``.

        Raises ``RoutingError`` if the delegate branch is taken and fails.
        """
        if not use_default_policy:
            instruction = request.user_instruction
            if not instruction or not instruction.strip():
                instruction = MINIMAL_FALLBACK_INSTRUCTION
            return RouterDecision(
                should_use_default=False,
                final_instruction=instruction,
                reasoning="Using custom instruction as the default policy is disabled.",
                applied_source="user_instruction",
            )

        if not has_meaningful_instruction(request.user_instruction):
            logger.debug("No meaningful user instruction; applying default")
            return RouterDecision(
                should_use_default=True,
                final_instruction=self.default_instruction,
                reasoning=(
                    "Using the default instruction set (proven templates). "
                    "No meaningful custom instruction provided."
                ),
                applied_source="default",
            )

        logger.debug("User instruction looks meaningful; asking delegate")
        try:
            return await self.delegate.decide(request)
        except Exception as exc:
            logger.error("Instruction routing delegate failed: %s", exc)
            raise RoutingError(f"Instruction routing delegate failed: {exc}") from exc
