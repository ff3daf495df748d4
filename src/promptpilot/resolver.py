"""Wire the subsystem together and serve one request at a time."""

from __future__ import annotations

import logging

from promptpilot.agents.instruction_router.agent import InstructionRouterAgent
from promptpilot.corpus.service import ReferencePromptCorpus
from promptpilot.guidance.composer import GuidanceComposer
from promptpilot.guidance.relevance import RelevanceScorer
from promptpilot.matching.matcher import ModelPromptMatcher
from promptpilot.matching.registry import ModelRegistry
from promptpilot.routing.router import SystemInstructionRouter
from promptpilot.schemas.config import PilotConfig
from promptpilot.schemas.guidance import Resolution, TaskKind
from promptpilot.schemas.routing import RouterInput
from promptpilot.shared.llm_client import LLMClient

logger = logging.getLogger(__name__)


class InstructionResolver:
    """Route the system instruction and compose guidance for a request."""

    def __init__(
        self,
        router: SystemInstructionRouter,
        composer: GuidanceComposer,
        *,
        use_default_policy: bool = True,
    ) -> None:
        self.router = router
        self.composer = composer
        self.use_default_policy = use_default_policy

    async def resolve(
        self,
        request: RouterInput,
        *,
        task_kind: TaskKind = "improve",
        model_id: str | None = None,
        use_default_policy: bool | None = None,
    ) -> Resolution:
        """Return the routing decision and guidance for ``request``.

        Guidance is computed first (no I/O once the corpus is loaded); the
        router may await the LLM delegate.
        """
        policy = self.use_default_policy if use_default_policy is None else use_default_policy
        guidance = self.composer.compose(request.user_prompt, task_kind, model_id)
        decision = await self.router.route(request, policy)
        logger.info(
            "Resolved request: source=%s relevant=%d model=%s",
            decision.applied_source, len(guidance.relevant_prompts), model_id or "-",
        )
        return Resolution(decision=decision, guidance=guidance)


def create_corpus(cfg: PilotConfig) -> ReferencePromptCorpus:
    return ReferencePromptCorpus(cfg.corpus_dir, extensions=cfg.corpus_extensions)


def create_resolver(
    cfg: PilotConfig,
    client: LLMClient,
    *,
    corpus: ReferencePromptCorpus | None = None,
) -> InstructionResolver:
    """Build a resolver from config.  Pass ``corpus`` to share a loaded one."""
    if corpus is None:
        corpus = create_corpus(cfg)
    registry = ModelRegistry.with_builtins(cfg.models)
    scorer = RelevanceScorer(corpus)
    matcher = ModelPromptMatcher(corpus, registry)
    composer = GuidanceComposer(
        corpus, scorer, matcher,
        top_n=cfg.relevance_top_n,
        inspiration_count=cfg.inspiration_count,
    )
    delegate = InstructionRouterAgent(client, default_instruction=cfg.default_instruction)
    router = SystemInstructionRouter(delegate, default_instruction=cfg.default_instruction)
    return InstructionResolver(router, composer, use_default_policy=cfg.use_default_policy)
