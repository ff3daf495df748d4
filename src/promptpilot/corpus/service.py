"""In-memory reference prompt corpus, loaded once from a directory."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from promptpilot.corpus.parser import parse_reference_prompt
from promptpilot.schemas.corpus import ReferencePrompt

logger = logging.getLogger(__name__)


class ReferencePromptCorpus:
    """Read-mostly collection of reference prompts.

    Construct one per process and pass it to the scorer, matcher and
    composer.  ``initialize()`` loads the directory on first call and is a
    no-op afterwards; the load has no await points, so concurrent tasks on
    one event loop cannot interleave inside it.
    """

    def __init__(
        self,
        directory: str | Path | None = None,
        *,
        extensions: Iterable[str] = (".md",),
        rng: random.Random | None = None,
    ) -> None:
        self.directory = Path(directory) if directory is not None else None
        self.extensions = {ext.lower() for ext in extensions}
        self._rng = rng or random.Random()
        self._prompts: list[ReferencePrompt] = []
        self._by_id: dict[str, ReferencePrompt] = {}
        self._initialized = False

    @classmethod
    def from_prompts(
        cls,
        prompts: Iterable[ReferencePrompt],
        *,
        rng: random.Random | None = None,
    ) -> "ReferencePromptCorpus":
        """Build an already-initialized corpus from records (fixtures, tests)."""
        corpus = cls(rng=rng)
        for prompt in prompts:
            corpus._add(prompt, source=prompt.id)
        corpus._initialized = True
        return corpus

    @property
    def initialized(self) -> bool:
        return self._initialized

    def __len__(self) -> int:
        self.initialize()
        return len(self._prompts)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Load every source document once.  Bad entries are skipped.

        If the directory itself can't be listed the error is logged and the
        corpus stays uninitialized, so the next query tries again.
        """
        if self._initialized:
            return

        if self.directory is None:
            self._initialized = True
            return
        if not self.directory.is_dir():
            logger.error("Reference prompt directory not found: %s", self.directory)
            self._initialized = True
            return

        try:
            files = sorted(
                p for p in self.directory.iterdir()
                if p.is_file() and p.suffix.lower() in self.extensions
            )
        except OSError as exc:
            logger.error("Failed to list reference prompt directory %s: %s", self.directory, exc)
            return

        self._initialized = True
        for path in files:
            try:
                prompt = parse_reference_prompt(path.name, path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, ValidationError) as exc:
                logger.warning("Failed to parse %s: %s", path.name, exc)
                continue
            if prompt is None:
                logger.debug("Skipping %s: no content after heading", path.name)
                continue
            self._add(prompt, source=path.name)

        logger.info(
            "Loaded %d reference prompts from %s", len(self._prompts), self.directory,
        )

    def _add(self, prompt: ReferencePrompt, *, source: str) -> None:
        if prompt.id in self._by_id:
            logger.warning("Skipping %s: duplicate prompt id %r", source, prompt.id)
            return
        self._prompts.append(prompt)
        self._by_id[prompt.id] = prompt

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all(self) -> list[ReferencePrompt]:
        self.initialize()
        return list(self._prompts)

    def get_by_category(self, category: str) -> list[ReferencePrompt]:
        return [p for p in self.get_all() if p.category == category]

    def get_by_provider(self, provider: str) -> list[ReferencePrompt]:
        provider = provider.lower()
        return [p for p in self.get_all() if p.provider.lower() == provider]

    def search(self, query: str) -> list[ReferencePrompt]:
        """Case-insensitive substring search over name, content and tags."""
        q = query.lower()
        return [
            p for p in self.get_all()
            if q in p.name.lower()
            or q in p.content.lower()
            or any(q in tag for tag in p.tags)
        ]

    def get_random(self, n: int = 5) -> list[ReferencePrompt]:
        prompts = self.get_all()
        return self._rng.sample(prompts, min(n, len(prompts)))

    def get_by_id(self, prompt_id: str) -> ReferencePrompt | None:
        self.initialize()
        return self._by_id.get(prompt_id)

    def get_similar(self, prompt: ReferencePrompt, n: int = 3) -> list[ReferencePrompt]:
        """Prompts sharing the category or at least one tag, excluding ``prompt``."""
        tags = set(prompt.tags)
        similar = [
            p for p in self.get_all()
            if p.id != prompt.id
            and (p.category == prompt.category or tags.intersection(p.tags))
        ]
        return similar[:n]
