"""Typer CLI — ``promptpilot route``, ``match``, ``guide`` and friends."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from promptpilot.config import load_config
from promptpilot.schemas.config import PilotConfig

# Load .env file from project root (if it exists)
load_dotenv()

app = typer.Typer(
    name="promptpilot",
    help="PromptPilot — resolve system instructions and reference-prompt guidance.",
    no_args_is_help=True,
)
console = Console()

_TASK_KINDS = ("generate", "improve", "rewrite", "evaluate")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )
    # httpx logs every HTTP request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _load(config: Optional[Path]) -> PilotConfig:
    if config is None:
        return PilotConfig()
    try:
        return load_config(config)
    except Exception as exc:
        console.print(f"[red]Config validation failed:[/] {exc}")
        raise typer.Exit(code=1)


def _make_client(cfg: PilotConfig, dry_run: bool):
    if dry_run:
        from promptpilot.shared.llm_client import DryRunClient
        return DryRunClient()
    from promptpilot.shared.llm_client import LLMClient
    return LLMClient(model=cfg.router_model)


@app.command()
def validate(
    config: Path = typer.Option(..., "--config", "-c", help="Path to pilot-config.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Validate a configuration file and report the corpus it points at."""
    _setup_logging(verbose)
    cfg = _load(config)

    from promptpilot.resolver import create_corpus

    corpus = create_corpus(cfg)
    console.print("[green]Config is valid![/]\n")
    console.print(f"  Corpus dir:      {cfg.corpus_dir}")
    console.print(f"  Extensions:      {', '.join(cfg.corpus_extensions)}")
    console.print(f"  Reference prompts loaded: {len(corpus)}")
    console.print(f"  Default policy:  {'on' if cfg.use_default_policy else 'off'}")
    console.print(f"  Router model:    {cfg.router_model}")
    if cfg.models:
        console.print(f"  Extra models:    {', '.join(m.id for m in cfg.models)}")


@app.command()
def route(
    prompt: str = typer.Option(..., "--prompt", "-p", help="The user's prompt."),
    instruction: str = typer.Option("", "--instruction", "-i", help="User-supplied system instruction."),
    context: str = typer.Option("playground", "--context", help="Request context label."),
    no_default_policy: bool = typer.Option(False, "--no-default-policy", help="Always apply the user instruction."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to pilot-config.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use a canned delegate (no API calls)."),
) -> None:
    """Decide which system instruction governs a request."""
    _setup_logging(verbose)
    cfg = _load(config)

    from promptpilot.resolver import create_resolver
    from promptpilot.routing.router import RoutingError
    from promptpilot.schemas.routing import RouterInput

    resolver = create_resolver(cfg, _make_client(cfg, dry_run))
    request = RouterInput(user_instruction=instruction or None, user_prompt=prompt, context=context)
    policy = cfg.use_default_policy and not no_default_policy
    try:
        decision = asyncio.run(resolver.router.route(request, policy))
    except RoutingError as exc:
        console.print(f"[red]Routing failed:[/] {exc}")
        raise typer.Exit(code=1)

    console.print(f"[bold]Applied source:[/] {decision.applied_source}")
    console.print(f"[bold]Reasoning:[/] {decision.reasoning}\n")
    console.print(decision.final_instruction)


@app.command()
def match(
    model_id: str = typer.Argument(..., help="Target model id, e.g. gpt-4.1"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to pilot-config.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Match a target model to reference prompts."""
    _setup_logging(verbose)
    cfg = _load(config)

    from promptpilot.matching.registry import UnknownModelError

    resolver = _offline_resolver(cfg)
    matcher = resolver.composer.matcher
    try:
        result = matcher.match(model_id)
    except UnknownModelError as exc:
        console.print(f"[red]{exc}[/]")
        raise typer.Exit(code=1)

    console.print(Markdown(matcher.model_specific_guidance(model_id, result)))


@app.command()
def guide(
    prompt: str = typer.Option(..., "--prompt", "-p", help="The user's prompt."),
    instruction: str = typer.Option("", "--instruction", "-i", help="User-supplied system instruction."),
    task: str = typer.Option("improve", "--task", "-t", help="generate | improve | rewrite | evaluate"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Target model id for model-specific guidance."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the Markdown report here."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to pilot-config.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use a canned delegate (no API calls)."),
) -> None:
    """Resolve the system instruction and compose reference-prompt guidance."""
    _setup_logging(verbose)
    cfg = _load(config)
    if task not in _TASK_KINDS:
        console.print(f"[red]Unknown task:[/] {task} (expected one of {', '.join(_TASK_KINDS)})")
        raise typer.Exit(code=1)

    from promptpilot.output.markdown import render_resolution
    from promptpilot.resolver import create_resolver
    from promptpilot.routing.router import RoutingError
    from promptpilot.schemas.routing import RouterInput

    resolver = create_resolver(cfg, _make_client(cfg, dry_run))
    request = RouterInput(user_instruction=instruction or None, user_prompt=prompt)
    try:
        resolution = asyncio.run(resolver.resolve(request, task_kind=task, model_id=model))  # type: ignore[arg-type]
    except RoutingError as exc:
        console.print(f"[red]Routing failed:[/] {exc}")
        raise typer.Exit(code=1)

    report = render_resolution(resolution, user_prompt=prompt)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(report)
        console.print(f"[green]Guidance written to:[/] {output}")
    else:
        console.print(Markdown(report))


@app.command()
def improve(
    prompt: str = typer.Option(..., "--prompt", "-p", help="The prompt to improve."),
    goal: str = typer.Option(..., "--goal", "-g", help="What the improvement should achieve."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to pilot-config.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Show improvement guidance for an existing prompt."""
    _setup_logging(verbose)
    cfg = _load(config)
    composer = _offline_resolver(cfg).composer
    console.print(Markdown(composer.improvement_guidance(prompt, goal)))


@app.command()
def corpus(
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Substring to search for."),
    provider: Optional[str] = typer.Option(None, "--provider", help="Filter by provider token."),
    category: Optional[str] = typer.Option(None, "--category", help="Filter by category (OpenAI, Google, ...)."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to pilot-config.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """List reference prompts in the corpus."""
    _setup_logging(verbose)
    cfg = _load(config)

    from promptpilot.resolver import create_corpus

    store = create_corpus(cfg)
    prompts = store.search(search) if search else store.get_all()
    if provider:
        prompts = [p for p in prompts if p.provider.lower() == provider.lower()]
    if category:
        prompts = [p for p in prompts if p.category == category]

    table = Table(title=f"Reference prompts ({len(prompts)})")
    table.add_column("ID")
    table.add_column("Category")
    table.add_column("Model")
    table.add_column("Date")
    table.add_column("Tags")
    for p in prompts:
        table.add_row(p.id, p.category, p.model, p.date, ", ".join(p.tags))
    console.print(table)


def _offline_resolver(cfg: PilotConfig):
    """Resolver for commands that never reach the LLM delegate."""
    from promptpilot.resolver import create_resolver
    from promptpilot.shared.llm_client import DryRunClient

    return create_resolver(cfg, DryRunClient())  # type: ignore[arg-type]
