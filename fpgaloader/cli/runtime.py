"""Shared CLI plumbing: agent construction, async execution, error display."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

import typer
from rich.console import Console

from fpgaloader.bridge.http_agent import HttpRemoteAgent
from fpgaloader.bridge.remote_agent import RemoteAgent
from fpgaloader.config import LoaderConfig
from fpgaloader.core.errors import LoaderError
from fpgaloader.core.orchestrator import WorkflowOrchestrator
from fpgaloader.models.workflows import WorkflowResult

logger = logging.getLogger(__name__)

console = Console()

AgentFactory = Callable[[LoaderConfig], RemoteAgent]


def http_agent_factory(settings: LoaderConfig) -> RemoteAgent:
    """Default factory: an ``HttpRemoteAgent`` for ``settings.server``."""
    return HttpRemoteAgent(settings.server, timeout=settings.request_timeout_seconds)


class CliContext:
    """Per-invocation state stored on ``typer.Context.obj``.

    Tests pass their own instance through ``CliRunner.invoke(obj=...)`` to
    swap in an in-memory agent. When ``settings`` is ``None`` the app
    callback loads them from the environment.
    """

    def __init__(
        self,
        settings: LoaderConfig | None = None,
        agent_factory: AgentFactory = http_agent_factory,
    ) -> None:
        self.settings = settings
        self.agent_factory = agent_factory


def run_workflow(
    ctx: typer.Context,
    workflow: Callable[[WorkflowOrchestrator], Awaitable[WorkflowResult]],
) -> WorkflowResult:
    """Run *workflow* against a freshly opened agent and return its result.

    A ``LoaderError`` is printed with the failing step and turned into
    exit code 1.
    """
    state: CliContext = ctx.ensure_object(CliContext)
    settings = state.settings

    async def _run() -> WorkflowResult:
        agent = state.agent_factory(settings)
        orchestrator = WorkflowOrchestrator(
            agent,
            platform=settings.platform,
            cleanup_eligible=settings.cleanup_eligible,
        )
        try:
            return await workflow(orchestrator)
        finally:
            aclose = getattr(agent, "aclose", None)
            if aclose is not None:
                await aclose()

    try:
        result = asyncio.run(_run())
    except LoaderError as exc:
        step = exc.step.value if exc.step is not None else "workflow"
        logger.debug("Workflow failed at %s", step, exc_info=True)
        console.print(f"[bold red]Failed ({step}):[/bold red] {exc}")
        raise typer.Exit(code=1) from exc

    for message in result.cleanup_errors:
        console.print(f"[yellow]Warning: could not remove staged artifact {message}[/yellow]")
    return result
