"""CLI command for checking the remote engine."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console

from isogas.core.config import Settings
from isogas.core.models import EngineHealth
from isogas.core.state import OrchestratorState
from isogas.remote.client import RemoteClient, RetryPolicy
from isogas.remote.service import Iso14912Service


async def _probe(settings: Settings) -> EngineHealth:
    policy = RetryPolicy(max_attempts=settings.max_attempts, base_delay=settings.backoff_base)
    async with RemoteClient(settings.api_url, timeout=settings.timeout, policy=policy) as client:
        state = OrchestratorState(Iso14912Service(client).health)
        return await state.refresh()


@click.command("health")
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check whether the remote conversion engine is reachable."""
    console: Console = ctx.obj.get("console", Console())
    settings: Settings = ctx.obj.get("settings", Settings())

    result = asyncio.run(_probe(settings))
    if result.is_connected:
        console.print(f"[green]Connected[/green] to {settings.api_url}")
    else:
        console.print(f"[red]Disconnected[/red] from {settings.api_url}: {result.last_error}")
        raise SystemExit(1)
