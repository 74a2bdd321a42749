"""Serve command implementation."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ..config import Config
from ..errors import ContentmillError
from ..pipeline import TickService, validate_cron
from .wiring import open_coordinator

console = Console()


async def serve(config: Config, tick_cron: str, run_on_start: bool) -> None:
    async with open_coordinator(config) as coordinator:
        service = TickService(coordinator, tick_cron=tick_cron, run_on_start=run_on_start)
        await service.serve()


def serve_command(
    tick_cron: Optional[str] = typer.Option(
        None,
        "--cron",
        help="Cron expression for the periodic tick. Default: from config",
    ),
    run_on_start: Optional[bool] = typer.Option(
        None,
        "--run-on-start/--no-run-on-start",
        help="Run a tick immediately on startup. Default: from config",
    ),
) -> None:
    """Run the periodic tick loop until interrupted."""
    try:
        config = Config()
        scheduler = config.config.scheduler

        if tick_cron is None:
            tick_cron = scheduler.tick_cron
        if run_on_start is None:
            run_on_start = scheduler.run_on_start

        validate_cron(tick_cron)
        console.print(Panel.fit(f"Content Mill scheduler\nTick: {tick_cron}", style="bold blue"))
        asyncio.run(serve(config, tick_cron, run_on_start))
    except KeyboardInterrupt:
        console.print("\n[yellow]Scheduler stopped[/yellow]")
    except ContentmillError as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(1)
