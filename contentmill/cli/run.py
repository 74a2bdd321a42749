"""Run command implementation."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import Config
from ..errors import ContentmillError
from ..pipeline import RunResult, print_run_summary
from .wiring import open_coordinator

console = Console()


async def run_once(config: Config, user_id: Optional[str]) -> RunResult:
    async with open_coordinator(config) as coordinator:
        return await coordinator.trigger(user_id)


def run_command(
    user_id: Optional[str] = typer.Option(
        None,
        "--user",
        "-u",
        help="Also force generation for this user, ignoring its schedule",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit non-zero if any stage recorded errors",
    ),
) -> None:
    """Run the pipeline once now, crawling every tenant regardless of schedule."""
    try:
        config = Config()
        result = asyncio.run(run_once(config, user_id))
    except KeyboardInterrupt:
        console.print("\n[yellow]Run interrupted by user[/yellow]")
        raise typer.Exit(1)
    except ContentmillError as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Run failed: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    print_run_summary(result)
    if strict and result.all_errors:
        raise typer.Exit(1)
