"""Periodic tick service driving the coordinator from a cron expression."""

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from croniter import croniter
from rich.console import Console
from rich.markup import escape

from ..errors import ConfigurationError, RunInProgressError
from .coordinator import RunCoordinator
from .report import print_run_summary

console = Console()


def validate_cron(expression: str) -> None:
    """Raise ConfigurationError unless ``expression`` is a valid cron expression."""
    try:
        croniter(expression)
    except (ValueError, KeyError) as e:
        raise ConfigurationError(f"Invalid tick cron expression '{expression}': {e}") from e


def next_fire(expression: str, base_time: Optional[datetime] = None) -> datetime:
    """Next fire time of a cron expression after ``base_time`` (UTC)."""
    if base_time is None:
        base_time = datetime.now(timezone.utc)
    return croniter(expression, base_time).get_next(datetime)


class TickService:
    """Call ``RunCoordinator.run_tick`` on every cron fire."""

    def __init__(
        self,
        coordinator: RunCoordinator,
        tick_cron: str = "0 * * * *",
        run_on_start: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        validate_cron(tick_cron)
        self.coordinator = coordinator
        self.tick_cron = tick_cron
        self.run_on_start = run_on_start
        self.sleep = sleep
        self.clock = clock

    async def tick(self) -> None:
        """Run one tick, logging a skip if a run is already in flight."""
        try:
            result = await self.coordinator.run_tick()
        except RunInProgressError:
            console.print("[yellow]Run already in progress, skipping tick[/yellow]")
            return
        except Exception as e:
            # The next tick retries
            console.print(f"[red]Run failed: {escape(str(e))}[/red]")
            return
        print_run_summary(result)

    async def serve(self, max_ticks: Optional[int] = None) -> None:
        """
        Tick forever, or ``max_ticks`` times.

        Args:
            max_ticks: Stop after this many ticks (default: never)
        """
        ticks = 0
        if self.run_on_start:
            await self.tick()
            ticks += 1

        while max_ticks is None or ticks < max_ticks:
            now = self.clock()
            fire_at = next_fire(self.tick_cron, now)
            delay = max(0.0, (fire_at - now).total_seconds())
            console.print(f"[dim]Next tick at {fire_at.isoformat()}[/dim]")
            await self.sleep(delay)
            await self.tick()
            ticks += 1
