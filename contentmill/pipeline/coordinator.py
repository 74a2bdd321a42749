"""Run coordinator: one sequential pass over all stages, one at a time."""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, List, Optional

import pendulum
from rich.console import Console
from rich.markup import escape

from ..config import PipelineConfig
from ..db import ContentStore
from ..errors import RunInProgressError
from ..generation import LLMProvider, TemplateLibrary
from ..ingestion import Fetcher
from ..models import TenantSettings
from .crawl import CrawlStage
from .extract import ExtractionStage
from .generate import GenerationStage
from .results import RunResult, RunState, RunStatus, RunTrigger
from .retention import RetentionStage

console = Console()


def utc_now() -> datetime:
    return pendulum.now("UTC")


class RunCoordinator:
    """Run Crawl, Extraction, Generation and Retention in order.

    Only one run may be in flight; a second request while running is
    rejected with ``RunInProgressError`` rather than queued.
    """

    def __init__(
        self,
        store: ContentStore,
        fetcher: Fetcher,
        llm: LLMProvider,
        templates: TemplateLibrary,
        settings: Optional[PipelineConfig] = None,
        state: Optional[RunState] = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        settings = settings or PipelineConfig()
        self.store = store
        self.settings = settings
        self.state = state or RunState(history_size=settings.history_size)
        self.clock = clock

        self.crawl = CrawlStage(
            store,
            fetcher,
            sources_per_run=settings.sources_per_run,
            items_per_source=settings.items_per_source,
            inter_source_delay=settings.inter_source_delay,
            sleep=sleep,
        )
        self.extraction = ExtractionStage(store, llm, extractions_per_run=settings.extractions_per_run)
        self.generation = GenerationStage(
            store,
            llm,
            templates,
            extraction_limit=settings.generation_extractions,
            window_days=settings.extraction_window_days,
        )
        self.retention = RetentionStage(store, retention_days=settings.retention_days)

    async def run_tick(self) -> RunResult:
        """Periodic entry point; every stage applies its schedule checks."""
        return await self._run(RunTrigger.SCHEDULED)

    async def trigger(self, user_id: Optional[str] = None) -> RunResult:
        """
        Manual entry point.

        Crawl admission is forced for every tenant. When ``user_id`` is
        given, generation admission is also bypassed for that tenant.

        Raises:
            RunInProgressError: If a run is already in flight
        """
        return await self._run(RunTrigger.MANUAL, user_id)

    def status(self) -> RunStatus:
        return self.state.snapshot()

    async def _run(self, trigger: RunTrigger, user_id: Optional[str] = None) -> RunResult:
        # Checked and set with no await in between.
        if self.state.running:
            raise RunInProgressError()
        self.state.running = True

        result = RunResult(trigger=trigger, user_id=user_id, started_at=self.clock())
        try:
            await self._execute(result)
        finally:
            result.finished_at = self.clock()
            self.state.running = False
            self.state.record(result)

        console.print(
            f"[dim]Run finished ({trigger.value}) in {result.duration:.1f}s "
            f"with {len(result.all_errors)} errors[/dim]"
        )
        return result

    async def _execute(self, result: RunResult) -> None:
        now = result.started_at
        manual = result.trigger == RunTrigger.MANUAL

        tenants: List[TenantSettings] = []
        try:
            tenants = await self.store.list_tenants()
        except Exception as e:
            console.print(f"[red]Failed to load tenants: {escape(str(e))}[/red]")
            result.errors.append(f"tenants: {e}")
        else:
            result.crawl = await self.crawl.run(tenants, now, force=manual)
            result.extraction = await self.extraction.run(tenants)
            result.generation = await self.generation.run(tenants, now, force_user_id=result.user_id)

        result.retention = await self.retention.run(now)
