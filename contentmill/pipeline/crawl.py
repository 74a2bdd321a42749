"""Crawl stage: fetch due sources and store new documents."""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from ..db import ContentStore
from ..ingestion import Fetcher, SourceKind, compute_content_hash, resolve_kind
from ..models import Document, DocumentStatus, Source, TenantSettings
from .results import CrawlResult
from .schedule import as_utc, should_crawl

console = Console()


def select_sources(sources: Sequence[Source], capacity: int) -> List[Source]:
    """
    Pick up to ``capacity`` sources: Twitter-kind sources first, then the
    rest, each group least recently crawled first.
    """

    def staleness(source: Source):
        return (source.updated_at is not None, as_utc(source.updated_at) if source.updated_at else None)

    social = sorted((s for s in sources if resolve_kind(s) == SourceKind.SOCIAL), key=staleness)
    others = sorted((s for s in sources if resolve_kind(s) != SourceKind.SOCIAL), key=staleness)

    selected = social[:capacity]
    selected.extend(others[: capacity - len(selected)])
    return selected


class CrawlStage:
    """Per-tenant crawl of active sources with deduplication."""

    def __init__(
        self,
        store: ContentStore,
        fetcher: Fetcher,
        sources_per_run: int = 8,
        items_per_source: int = 5,
        inter_source_delay: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.sources_per_run = sources_per_run
        self.items_per_source = items_per_source
        self.inter_source_delay = inter_source_delay
        self.sleep = sleep

    async def run(
        self,
        tenants: Sequence[TenantSettings],
        now: Optional[datetime] = None,
        force: bool = False,
    ) -> CrawlResult:
        """
        Crawl every tenant that has crawling enabled and is due.

        Args:
            tenants: Tenant settings to consider
            now: Current time (default: now)
            force: Skip the schedule check (manual trigger)

        Returns:
            Counts and labeled errors
        """
        now = as_utc(now)
        result = CrawlResult()

        for tenant in tenants:
            if not tenant.crawl_enabled:
                continue
            if not force and not should_crawl(
                tenant.crawl_schedule, tenant.last_crawl_at, tenant.timezone, now
            ):
                continue
            await self.crawl_tenant(tenant, now, result)

        return result

    async def crawl_tenant(self, tenant: TenantSettings, now: datetime, result: CrawlResult) -> None:
        """Crawl one tenant's sources and stamp ``last_crawl_at``."""
        try:
            sources = await self.store.list_active_sources(tenant.user_id)
            selected = select_sources(sources, self.sources_per_run)
        except Exception as e:
            result.errors.append(f"{tenant.user_id}: failed to load sources: {e}")
            console.print(f"[red]Crawl skipped for {escape(tenant.user_id)}: {escape(str(e))}[/red]")
            return

        result.tenants += 1
        if selected:
            console.print(f"[dim]Crawling {len(selected)} sources for {escape(tenant.user_id)}[/dim]")

        for index, source in enumerate(selected):
            if index > 0 and self.inter_source_delay > 0:
                await self.sleep(self.inter_source_delay)

            if not source.crawl_url:
                result.errors.append(f"{source.name}: No URL configured")
                continue

            try:
                await self.crawl_source(tenant, source, result)
                await self.store.touch_source(source.id, now)
            except Exception as e:
                msg = f"{source.name}: {e}"
                console.print(f"[red]Crawl error: {escape(msg)}[/red]")
                result.errors.append(msg)
            else:
                result.sources += 1

        try:
            await self.store.update_tenant_timestamp(tenant.user_id, "last_crawl_at", now)
        except Exception as e:
            result.errors.append(f"{tenant.user_id}: failed to update last_crawl_at: {e}")

    async def crawl_source(self, tenant: TenantSettings, source: Source, result: CrawlResult) -> None:
        """Fetch one source and store the items that are new for this tenant."""
        items = await self.fetcher.fetch(source, self.items_per_source)
        new = 0

        for item in items[: self.items_per_source]:
            if not item.body.strip():
                continue

            document = Document(
                user_id=tenant.user_id,
                trend_source_id=source.id,
                url=item.url,
                title=item.title,
                author=item.author,
                published_at=item.published_at,
                raw_text=item.body,
                dedupe_hash=compute_content_hash(item.body),
                status=DocumentStatus.PARSED,
            )
            try:
                stored = await self.store.insert_document_if_absent(document)
            except Exception as e:
                result.errors.append(f"{source.name}: {item.url}: {e}")
                continue

            if stored is None:
                result.duplicates += 1
            else:
                new += 1

        result.documents += new
        console.print(f"[dim]{escape(source.name)}: {len(items)} items, {new} new[/dim]")
