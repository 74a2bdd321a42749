"""Generic web crawl: RSS feeds and single pages."""

import asyncio
import calendar
from datetime import datetime, timezone
from typing import List, Optional

import feedparser
import httpx
import trafilatura
from rich.console import Console
from rich.markup import escape

from ..errors import FetchError
from ..models import Source
from .base import Fetcher
from .models import FetchedItem

console = Console()


class WebFetcher(Fetcher):
    """Fetch a feed and extract each linked article, or extract a single page."""

    def __init__(
        self,
        timeout: float = 30.0,
        max_concurrent: int = 3,
        user_agent: str = "ContentMill/0.1 (content aggregation)",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize web fetcher."""
        self.timeout = timeout
        self.max_concurrent = max_concurrent
        self.user_agent = user_agent
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        )

    async def fetch(self, source: Source, limit: int) -> List[FetchedItem]:
        url = source.crawl_url
        if not url:
            raise FetchError("No URL configured")

        async with self._client() as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise FetchError(f"HTTP {e.response.status_code} fetching {url}") from e
            except httpx.HTTPError as e:
                raise FetchError(f"HTTP error fetching {url}: {e}") from e

            feed = feedparser.parse(response.text)
            if feed.entries:
                return await self._fetch_feed_entries(client, feed.entries[:limit])

            page = await asyncio.to_thread(self._extract, response.text, str(response.url))
            return [page] if page else []

    async def _fetch_feed_entries(self, client: httpx.AsyncClient, entries: list) -> List[FetchedItem]:
        """Fetch the articles behind feed entries concurrently."""
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def fetch_with_semaphore(entry) -> Optional[FetchedItem]:
            async with semaphore:
                return await self._fetch_entry(client, entry)

        results = await asyncio.gather(*(fetch_with_semaphore(e) for e in entries))
        return [item for item in results if item is not None]

    async def _fetch_entry(self, client: httpx.AsyncClient, entry) -> Optional[FetchedItem]:
        link = entry.get("link")
        if not link:
            return None

        published = _entry_datetime(entry)
        summary = entry.get("summary") or entry.get("description") or ""

        try:
            response = await client.get(link)
            response.raise_for_status()
            item = await asyncio.to_thread(self._extract, response.text, str(response.url))
        except httpx.HTTPError as e:
            console.print(f"[yellow]Falling back to feed summary for {escape(link)}: {escape(str(e))}[/yellow]")
            item = None

        if item is None:
            if not summary.strip():
                return None
            item = FetchedItem(url=link, title=entry.get("title"), body=summary)

        return item.model_copy(
            update={
                "url": link,
                "title": item.title or entry.get("title"),
                "author": item.author or entry.get("author"),
                "published_at": item.published_at or published,
            }
        )

    def _extract(self, html: str, url: str) -> Optional[FetchedItem]:
        """Extract main text and metadata from an HTML page."""
        text = trafilatura.extract(
            html,
            include_comments=False,
            include_tables=False,
            deduplicate=True,
            favor_precision=True,
            url=url,
        )
        if not text:
            return None

        metadata = trafilatura.extract_metadata(html)
        published_at = None
        if metadata and metadata.date:
            try:
                published_at = datetime.fromisoformat(metadata.date).replace(tzinfo=timezone.utc)
            except ValueError:
                published_at = None

        return FetchedItem(
            url=url,
            title=metadata.title if metadata else None,
            body=text,
            author=metadata.author if metadata else None,
            published_at=published_at,
        )


def _entry_datetime(entry) -> Optional[datetime]:
    """Publication time of a feed entry, in UTC."""
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return None
    return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
