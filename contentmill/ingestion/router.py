"""Pick a fetcher for a source."""

from enum import Enum
from typing import List, Optional

from rich.console import Console

from ..config import Config
from ..errors import ConfigurationError, FetchError
from ..models import CrawlMethod, Source
from .base import Fetcher
from .models import FetchedItem
from .reddit import RedditFetcher, is_reddit_url
from .twitter import TwitterFetcher, is_twitter_url
from .web import WebFetcher

console = Console()


class SourceKind(str, Enum):
    """Fetch strategy for a source."""

    SOCIAL = "social"
    FORUM = "forum"
    WEB = "web"


def resolve_kind(source: Source) -> SourceKind:
    """Decide the fetch strategy from the crawl method and URL."""
    if source.crawl_method == CrawlMethod.TWITTER or is_twitter_url(source.crawl_url):
        return SourceKind.SOCIAL
    if source.crawl_method == CrawlMethod.REDDIT or is_reddit_url(source.crawl_url):
        return SourceKind.FORUM
    return SourceKind.WEB


class FetcherRouter(Fetcher):
    """Dispatch each source to the fetcher for its kind."""

    def __init__(
        self,
        web: Fetcher,
        forum: Fetcher,
        social: Optional[Fetcher] = None,
    ) -> None:
        self.fetchers = {
            SourceKind.WEB: web,
            SourceKind.FORUM: forum,
            SourceKind.SOCIAL: social,
        }

    @classmethod
    def from_config(cls, config: Config) -> "FetcherRouter":
        """Build the three fetchers from configuration."""
        settings = config.config.fetchers

        social = None
        try:
            social = TwitterFetcher(
                config.get_apify_token(),
                actor=settings.apify_actor,
                timeout=settings.timeout,
                max_wait=settings.apify_max_wait,
                poll_interval=settings.apify_poll_interval,
                min_likes=settings.twitter_min_likes,
            )
        except ConfigurationError:
            console.print("[yellow]Warning: No Apify token found. Twitter sources will be skipped.[/yellow]")

        return cls(
            web=WebFetcher(timeout=settings.timeout, user_agent=settings.user_agent),
            forum=RedditFetcher(
                timeout=settings.timeout,
                user_agent=settings.user_agent,
                min_score=settings.reddit_min_score,
            ),
            social=social,
        )

    async def fetch(self, source: Source, limit: int) -> List[FetchedItem]:
        kind = resolve_kind(source)
        fetcher = self.fetchers.get(kind)
        if fetcher is None:
            raise FetchError(f"No fetcher configured for {kind.value} sources")
        return await fetcher.fetch(source, limit)
