"""Crawl source model."""

from enum import Enum
from typing import Optional

from pydantic import Field

from .base import DBModel


class CrawlMethod(str, Enum):
    """How a source is fetched."""

    RSS = "rss"
    SITEMAP = "sitemap"
    HTML = "html"
    API = "api"
    MANUAL = "manual"
    REDDIT = "reddit"
    TWITTER = "twitter"


class SourceStatus(str, Enum):
    """Source lifecycle status."""

    ACTIVE = "active"
    PAUSED = "paused"
    BLOCKED = "blocked"


class Source(DBModel):
    """A crawl target owned by a tenant.

    ``updated_at`` doubles as the last-crawled marker.
    """

    user_id: str = Field(..., description="Owning user")
    name: str = Field(..., description="Source name")
    domain: Optional[str] = Field(None, description="Site domain")
    feed_url: Optional[str] = Field(None, description="Feed, subreddit or Twitter URL")
    sitemap_url: Optional[str] = Field(None, description="Sitemap URL")
    crawl_method: CrawlMethod = Field(CrawlMethod.RSS, description="Fetch method")
    tier: int = Field(1, description="Priority tier")
    status: SourceStatus = Field(SourceStatus.ACTIVE, description="Lifecycle status")
    notes: Optional[str] = Field(None, description="Free-form notes")

    @property
    def crawl_url(self) -> Optional[str]:
        """URL to crawl: the feed URL, else the site root."""
        if self.feed_url:
            return self.feed_url
        if self.domain:
            return f"https://{self.domain}"
        return None
