"""Forum listing fetcher for subreddits, using Reddit's public JSON API."""

import re
from datetime import datetime, timezone
from typing import List, NamedTuple, Optional

import httpx
from rich.console import Console
from rich.markup import escape

from ..errors import FetchError
from ..models import Source
from .base import Fetcher
from .models import FetchedItem

console = Console()

REDDIT_URL_PATTERN = re.compile(
    r"^(?:https?://)?(?:www\.|old\.)?reddit\.com/r/([^/\s?]+)(?:/([^/\s?]+))?",
    re.IGNORECASE,
)
SHORT_PATTERN = re.compile(r"^/?r/([^/\s?]+)(?:/([^/\s?]+))?", re.IGNORECASE)
SORTS = ("hot", "new", "top", "rising")
MAX_LIMIT = 100


class SubredditRef(NamedTuple):
    subreddit: str
    sort: str


def parse_reddit_url(url: str) -> Optional[SubredditRef]:
    """Extract subreddit and sort from a Reddit URL or ``r/name`` shorthand."""
    match = REDDIT_URL_PATTERN.match(url.strip()) or SHORT_PATTERN.match(url.strip())
    if not match:
        return None
    sort = (match.group(2) or "hot").lower()
    return SubredditRef(match.group(1), sort if sort in SORTS else "hot")


def is_reddit_url(url: Optional[str]) -> bool:
    return bool(url) and parse_reddit_url(url) is not None


class RedditFetcher(Fetcher):
    """Fetch posts from a subreddit listing."""

    base_url = "https://www.reddit.com"

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = "ContentMill/0.1 (content aggregation)",
        min_score: int = 0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.min_score = min_score
        self.transport = transport

    async def fetch(self, source: Source, limit: int) -> List[FetchedItem]:
        ref = parse_reddit_url(source.crawl_url or "")
        if ref is None:
            raise FetchError(f"Invalid Reddit URL: {source.crawl_url}")

        params = {"limit": min(limit, MAX_LIMIT)}
        if ref.sort == "top":
            params["t"] = "week"

        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        ) as client:
            try:
                response = await client.get(f"{self.base_url}/r/{ref.subreddit}/{ref.sort}.json", params=params)
            except httpx.HTTPError as e:
                raise FetchError(f"Reddit request failed: {e}") from e

        if response.status_code == 404:
            raise FetchError(f"Subreddit r/{ref.subreddit} not found")
        if response.status_code == 403:
            raise FetchError(f"Subreddit r/{ref.subreddit} is private or quarantined")
        if response.status_code == 429:
            raise FetchError("Reddit rate limit exceeded - try again later")
        if response.status_code >= 400:
            raise FetchError(f"Reddit API error: {response.status_code}")

        children = (response.json().get("data") or {}).get("children") or []
        items = [
            _post_to_item(child["data"])
            for child in children
            if child.get("kind") == "t3" and child["data"].get("score", 0) >= self.min_score
        ]

        console.print(f"[dim]Reddit: {len(items)} posts from r/{escape(ref.subreddit)}[/dim]")
        return items[:limit]


def _post_to_item(post: dict) -> FetchedItem:
    """Render a Reddit post as document text."""
    body = f"# {post['title']}\n\n"
    if post.get("is_self"):
        body += post.get("selftext") or ""
    else:
        body += f"[Link to: {post.get('url')}]\n\n"
        body += post.get("selftext") or ""

    body += f"\n\n---\nPosted by u/{post.get('author')} in r/{post.get('subreddit')}"
    body += f"\nScore: {post.get('score', 0)} | Comments: {post.get('num_comments', 0)}"
    if post.get("link_flair_text"):
        body += f" | Flair: {post['link_flair_text']}"

    return FetchedItem(
        url=f"https://www.reddit.com{post['permalink']}",
        title=post["title"],
        body=body,
        author=post.get("author"),
        published_at=datetime.fromtimestamp(post.get("created_utc", 0), tz=timezone.utc),
    )
