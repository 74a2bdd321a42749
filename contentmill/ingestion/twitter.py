"""Social search fetcher for Twitter/X, via the Apify actor API."""

import asyncio
import time
from typing import Any, Dict, List, NamedTuple, Optional
from urllib.parse import urlparse

import httpx
import pendulum
from rich.console import Console
from rich.markup import escape

from ..errors import ConfigurationError, FetchError
from ..models import Source
from .base import Fetcher
from .models import FetchedItem

console = Console()

TWITTER_HOSTS = {"twitter.com", "www.twitter.com", "x.com", "www.x.com"}
SEARCH_PREFIX = "twitter:search:"
RESERVED_PATHS = {"home", "search", "explore", "notifications", "messages", "settings", "i", "hashtag"}


class TwitterQuery(NamedTuple):
    type: str  # account, hashtag or search
    value: str


def is_twitter_url(url: Optional[str]) -> bool:
    """Check if a URL is a Twitter/X URL or a ``twitter:`` pseudo-URL."""
    if not url:
        return False
    if url.startswith("twitter:"):
        return True
    try:
        host = urlparse(url).hostname
    except ValueError:
        return False
    return (host or "").lower() in TWITTER_HOSTS


def parse_twitter_source(value: str) -> Optional[TwitterQuery]:
    """
    Parse a Twitter URL or pseudo-URL.

    Supports ``https://x.com/<user>`` (account), ``https://x.com/hashtag/<tag>``
    (hashtag) and ``twitter:search:<query>`` (search).
    """
    if value.startswith(SEARCH_PREFIX):
        query = value[len(SEARCH_PREFIX):].strip()
        return TwitterQuery("search", query) if query else None

    if not is_twitter_url(value):
        return None

    parts = [p for p in urlparse(value).path.split("/") if p]
    if len(parts) >= 2 and parts[0].lower() == "hashtag":
        return TwitterQuery("hashtag", parts[1])
    if parts and parts[0].lower() not in RESERVED_PATHS:
        return TwitterQuery("account", parts[0])
    return None


class TwitterFetcher(Fetcher):
    """Run the Apify Twitter scraper and return tweets as items."""

    base_url = "https://api.apify.com/v2"

    def __init__(
        self,
        token: Optional[str],
        actor: str = "apidojo~twitter-scraper-lite",
        timeout: float = 30.0,
        max_wait: float = 120.0,
        poll_interval: float = 5.0,
        min_likes: int = 0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not token:
            raise ConfigurationError("Missing Apify token for Twitter fetching")
        self.token = token
        self.actor = actor
        self.timeout = timeout
        self.max_wait = max_wait
        self.poll_interval = poll_interval
        self.min_likes = min_likes
        self.transport = transport

    def _actor_input(self, query: TwitterQuery, limit: int) -> Dict[str, Any]:
        if query.type == "account":
            return {"twitterHandles": [query.value], "maxTweets": limit, "mode": "user"}
        if query.type == "hashtag":
            return {"searchTerms": [f"#{query.value}"], "maxTweets": limit, "mode": "search"}
        return {"searchTerms": [query.value], "maxTweets": limit, "mode": "search"}

    async def fetch(self, source: Source, limit: int) -> List[FetchedItem]:
        query = parse_twitter_source(source.crawl_url or "")
        if query is None:
            raise FetchError(f"Invalid Twitter source: {source.crawl_url}")

        console.print(f"[dim]Twitter: fetching {query.type} {escape(query.value)}[/dim]")
        raw = await self._run_actor(self._actor_input(query, limit))

        tweets = [t for t in (normalize_tweet(r) for r in raw) if t is not None]
        tweets = [t for t in tweets if t["likes"] >= self.min_likes]
        return [_tweet_to_item(t) for t in tweets[:limit]]

    async def _run_actor(self, actor_input: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Start an actor run, poll until it finishes and return its dataset."""
        params = {"token": self.token}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                f"{self.base_url}/acts/{self.actor}/runs", params=params, json=actor_input
            )
            if response.is_error:
                raise FetchError(f"Failed to start Apify run: {response.text}")

            run = response.json()["data"]
            deadline = time.monotonic() + self.max_wait
            status = run.get("status")

            while status != "SUCCEEDED":
                if status in ("FAILED", "ABORTED", "TIMED-OUT"):
                    raise FetchError(f"Apify run {status}")
                if time.monotonic() >= deadline:
                    raise FetchError("Apify run did not finish in time")

                await asyncio.sleep(self.poll_interval)
                response = await client.get(f"{self.base_url}/actor-runs/{run['id']}", params=params)
                if response.is_error:
                    raise FetchError("Failed to check Apify run status")
                status = response.json()["data"]["status"]

            response = await client.get(
                f"{self.base_url}/datasets/{run['defaultDatasetId']}/items",
                params={**params, "format": "json"},
            )
            if response.is_error:
                raise FetchError("Failed to fetch Apify dataset results")
            return response.json()


def normalize_tweet(raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Flatten the two result shapes the actor produces."""
    tweet_id = raw.get("id_str") or (str(raw["id"]) if raw.get("id") else None)
    text = raw.get("full_text") or raw.get("text")
    if not tweet_id or not text:
        return None

    user = raw.get("user") or {}
    author = raw.get("author") or {}
    handle = user.get("screen_name") or author.get("userName") or "unknown"

    return {
        "id": tweet_id,
        "url": raw.get("url") or f"https://twitter.com/{handle}/status/{tweet_id}",
        "text": text,
        "author": user.get("name") or author.get("name") or "Unknown",
        "handle": handle,
        "published_at": raw.get("created_at") or raw.get("createdAt"),
        "likes": raw.get("favorite_count", raw.get("likeCount")) or 0,
        "retweets": raw.get("retweet_count", raw.get("retweetCount")) or 0,
        "replies": raw.get("reply_count", raw.get("replyCount")) or 0,
    }


def _tweet_to_item(tweet: Dict[str, Any]) -> FetchedItem:
    published_at = None
    if tweet["published_at"]:
        try:
            published_at = pendulum.parse(tweet["published_at"], strict=False)
        except (ValueError, TypeError):
            published_at = None

    body = (
        f"Tweet by @{tweet['handle']} ({tweet['author']})\n\n"
        f"{tweet['text']}\n\n"
        f"---\nLikes: {tweet['likes']} | Retweets: {tweet['retweets']} | Replies: {tweet['replies']}"
    )
    return FetchedItem(
        url=tweet["url"],
        title=tweet["text"][:80],
        body=body,
        author=tweet["author"],
        published_at=published_at,
    )
