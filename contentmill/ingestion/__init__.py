"""Source fetchers."""

from .base import Fetcher, compute_content_hash, normalize_text
from .models import FetchedItem
from .reddit import RedditFetcher, parse_reddit_url
from .router import FetcherRouter, SourceKind, resolve_kind
from .twitter import TwitterFetcher, parse_twitter_source
from .web import WebFetcher

__all__ = [
    "FetchedItem",
    "Fetcher",
    "FetcherRouter",
    "RedditFetcher",
    "SourceKind",
    "TwitterFetcher",
    "WebFetcher",
    "compute_content_hash",
    "normalize_text",
    "parse_reddit_url",
    "parse_twitter_source",
    "resolve_kind",
]
