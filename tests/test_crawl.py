"""Tests for the crawl stage."""

import contentmill.pipeline.crawl as crawl_module
from contentmill.errors import FetchError
from contentmill.ingestion import compute_content_hash
from contentmill.models import CrawlMethod, Document
from contentmill.pipeline import CrawlStage, select_sources

from .conftest import NOW, FakeFetcher, make_item, make_source, make_tenant


def make_stage(store, fetcher, sleep, **kwargs):
    return CrawlStage(store, fetcher, sleep=sleep, **kwargs)


async def test_stores_only_new_documents_and_stamps_tenant(store, sleep):
    tenant = store.add_tenant(make_tenant(last_crawl_at=NOW.subtract(hours=25)))
    source = store.add_source(make_source("blog"))
    store.add_document(
        Document(
            user_id=tenant.user_id,
            url="https://elsewhere.example.com/copy",
            raw_text="Body of   second\n",
            dedupe_hash=compute_content_hash("Body of second"),
        )
    )
    fetcher = FakeFetcher({"blog": [make_item("first"), make_item("second"), make_item("third")]})

    result = await make_stage(store, fetcher, sleep).run(store.tenants, NOW)

    assert result.documents == 2
    assert result.duplicates == 1
    assert result.errors == []
    assert len(store.documents) == 3
    assert store.tenant("user-1").last_crawl_at == NOW
    assert store.sources[source.id].updated_at == NOW


async def test_duplicate_url_is_skipped(store, sleep):
    store.add_tenant(make_tenant())
    store.add_source(make_source("blog"))
    store.add_document(Document(user_id="user-1", url="https://news.example.com/first", raw_text="old body"))
    fetcher = FakeFetcher({"blog": [make_item("first", body="a rewritten body")]})

    result = await make_stage(store, fetcher, sleep).run(store.tenants, NOW)

    assert result.documents == 0
    assert result.duplicates == 1


async def test_dedup_is_per_tenant(store, sleep):
    store.add_tenant(make_tenant("user-1"))
    store.add_tenant(make_tenant("user-2"))
    store.add_source(make_source("blog", user_id="user-1"))
    store.add_source(make_source("feed", user_id="user-2"))
    fetcher = FakeFetcher({"blog": [make_item("shared")], "feed": [make_item("shared")]})

    result = await make_stage(store, fetcher, sleep).run(store.tenants, NOW)

    assert result.documents == 2
    assert result.tenants == 2


async def test_tenant_not_due_is_skipped(store, sleep):
    store.add_tenant(make_tenant(last_crawl_at=NOW.subtract(hours=23)))
    store.add_source(make_source("blog"))
    fetcher = FakeFetcher({"blog": [make_item("first")]})

    result = await make_stage(store, fetcher, sleep).run(store.tenants, NOW)

    assert fetcher.calls == []
    assert result.tenants == 0


async def test_force_ignores_schedule_but_not_enabled_flag(store, sleep):
    store.add_tenant(make_tenant("user-1", last_crawl_at=NOW.subtract(hours=1)))
    store.add_tenant(make_tenant("user-2", crawl_enabled=False))
    store.add_source(make_source("blog", user_id="user-1"))
    store.add_source(make_source("feed", user_id="user-2"))
    fetcher = FakeFetcher({"blog": [make_item("first")]})

    result = await make_stage(store, fetcher, sleep).run(store.tenants, NOW, force=True)

    assert fetcher.calls == ["blog"]
    assert result.documents == 1


async def test_source_failure_is_isolated(store, sleep):
    store.add_tenant(make_tenant())
    broken = store.add_source(make_source("broken", updated_at=NOW.subtract(days=3)))
    store.add_source(make_source("healthy", updated_at=NOW.subtract(days=2)))
    fetcher = FakeFetcher({"broken": FetchError("HTTP 500"), "healthy": [make_item("ok")]})

    result = await make_stage(store, fetcher, sleep).run(store.tenants, NOW)

    assert result.errors == ["broken: HTTP 500"]
    assert result.documents == 1
    assert result.sources == 1
    assert store.sources[broken.id].updated_at == NOW.subtract(days=3)
    assert store.tenant("user-1").last_crawl_at == NOW


async def test_source_without_url_is_reported(store, sleep):
    store.add_tenant(make_tenant())
    store.add_source(make_source("nowhere", feed_url=None, domain=None))
    fetcher = FakeFetcher()

    result = await make_stage(store, fetcher, sleep).run(store.tenants, NOW)

    assert result.errors == ["nowhere: No URL configured"]
    assert fetcher.calls == []


async def test_zero_new_documents_still_stamps_tenant(store, sleep):
    store.add_tenant(make_tenant())
    store.add_source(make_source("quiet"))

    result = await make_stage(store, FakeFetcher(), sleep).run(store.tenants, NOW)

    assert result.documents == 0
    assert store.tenant("user-1").last_crawl_at == NOW


async def test_failed_source_load_skips_tenant(store, sleep):
    store.add_tenant(make_tenant())
    store.failures["list_active_sources"] = RuntimeError("connection reset")

    result = await make_stage(store, FakeFetcher(), sleep).run(store.tenants, NOW)

    assert result.errors == ["user-1: failed to load sources: connection reset"]
    assert store.tenant("user-1").last_crawl_at is None


async def test_sleeps_between_sources_only(store, sleep):
    store.add_tenant(make_tenant())
    for name in ("a", "b", "c"):
        store.add_source(make_source(name))

    await make_stage(store, FakeFetcher(), sleep, inter_source_delay=2.5).run(store.tenants, NOW)

    assert sleep.delays == [2.5, 2.5]


async def test_items_per_source_and_empty_bodies(store, sleep):
    store.add_tenant(make_tenant())
    store.add_source(make_source("blog"))
    items = [make_item("blank", body="   ")] + [make_item(f"post-{i}") for i in range(5)]
    fetcher = FakeFetcher({"blog": items})

    result = await make_stage(store, fetcher, sleep, items_per_source=3).run(store.tenants, NOW)

    assert result.documents == 2


def test_select_sources_puts_twitter_first_then_stalest():
    sources = [
        make_source("web-new", updated_at=NOW.subtract(hours=1)),
        make_source("web-old", updated_at=NOW.subtract(days=5)),
        make_source("web-never"),
        make_source("x-account", feed_url="https://x.com/someone", updated_at=NOW),
        make_source("x-search", feed_url="twitter:search:ai agents", crawl_method=CrawlMethod.TWITTER),
        make_source("reddit", feed_url="https://www.reddit.com/r/python", updated_at=NOW.subtract(days=1)),
    ]

    selected = [s.name for s in select_sources(sources, 4)]

    assert selected == ["x-search", "x-account", "web-never", "web-old"]


def test_select_sources_caps_social_sources():
    sources = [make_source(f"x-{i}", feed_url=f"https://x.com/user{i}") for i in range(5)]
    sources.append(make_source("web"))

    selected = select_sources(sources, 3)

    assert len(selected) == 3
    assert all(s.name.startswith("x-") for s in selected)


async def test_malformed_source_url_does_not_stop_other_tenants(store, sleep):
    store.add_tenant(make_tenant("user-1"))
    store.add_tenant(make_tenant("user-2"))
    store.add_source(make_source("broken", user_id="user-1", feed_url="https://[broken/feed"))
    store.add_source(make_source("healthy", user_id="user-2"))
    fetcher = FakeFetcher({"broken": FetchError("Invalid IPv6 URL"), "healthy": [make_item("ok")]})

    result = await make_stage(store, fetcher, sleep).run(store.tenants, NOW)

    assert fetcher.calls == ["broken", "healthy"]
    assert result.errors == ["broken: Invalid IPv6 URL"]
    assert result.documents == 1
    assert store.tenant("user-2").last_crawl_at == NOW


async def test_source_selection_failure_skips_only_that_tenant(store, sleep, monkeypatch):
    store.add_tenant(make_tenant("user-1"))
    store.add_tenant(make_tenant("user-2"))
    store.add_source(make_source("bad-row", user_id="user-1"))
    store.add_source(make_source("healthy", user_id="user-2"))
    real_resolve_kind = crawl_module.resolve_kind

    def resolve_kind(source):
        if source.name == "bad-row":
            raise ValueError("unreadable source row")
        return real_resolve_kind(source)

    monkeypatch.setattr(crawl_module, "resolve_kind", resolve_kind)
    fetcher = FakeFetcher({"healthy": [make_item("ok")]})

    result = await make_stage(store, fetcher, sleep).run(store.tenants, NOW)

    assert result.errors == ["user-1: failed to load sources: unreadable source row"]
    assert fetcher.calls == ["healthy"]
    assert result.documents == 1


async def test_bracketed_source_name_is_logged_safely(store, sleep):
    store.add_tenant(make_tenant())
    notes = store.add_source(make_source("Dev notes [/b]"))
    broken = store.add_source(make_source("Broken [/i]", updated_at=NOW.subtract(days=1)))
    fetcher = FakeFetcher({"Dev notes [/b]": [make_item("note")], "Broken [/i]": FetchError("bad [/red] gateway")})

    result = await make_stage(store, fetcher, sleep).run(store.tenants, NOW)

    assert result.documents == 1
    assert result.sources == 1
    assert result.errors == ["Broken [/i]: bad [/red] gateway"]
    assert store.sources[notes.id].updated_at == NOW
    assert store.sources[broken.id].updated_at == NOW.subtract(days=1)
