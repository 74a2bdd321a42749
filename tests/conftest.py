"""Shared fakes for pipeline tests."""

import asyncio
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

import pendulum
import pytest

from contentmill.db import ContentStore
from contentmill.db.store import check_timestamp_field
from contentmill.ingestion import FetchedItem, Fetcher
from contentmill.generation import MockLLMProvider, TemplateLibrary
from contentmill.models import (
    Asset,
    AssetInput,
    CrawlMethod,
    Document,
    DocumentStatus,
    Extraction,
    ExtractionWithSource,
    Source,
    TemplateOverride,
    TenantSettings,
)

# Tuesday
NOW = pendulum.datetime(2026, 3, 10, 14, 0, tz="UTC")


def _id() -> str:
    return str(uuid.uuid4())


class InMemoryStore(ContentStore):
    """Dict-backed store with the same dedup and cascade rules as Postgres."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now
        self.tenants: List[TenantSettings] = []
        self.sources: Dict[str, Source] = {}
        self.documents: Dict[str, Document] = {}
        self.extractions: Dict[str, Extraction] = {}
        self.assets: List[Asset] = []
        self.asset_inputs: List[AssetInput] = []
        self.overrides: Dict[str, TemplateOverride] = {}
        self.failures: Dict[Union[str, Tuple[str, str]], Exception] = {}
        self.calls: List[str] = []

    def _call(self, name: str, user_id: Optional[str] = None) -> None:
        """Record a call; fail if ``name`` or ``(name, user_id)`` is in ``failures``."""
        self.calls.append(name)
        for key in (name, (name, user_id)):
            if key in self.failures:
                raise self.failures[key]

    # seeding helpers

    def add_tenant(self, tenant: TenantSettings) -> TenantSettings:
        self.tenants.append(tenant)
        return tenant

    def add_source(self, source: Source) -> Source:
        if source.id is None:
            source.id = _id()
        self.sources[source.id] = source
        return source

    def add_document(self, document: Document, created_at: Optional[datetime] = None) -> Document:
        document.id = document.id or _id()
        document.created_at = created_at or document.created_at or self.now
        self.documents[document.id] = document
        return document

    def add_extraction(self, extraction: Extraction, created_at: Optional[datetime] = None) -> Extraction:
        extraction.id = extraction.id or _id()
        extraction.created_at = created_at or extraction.created_at or self.now
        self.extractions[extraction.id] = extraction
        return extraction

    def tenant(self, user_id: str) -> TenantSettings:
        return next(t for t in self.tenants if t.user_id == user_id)

    # ContentStore

    async def list_tenants(self) -> List[TenantSettings]:
        self._call("list_tenants")
        return [t.model_copy() for t in self.tenants]

    async def list_active_sources(self, user_id: str) -> List[Source]:
        self._call("list_active_sources", user_id)
        sources = [s for s in self.sources.values() if s.user_id == user_id and s.status.value == "active"]
        return sorted(sources, key=lambda s: (s.updated_at is not None, s.updated_at or self.now))

    async def touch_source(self, source_id: str, at: datetime) -> None:
        self._call("touch_source")
        self.sources[source_id].updated_at = at

    async def insert_document_if_absent(self, document: Document) -> Optional[Document]:
        self._call("insert_document_if_absent")
        for existing in self.documents.values():
            if existing.user_id != document.user_id:
                continue
            if existing.url == document.url or existing.dedupe_hash == document.dedupe_hash:
                return None
        stored = document.model_copy(update={"id": _id(), "created_at": self.now})
        self.documents[stored.id] = stored
        return stored

    async def list_extracted_document_ids(self, user_id: str) -> Set[str]:
        self._call("list_extracted_document_ids", user_id)
        return {
            e.document_id
            for e in self.extractions.values()
            if e.user_id == user_id and e.document_id is not None
        }

    async def list_documents_for_extraction(
        self,
        user_id: str,
        exclude_ids: Set[str],
        limit: int,
    ) -> List[Document]:
        self._call("list_documents_for_extraction", user_id)
        documents = [
            d
            for d in self.documents.values()
            if d.user_id == user_id
            and d.status == DocumentStatus.PARSED
            and d.raw_text
            and d.id not in exclude_ids
        ]
        return sorted(documents, key=lambda d: d.created_at)[:limit]

    async def insert_extraction(self, extraction: Extraction) -> Extraction:
        self._call("insert_extraction")
        return self.add_extraction(extraction.model_copy())

    async def list_recent_extractions(
        self,
        user_id: str,
        since: datetime,
        limit: int,
    ) -> List[ExtractionWithSource]:
        self._call("list_recent_extractions", user_id)
        recent = sorted(
            (
                e
                for e in self.extractions.values()
                if e.user_id == user_id and e.archived_at is None and e.created_at >= since
            ),
            key=lambda e: e.created_at,
            reverse=True,
        )[:limit]

        enriched = []
        for e in recent:
            document = self.documents.get(e.document_id) if e.document_id else None
            enriched.append(
                ExtractionWithSource(
                    **e.model_dump(),
                    source_title=document.title if document else None,
                    source_type="document" if document else None,
                )
            )
        return enriched

    async def insert_asset(self, asset: Asset, inputs: Sequence[AssetInput] = ()) -> Asset:
        self._call("insert_asset")
        stored = asset.model_copy(update={"id": _id(), "created_at": self.now})
        self.assets.append(stored)
        for item in inputs:
            self.asset_inputs.append(item.model_copy(update={"asset_id": stored.id}))
        return stored

    async def get_template_override(self, template_key: str) -> Optional[TemplateOverride]:
        self._call("get_template_override")
        return self.overrides.get(template_key)

    async def update_tenant_timestamp(self, user_id: str, field: str, at: datetime) -> None:
        self._call("update_tenant_timestamp", user_id)
        check_timestamp_field(field)
        setattr(self.tenant(user_id), field, at)

    async def delete_documents_before(self, cutoff: datetime) -> Tuple[int, int]:
        self._call("delete_documents_before")
        old = {d.id for d in self.documents.values() if d.created_at < cutoff}
        doomed = [e.id for e in self.extractions.values() if e.document_id in old]
        for extraction_id in doomed:
            del self.extractions[extraction_id]
        for document_id in old:
            del self.documents[document_id]
        return len(old), len(doomed)


FetchResult = Union[List[FetchedItem], Exception]


class FakeFetcher(Fetcher):
    """Returns canned items per source name and records calls."""

    def __init__(self, results: Optional[Dict[str, FetchResult]] = None) -> None:
        self.results = results or {}
        self.calls: List[str] = []

    async def fetch(self, source: Source, limit: int) -> List[FetchedItem]:
        self.calls.append(source.name)
        result = self.results.get(source.name, [])
        if isinstance(result, Exception):
            raise result
        return list(result)[:limit]


class BlockingFetcher(FakeFetcher):
    """Blocks every fetch until ``release`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def fetch(self, source: Source, limit: int) -> List[FetchedItem]:
        self.calls.append(source.name)
        self.started.set()
        await self.release.wait()
        return []


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_tenant(user_id: str = "user-1", **overrides) -> TenantSettings:
    values = dict(
        user_id=user_id,
        crawl_schedule="daily",
        generation_schedule="daily",
        generation_time="08:00",
        timezone="UTC",
        content_formats=["linkedin_post"],
    )
    values.update(overrides)
    return TenantSettings(**values)


def make_source(name: str, user_id: str = "user-1", **overrides) -> Source:
    values = dict(
        id=f"src-{name}",
        user_id=user_id,
        name=name,
        feed_url=f"https://{name}.example.com/feed",
        crawl_method=CrawlMethod.RSS,
    )
    values.update(overrides)
    return Source(**values)


def make_item(slug: str, body: Optional[str] = None) -> FetchedItem:
    return FetchedItem(
        url=f"https://news.example.com/{slug}",
        title=slug.replace("-", " ").title(),
        body=body if body is not None else f"Body of {slug}",
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def llm() -> MockLLMProvider:
    return MockLLMProvider()


@pytest.fixture
def templates(store: InMemoryStore) -> TemplateLibrary:
    return TemplateLibrary(store)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()
