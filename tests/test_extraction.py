"""Tests for the extraction stage."""

from contentmill.errors import ExtractionError
from contentmill.generation import MockLLMProvider
from contentmill.models import Document, DocumentStatus, Extraction
from contentmill.pipeline import ExtractionStage

from .conftest import NOW, make_tenant


class FailingExtractor(MockLLMProvider):
    def __init__(self, fail_on: str) -> None:
        super().__init__()
        self.fail_on = fail_on

    async def extract(self, text, kind_hint):
        if self.fail_on in text:
            raise ExtractionError("Could not parse JSON from response")
        return await super().extract(text, kind_hint)


def add_documents(store, count, user_id="user-1"):
    return [
        store.add_document(
            Document(user_id=user_id, url=f"https://example.com/{i}", title=f"Doc {i}", raw_text=f"text {i}"),
            created_at=NOW.subtract(hours=count - i),
        )
        for i in range(count)
    ]


async def test_extracts_documents_without_extractions(store, llm):
    # Crawl is not due for this tenant; extraction still drains the backlog
    store.add_tenant(make_tenant(last_crawl_at=NOW.subtract(hours=1)))
    done, pending = add_documents(store, 2)
    store.add_extraction(Extraction(user_id="user-1", document_id=done.id, summary="old"))

    result = await ExtractionStage(store, llm).run(store.tenants)

    assert result.extracted == 1
    assert result.errors == []
    created = [e for e in store.extractions.values() if e.document_id == pending.id]
    assert len(created) == 1
    assert created[0].model == "mock"
    assert created[0].key_points
    assert llm.calls == [("extract", "document")]


async def test_respects_per_run_limit_oldest_first(store, llm):
    store.add_tenant(make_tenant())
    documents = add_documents(store, 5)

    result = await ExtractionStage(store, llm, extractions_per_run=3).run(store.tenants)

    assert result.extracted == 3
    extracted = {e.document_id for e in store.extractions.values()}
    assert extracted == {d.id for d in documents[:3]}


async def test_second_pass_does_not_duplicate(store, llm):
    store.add_tenant(make_tenant())
    add_documents(store, 2)
    stage = ExtractionStage(store, llm)

    await stage.run(store.tenants)
    result = await stage.run(store.tenants)

    assert result.extracted == 0
    assert len(store.extractions) == 2


async def test_failure_is_labeled_and_isolated(store):
    store.add_tenant(make_tenant())
    add_documents(store, 3)

    result = await ExtractionStage(store, FailingExtractor("text 1")).run(store.tenants)

    assert result.extracted == 2
    assert result.errors == ["Doc 1: Could not parse JSON from response"]


async def test_skips_crawl_disabled_tenants_and_unparsed_documents(store, llm):
    store.add_tenant(make_tenant("user-1", crawl_enabled=False))
    store.add_tenant(make_tenant("user-2"))
    add_documents(store, 1, user_id="user-1")
    store.add_document(
        Document(user_id="user-2", url="https://example.com/x", raw_text="x", status=DocumentStatus.FAILED)
    )

    result = await ExtractionStage(store, llm).run(store.tenants)

    assert result.extracted == 0
    assert result.tenants == 1


async def test_store_failure_skips_only_that_tenant(store, llm):
    store.add_tenant(make_tenant("user-1"))
    store.add_tenant(make_tenant("user-2"))
    store.add_tenant(make_tenant("user-3"))
    add_documents(store, 1, user_id="user-1")
    add_documents(store, 1, user_id="user-2")
    add_documents(store, 1, user_id="user-3")
    store.failures[("list_extracted_document_ids", "user-1")] = RuntimeError("connection reset")
    store.failures[("list_documents_for_extraction", "user-2")] = RuntimeError("statement timeout")

    result = await ExtractionStage(store, llm).run(store.tenants)

    assert result.errors == [
        "user-1: failed to load documents: connection reset",
        "user-2: failed to load documents: statement timeout",
    ]
    assert result.tenants == 1
    assert result.extracted == 1
    assert {e.user_id for e in store.extractions.values()} == {"user-3"}
