"""Extraction stage: turn stored documents into insight."""

from typing import Sequence

from rich.console import Console
from rich.markup import escape

from ..db import ContentStore
from ..generation import LLMProvider
from ..models import Extraction, TenantSettings
from .results import ExtractionResult

console = Console()

DOCUMENT_KIND = "document"


class ExtractionStage:
    """Extract documents that have no extraction yet.

    Runs for every tenant with crawling enabled, whether or not a crawl
    happened this tick, so stored backlog keeps draining.
    """

    def __init__(self, store: ContentStore, extractor: LLMProvider, extractions_per_run: int = 10) -> None:
        self.store = store
        self.extractor = extractor
        self.extractions_per_run = extractions_per_run

    async def run(self, tenants: Sequence[TenantSettings]) -> ExtractionResult:
        result = ExtractionResult()

        for tenant in tenants:
            if not tenant.crawl_enabled:
                continue

            try:
                existing = await self.store.list_extracted_document_ids(tenant.user_id)
                documents = await self.store.list_documents_for_extraction(
                    tenant.user_id, existing, self.extractions_per_run
                )
            except Exception as e:
                result.errors.append(f"{tenant.user_id}: failed to load documents: {e}")
                continue

            result.tenants += 1
            documents = [d for d in documents if d.id not in existing][: self.extractions_per_run]
            if documents:
                console.print(f"[dim]Extracting {len(documents)} documents for {escape(tenant.user_id)}[/dim]")

            for document in documents:
                label = document.title or document.id
                try:
                    insight = await self.extractor.extract(document.raw_text or "", DOCUMENT_KIND)
                    await self.store.insert_extraction(
                        Extraction(
                            user_id=tenant.user_id,
                            document_id=document.id,
                            summary=insight.summary,
                            key_points=insight.key_points,
                            topics=insight.topics,
                            model=self.extractor.model_id,
                        )
                    )
                except Exception as e:
                    result.errors.append(f"{label}: {e}")
                else:
                    result.extracted += 1

        return result
