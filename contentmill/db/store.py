"""Storage interface consumed by the pipeline."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence, Set, Tuple

from ..models import (
    Asset,
    AssetInput,
    Document,
    Extraction,
    ExtractionWithSource,
    Source,
    TemplateOverride,
    TenantSettings,
)

TENANT_TIMESTAMP_FIELDS = ("last_crawl_at", "last_generation_at")


class ContentStore(ABC):
    """Durable storage for tenants, sources, documents, extractions and assets.

    Every write is scoped to one tenant and one entity type.
    """

    @abstractmethod
    async def list_tenants(self) -> List[TenantSettings]:
        """All tenant settings rows."""

    @abstractmethod
    async def list_active_sources(self, user_id: str) -> List[Source]:
        """Active sources for a tenant, least recently crawled first."""

    @abstractmethod
    async def touch_source(self, source_id: str, at: datetime) -> None:
        """Set a source's last-crawled marker."""

    @abstractmethod
    async def insert_document_if_absent(self, document: Document) -> Optional[Document]:
        """
        Insert a document unless the tenant already has one with the same
        URL or the same dedupe hash.

        Returns:
            The stored document, or None if it was a duplicate
        """

    @abstractmethod
    async def list_extracted_document_ids(self, user_id: str) -> Set[str]:
        """IDs of documents that already have an extraction."""

    @abstractmethod
    async def list_documents_for_extraction(
        self,
        user_id: str,
        exclude_ids: Set[str],
        limit: int,
    ) -> List[Document]:
        """Parsed documents with a body, oldest first, skipping ``exclude_ids``."""

    @abstractmethod
    async def insert_extraction(self, extraction: Extraction) -> Extraction:
        """Store an extraction."""

    @abstractmethod
    async def list_recent_extractions(
        self,
        user_id: str,
        since: datetime,
        limit: int,
    ) -> List[ExtractionWithSource]:
        """Newest non-archived extractions created at or after ``since``."""

    @abstractmethod
    async def insert_asset(self, asset: Asset, inputs: Sequence[AssetInput] = ()) -> Asset:
        """Store an asset and its provenance rows."""

    @abstractmethod
    async def get_template_override(self, template_key: str) -> Optional[TemplateOverride]:
        """Database override for a prompt template, if any."""

    @abstractmethod
    async def update_tenant_timestamp(self, user_id: str, field: str, at: datetime) -> None:
        """Set ``last_crawl_at`` or ``last_generation_at``."""

    @abstractmethod
    async def delete_documents_before(self, cutoff: datetime) -> Tuple[int, int]:
        """
        Delete documents created before ``cutoff`` together with their
        extractions, extractions first.

        Returns:
            Tuple of (documents_deleted, extractions_deleted)
        """


def check_timestamp_field(field: str) -> None:
    """Reject anything but the two orchestrator-owned timestamps."""
    if field not in TENANT_TIMESTAMP_FIELDS:
        raise ValueError(f"Unknown tenant timestamp field: {field}")
