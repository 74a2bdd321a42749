"""Extraction models."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, model_validator

from .base import DBModel


class Extraction(DBModel):
    """Insight extracted from exactly one document or source material."""

    user_id: str = Field(..., description="Owning user")
    document_id: Optional[str] = Field(None, description="Source document")
    source_material_id: Optional[str] = Field(None, description="Source material")
    summary: Optional[str] = Field(None, description="Summary")
    key_points: List[str] = Field(default_factory=list, description="Ordered key points")
    topics: List[str] = Field(default_factory=list, description="Topic tags")
    model: Optional[str] = Field(None, description="Model that produced it")
    archived_at: Optional[datetime] = Field(None, description="When archived, if ever")

    @model_validator(mode="after")
    def check_single_parent(self) -> "Extraction":
        if (self.document_id is None) == (self.source_material_id is None):
            raise ValueError("extraction needs exactly one of document_id or source_material_id")
        return self


class ExtractionWithSource(Extraction):
    """Extraction enriched with the title and kind of what it came from."""

    source_title: Optional[str] = Field(None, description="Document or material title")
    source_type: Optional[str] = Field(None, description="'document' or the material type")
