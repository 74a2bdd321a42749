"""Fetched document model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import DBModel


class DocumentStatus(str, Enum):
    """Document processing status."""

    FETCHED = "fetched"
    PARSED = "parsed"
    FAILED = "failed"
    DISCARDED = "discarded"


class Document(DBModel):
    """One fetched unit of content."""

    user_id: str = Field(..., description="Owning user")
    trend_source_id: Optional[str] = Field(None, description="Originating source")
    url: str = Field(..., description="Document URL")
    title: Optional[str] = Field(None, description="Document title")
    author: Optional[str] = Field(None, description="Author")
    published_at: Optional[datetime] = Field(None, description="Publication timestamp")
    raw_text: Optional[str] = Field(None, description="Raw body text")
    dedupe_hash: Optional[str] = Field(None, description="Hash of the normalised body")
    status: DocumentStatus = Field(DocumentStatus.PARSED, description="Processing status")
    archived_at: Optional[datetime] = Field(None, description="When archived, if ever")
