"""Data models for ingestion."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class FetchedItem(BaseModel):
    """One item returned by a fetcher."""

    url: str = Field(..., description="Item URL")
    title: Optional[str] = Field(None, description="Item title")
    body: str = Field(..., description="Extracted text")
    author: Optional[str] = Field(None, description="Author")
    published_at: Optional[datetime] = Field(None, description="Publication date")
