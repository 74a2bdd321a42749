"""Data models for extraction and generation."""

from typing import List

from pydantic import BaseModel, Field


class Insight(BaseModel):
    """Structured insight extracted from a piece of content."""

    summary: str = Field(..., description="Concise summary")
    key_points: List[str] = Field(default_factory=list, description="Most important takeaways")
    topics: List[str] = Field(default_factory=list, description="Topic tags")


class GeneratedContent(BaseModel):
    """A generated piece of content."""

    title: str = Field(..., description="Title or subject line")
    content: str = Field(..., description="Body in markdown")
