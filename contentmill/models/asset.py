"""Generated asset models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import DBModel
from .formats import AssetType


class AssetStatus(str, Enum):
    """Asset lifecycle status."""

    DRAFT = "draft"
    READY = "ready"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Asset(DBModel):
    """A generated content artifact."""

    user_id: str = Field(..., description="Owning user")
    type: AssetType = Field(..., description="Asset type")
    title: Optional[str] = Field(None, description="Title")
    content: str = Field(..., description="Body")
    status: AssetStatus = Field(AssetStatus.DRAFT, description="Lifecycle status")
    publish_date: Optional[datetime] = Field(None, description="Scheduled publish date")
    published_url: Optional[str] = Field(None, description="Where it was published")


class AssetInput(DBModel):
    """Provenance link from an asset to the material it was built from."""

    user_id: str = Field(..., description="Owning user")
    asset_id: Optional[str] = Field(None, description="Asset")
    document_id: Optional[str] = Field(None, description="Contributing document")
    source_material_id: Optional[str] = Field(None, description="Contributing source material")
    note: Optional[str] = Field(None, description="Free-form note")


class TemplateOverride(DBModel):
    """Database override of a default prompt template."""

    template_key: str = Field(..., description="Template key")
    name: Optional[str] = Field(None, description="Display name")
    prompt: Optional[str] = Field(None, description="Prompt text")
    active: bool = Field(True, description="False disables the template")
