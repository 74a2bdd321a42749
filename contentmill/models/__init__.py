"""Data models for Content Mill."""

from .asset import Asset, AssetInput, AssetStatus, TemplateOverride
from .document import Document, DocumentStatus
from .extraction import Extraction, ExtractionWithSource
from .formats import AssetType, ContentFormat
from .settings import TenantSettings
from .source import CrawlMethod, Source, SourceStatus

__all__ = [
    "Asset",
    "AssetInput",
    "AssetStatus",
    "AssetType",
    "ContentFormat",
    "CrawlMethod",
    "Document",
    "DocumentStatus",
    "Extraction",
    "ExtractionWithSource",
    "Source",
    "SourceStatus",
    "TemplateOverride",
    "TenantSettings",
]
