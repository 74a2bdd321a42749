"""Per-tenant settings."""

from datetime import datetime, time
from typing import Any, List, Optional

from pydantic import Field, field_validator
from rich.console import Console
from rich.markup import escape

from .base import DBModel
from .formats import ContentFormat

console = Console()


class TenantSettings(DBModel):
    """Schedule, format and profile settings for one user."""

    user_id: str = Field(..., description="Owning user")
    crawl_enabled: bool = Field(True, description="Whether background crawling is on")
    crawl_schedule: str = Field("daily", description="manual, every_6_hours, twice_daily, daily, weekly")
    generation_enabled: bool = Field(True, description="Whether background generation is on")
    generation_schedule: str = Field("weekly_sunday", description="manual, daily or weekly_<weekday>")
    generation_time: str = Field("08:00", description="Local time of day to generate (HH:MM)")
    content_formats: List[ContentFormat] = Field(
        default_factory=lambda: [ContentFormat.LINKEDIN_POST],
        description="Formats to generate, in order",
    )
    timezone: str = Field("America/New_York", description="IANA timezone name")
    last_crawl_at: Optional[datetime] = Field(None, description="When crawling last ran")
    last_generation_at: Optional[datetime] = Field(None, description="When generation last ran")

    content_pillars: List[str] = Field(default_factory=list)
    professional_background: Optional[str] = None
    target_audience: Optional[str] = None
    voice_tone: Optional[str] = None
    unique_angle: Optional[str] = None
    signature_elements: Optional[str] = None

    @field_validator("content_formats", mode="before")
    @classmethod
    def drop_unknown_formats(cls, value: Any) -> List[ContentFormat]:
        """Keep known formats in order, without duplicates."""
        if value is None:
            return []

        formats: List[ContentFormat] = []
        for key in value:
            try:
                fmt = key if isinstance(key, ContentFormat) else ContentFormat.parse(str(key))
            except ValueError:
                console.print(f"[yellow]Ignoring unknown content format: {escape(str(key))}[/yellow]")
                continue
            if fmt not in formats:
                formats.append(fmt)
        return formats

    @field_validator("generation_time", mode="before")
    @classmethod
    def format_generation_time(cls, value: Any) -> Any:
        """Accept TIME columns as well as strings."""
        if isinstance(value, time):
            return value.strftime("%H:%M")
        return value

    @field_validator("content_pillars", mode="before")
    @classmethod
    def default_pillars(cls, value: Any) -> Any:
        return value or []
