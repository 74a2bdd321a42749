"""Admission decisions for crawling and generation.

Pure functions of a tenant's settings and the current time.
"""

from datetime import datetime
from typing import Optional

import pendulum
from pendulum import DateTime
from rich.console import Console
from rich.markup import escape

from ..models import TenantSettings

console = Console()

MANUAL = "manual"
DAILY = "daily"
WEEKLY_PREFIX = "weekly"

CRAWL_THRESHOLD_HOURS = {
    "every_6_hours": 6,
    "twice_daily": 12,
    "daily": 24,
    "weekly": 168,
}
DEFAULT_THRESHOLD_HOURS = CRAWL_THRESHOLD_HOURS[DAILY]

GENERATION_WINDOW_SECONDS = 2 * 3600
DEFAULT_GENERATION_HOUR = 8
DEFAULT_WEEKDAY = "sunday"

# ISO weekday numbers, Monday == 1
WEEKDAYS = {
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
    "sunday": 7,
}


def as_utc(value: Optional[datetime] = None) -> DateTime:
    """Convert a datetime to a UTC pendulum DateTime, treating naive values as UTC."""
    if value is None:
        return pendulum.now("UTC")
    return pendulum.instance(value, tz="UTC").in_timezone("UTC")


def tenant_timezone(name: Optional[str]):
    """Resolve a timezone name, falling back to UTC."""
    try:
        return pendulum.timezone(name or "UTC")
    except (ValueError, KeyError):
        console.print(f"[yellow]Unknown timezone '{escape(str(name))}', using UTC[/yellow]")
        return pendulum.timezone("UTC")


def parse_target_hour(value: Optional[str]) -> int:
    """Hour of day from an ``HH:MM`` (or ``HH:MM:SS``) string."""
    try:
        hour = int((value or "").strip().split(":")[0])
    except ValueError:
        hour = -1
    if 0 <= hour <= 23:
        return hour

    console.print(f"[yellow]Invalid generation time '{escape(str(value))}', using {DEFAULT_GENERATION_HOUR:02d}:00[/yellow]")
    return DEFAULT_GENERATION_HOUR


def should_crawl(
    cadence: Optional[str],
    last_run_at: Optional[datetime],
    tz: Optional[str] = None,
    now: Optional[datetime] = None,
) -> bool:
    """
    Decide whether a tenant's crawl is due.

    Elapsed time is absolute, so ``tz`` does not change the answer; it is
    accepted so callers can pass the tenant's settings through unchanged.

    Args:
        cadence: Crawl schedule name
        last_run_at: When the tenant was last crawled
        tz: Tenant timezone
        now: Current time (default: now)

    Returns:
        True if the crawl should run
    """
    cadence = (cadence or "").strip().lower()
    if not cadence or cadence == MANUAL:
        return False
    if last_run_at is None:
        return True

    threshold = CRAWL_THRESHOLD_HOURS.get(cadence)
    if threshold is None:
        console.print(f"[yellow]Unknown crawl schedule '{escape(cadence)}', treating as daily[/yellow]")
        threshold = DEFAULT_THRESHOLD_HOURS

    elapsed_hours = (as_utc(now).timestamp() - as_utc(last_run_at).timestamp()) / 3600
    return elapsed_hours >= threshold


def generation_weekday(cadence: str) -> Optional[int]:
    """ISO weekday of a ``weekly_<day>`` cadence, or None for daily cadences."""
    if not cadence.startswith(WEEKLY_PREFIX):
        return None
    day = cadence[len(WEEKLY_PREFIX):].lstrip("_") or DEFAULT_WEEKDAY
    if day not in WEEKDAYS:
        console.print(f"[yellow]Unknown weekday in schedule '{escape(cadence)}', using {DEFAULT_WEEKDAY}[/yellow]")
        day = DEFAULT_WEEKDAY
    return WEEKDAYS[day]


def generation_slot(settings: TenantSettings, now: Optional[datetime] = None) -> DateTime:
    """The most recent local ``HH:00`` of the configured generation hour at or before ``now``."""
    local = as_utc(now).in_timezone(tenant_timezone(settings.timezone))
    hour = parse_target_hour(settings.generation_time)

    slot = local.set(hour=hour, minute=0, second=0, microsecond=0)
    if slot > local:
        slot = slot.subtract(days=1).set(hour=hour)
    return slot


def should_generate(settings: TenantSettings, now: Optional[datetime] = None) -> bool:
    """
    Decide whether a tenant's generation is due.

    Admits within two hours after the configured hour in the tenant's local
    time, on the configured weekday for weekly cadences, and at most once per
    local calendar day.
    """
    cadence = (settings.generation_schedule or "").strip().lower()
    if not settings.generation_enabled or not cadence or cadence == MANUAL:
        return False
    if not settings.content_formats:
        return False

    zone = tenant_timezone(settings.timezone)
    local = as_utc(now).in_timezone(zone)
    slot = generation_slot(settings, now)

    if local.timestamp() - slot.timestamp() >= GENERATION_WINDOW_SECONDS:
        return False

    if cadence != DAILY:
        weekday = generation_weekday(cadence)
        if weekday is None:
            console.print(f"[yellow]Unknown generation schedule '{escape(cadence)}', treating as daily[/yellow]")
        elif slot.isoweekday() != weekday:
            return False

    if settings.last_generation_at is not None:
        last_local = as_utc(settings.last_generation_at).in_timezone(zone)
        if last_local.date() == local.date() or last_local >= slot:
            return False

    return True
