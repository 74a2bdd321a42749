"""Retention stage: delete documents past the horizon."""

from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.markup import escape

from ..db import ContentStore
from .results import RetentionResult
from .schedule import as_utc

console = Console()


class RetentionStage:
    """Global cleanup of old documents and their extractions."""

    def __init__(self, store: ContentStore, retention_days: int = 30) -> None:
        self.store = store
        self.retention_days = retention_days

    async def run(self, now: Optional[datetime] = None) -> RetentionResult:
        result = RetentionResult()
        cutoff = as_utc(now).subtract(days=self.retention_days)

        try:
            result.documents, result.extractions = await self.store.delete_documents_before(cutoff)
        except Exception as e:
            console.print(f"[red]Retention failed: {escape(str(e))}[/red]")
            result.errors.append(f"retention: {e}")
            return result

        if result.documents:
            console.print(
                f"[dim]Retention: removed {result.documents} documents "
                f"and {result.extractions} extractions older than {cutoff.to_date_string()}[/dim]"
            )
        return result
