"""Stage results and in-memory run state."""

from collections import deque
from datetime import datetime
from enum import Enum
from typing import Deque, List, Optional

from pydantic import BaseModel, Field


class CrawlResult(BaseModel):
    """Outcome of the crawl stage."""

    tenants: int = Field(0, description="Tenants crawled")
    sources: int = Field(0, description="Sources fetched successfully")
    documents: int = Field(0, description="New documents stored")
    duplicates: int = Field(0, description="Items skipped as duplicates")
    errors: List[str] = Field(default_factory=list)


class ExtractionResult(BaseModel):
    """Outcome of the extraction stage."""

    tenants: int = 0
    extracted: int = 0
    errors: List[str] = Field(default_factory=list)


class GenerationResult(BaseModel):
    """Outcome of the generation stage."""

    tenants: int = 0
    generated: int = 0
    errors: List[str] = Field(default_factory=list)


class RetentionResult(BaseModel):
    """Outcome of the retention stage."""

    documents: int = 0
    extractions: int = 0
    errors: List[str] = Field(default_factory=list)


class RunTrigger(str, Enum):
    """What started a run."""

    SCHEDULED = "scheduled"
    MANUAL = "manual"


class RunResult(BaseModel):
    """Aggregate result of one coordinator pass."""

    trigger: RunTrigger
    user_id: Optional[str] = Field(None, description="Tenant whose generation was forced")
    started_at: datetime
    finished_at: Optional[datetime] = None
    crawl: CrawlResult = Field(default_factory=CrawlResult)
    extraction: ExtractionResult = Field(default_factory=ExtractionResult)
    generation: GenerationResult = Field(default_factory=GenerationResult)
    retention: RetentionResult = Field(default_factory=RetentionResult)
    errors: List[str] = Field(default_factory=list, description="Run-level errors")

    @property
    def all_errors(self) -> List[str]:
        return (
            self.errors
            + self.crawl.errors
            + self.extraction.errors
            + self.generation.errors
            + self.retention.errors
        )

    @property
    def duration(self) -> float:
        """Run duration in seconds."""
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()


class RunStatus(BaseModel):
    """Answer to a status query."""

    running: bool
    last_run_at: Optional[datetime] = None
    last_result: Optional[RunResult] = None


class RunState:
    """Process-lifetime run state owned by one coordinator."""

    def __init__(self, history_size: int = 20) -> None:
        self.running = False
        self.last_run_at: Optional[datetime] = None
        self.last_result: Optional[RunResult] = None
        self.history: Deque[RunResult] = deque(maxlen=history_size)

    def record(self, result: RunResult) -> None:
        self.last_run_at = result.started_at
        self.last_result = result
        self.history.append(result)

    def snapshot(self) -> RunStatus:
        return RunStatus(
            running=self.running,
            last_run_at=self.last_run_at,
            last_result=self.last_result,
        )
