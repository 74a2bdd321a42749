"""Pipeline stages, schedule evaluation and run coordination."""

from .coordinator import RunCoordinator
from .crawl import CrawlStage, select_sources
from .extract import ExtractionStage
from .generate import GenerationStage
from .report import print_run_summary
from .results import (
    CrawlResult,
    ExtractionResult,
    GenerationResult,
    RetentionResult,
    RunResult,
    RunState,
    RunStatus,
    RunTrigger,
)
from .retention import RetentionStage
from .schedule import should_crawl, should_generate
from .service import TickService, next_fire, validate_cron

__all__ = [
    "CrawlResult",
    "CrawlStage",
    "ExtractionResult",
    "ExtractionStage",
    "GenerationResult",
    "GenerationStage",
    "RetentionResult",
    "RetentionStage",
    "RunCoordinator",
    "RunResult",
    "RunState",
    "RunStatus",
    "RunTrigger",
    "TickService",
    "next_fire",
    "print_run_summary",
    "select_sources",
    "should_crawl",
    "should_generate",
    "validate_cron",
]
