"""Run summary rendering."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .results import RunResult

console = Console()


def print_run_summary(result: RunResult) -> None:
    """Print a per-stage table and any errors for a finished run."""
    table = Table(title=f"Run Summary ({result.trigger.value})")
    table.add_column("Stage", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Details", style="dim")

    def status(errors) -> str:
        return "[green]✓[/green]" if not errors else f"[yellow]{len(errors)} errors[/yellow]"

    crawl = result.crawl
    table.add_row(
        "Crawl",
        status(crawl.errors),
        f"{crawl.tenants} tenants, {crawl.sources} sources, "
        f"{crawl.documents} new, {crawl.duplicates} duplicates",
    )
    extraction = result.extraction
    table.add_row(
        "Extraction",
        status(extraction.errors),
        f"{extraction.tenants} tenants, {extraction.extracted} extracted",
    )
    generation = result.generation
    table.add_row(
        "Generation",
        status(generation.errors),
        f"{generation.tenants} tenants, {generation.generated} assets",
    )
    retention = result.retention
    table.add_row(
        "Retention",
        status(retention.errors),
        f"{retention.documents} documents, {retention.extractions} extractions removed",
    )

    console.print(table)

    errors = result.all_errors
    if errors:
        console.print(
            Panel(
                Text("\n".join(f"• {e}" for e in errors)),
                title="Errors",
                style="red",
            )
        )
    else:
        console.print(f"[green]✅ Run completed in {result.duration:.1f}s[/green]")
