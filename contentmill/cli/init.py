"""Init command implementation."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ..config import DEFAULT_CONFIG_PATH, Config, ConfigModel, save_config
from ..db import init_database, open_pool, validate_connection

console = Console()


async def bootstrap_schema(db_config: dict) -> bool:
    """Create the schema; False if the database is unreachable."""
    async with open_pool(db_config) as pool:
        if not await validate_connection(pool):
            return False
        await init_database(pool)
    return True


def init_command(
    config_path: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Configuration file to write",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("contentmill", "--db-name", help="Database name"),
    db_user: str = typer.Option("contentmill", "--db-user", help="Database user"),
    llm_provider: str = typer.Option("openai", "--llm", help="LLM provider (openai, mock)"),
) -> None:
    """Write a default configuration and create the database schema."""
    console.print(Panel.fit("Content Mill - Initialization", style="bold blue"))

    config = ConfigModel(
        postgres={
            "host": db_host,
            "port": db_port,
            "database": db_name,
            "user": db_user,
            "password_env": "CONTENTMILL_DB_PASSWORD",
        },
        llm={"provider": llm_provider},
    )

    save_config(config, config_path)
    console.print(f"✅ Created config: {escape(str(config_path))}")

    console.print("\n[bold]Initializing database schema...[/bold]")
    db_config = Config.from_model(config).get_db_config()
    try:
        ok = asyncio.run(bootstrap_schema(db_config))
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not ok:
        console.print(
            "[red]❌ Database connection failed![/red]\n"
            "Please ensure Postgres is running and credentials are correct.\n"
            "Set the password via environment variable: [bold]export CONTENTMILL_DB_PASSWORD=your_password[/bold]"
        )
        raise typer.Exit(1)

    console.print("✅ Database schema initialized")
    console.print(
        Panel(
            f"[green]✅ Content Mill initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n\n"
            f"Next steps:\n"
            f"1. Set database password: [bold]export CONTENTMILL_DB_PASSWORD=your_password[/bold]\n"
            f"2. Set LLM API key: [bold]export OPENAI_API_KEY=your_key[/bold]\n"
            f"3. Run once: [bold]contentmill run[/bold], or start the scheduler: [bold]contentmill serve[/bold]",
            style="green",
        )
    )
