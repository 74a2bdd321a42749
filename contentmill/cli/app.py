"""Main CLI application."""

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from .init import init_command
from .run import run_command
from .serve import serve_command

app = typer.Typer(
    name="contentmill",
    help="Content Mill - background crawl, extraction and draft generation",
    no_args_is_help=True,
)

# Register commands
app.command("init")(init_command)
app.command("run")(run_command)
app.command("serve")(serve_command)


if __name__ == "__main__":
    app()
