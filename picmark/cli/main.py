"""Main CLI application using Typer."""

from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from picmark import __version__
from picmark.cli.commands.config import config_app
from picmark.cli.commands.scan import scan
from picmark.cli.commands.upload import upload

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="picmark",
    help="Upload the local images of Markdown documents to an image host.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()

app.command(name="upload", help="Upload local images and write rewritten copies.")(upload)
app.command(name="scan", help="List the image references of a document.")(scan)
app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]picmark[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """picmark - upload local Markdown images to an image host.

    Every local image of a document is uploaded once, and a new copy of the
    document pointing at the hosted URLs is written next to the original.
    """
    pass


if __name__ == "__main__":
    app()
