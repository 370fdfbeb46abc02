"""Config command for configuration management."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from picmark.cli.shared import load_settings
from picmark.config.constants import DEFAULT_CONFIG_FILE

config_app = typer.Typer(help="Configuration management.")
console = Console()


@config_app.command("show")
def show() -> None:
    """Show current configuration."""
    settings = load_settings()

    console.print("\n[bold blue]Current Configuration[/bold blue]\n")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", settings.log_level)
    table.add_row("Log Directory", settings.log_dir)

    table.add_row("Upload Endpoint", settings.upload.endpoint)
    timeout = settings.upload.timeout
    table.add_row("Upload Timeout", f"{timeout:g}s" if timeout else "none")

    table.add_row("Scan Mode", settings.scan.mode)
    table.add_row("Document Extensions", ", ".join(settings.scan.extensions))

    table.add_row("Output Separator", repr(settings.output.separator))
    table.add_row("On Conflict", settings.output.on_conflict)

    console.print(table)
    console.print()


DEFAULT_CONFIG_TEMPLATE = """# picmark configuration
# Environment variables override this file, e.g. PICMARK_UPLOAD__ENDPOINT.

log_level: "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
log_dir: ".logs"

upload:
  endpoint: "http://127.0.0.1:36677/upload"  # PicGo server upload URL
  timeout: 60  # Seconds per upload; remove for no limit

scan:
  mode: "line-start"  # line-start, inline
  extensions: [".markdown", ".md"]

output:
  separator: " - "  # "<name> - <timestamp>.md"
  on_conflict: "rename"  # overwrite, rename
"""


@config_app.command("init")
def init(
    path: Annotated[
        Path | None,
        typer.Option(
            "--path",
            "-p",
            help="Path to create config file.",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing config file.",
        ),
    ] = False,
) -> None:
    """Initialize a configuration file."""
    config_path = path or Path.cwd() / DEFAULT_CONFIG_FILE

    if config_path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists at {config_path}")
        console.print("Use --force to overwrite.")
        raise typer.Exit(1)

    config_path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    console.print(f"[green]Created config file at:[/green] {config_path}")
