"""Scan command: list image references without uploading anything."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from picmark.cli.shared import apply_overrides, load_settings
from picmark.core.mapping import deduplicate
from picmark.markdown.references import extract_references

console = Console()


def scan(
    path: Annotated[
        Path,
        typer.Argument(
            help="Markdown document to scan.",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    inline: Annotated[
        bool,
        typer.Option(
            "--inline",
            help="Also detect Markdown images that do not start a line.",
        ),
    ] = False,
) -> None:
    """Show the image references a document contains.

    Lists what `picmark upload` would upload, without contacting the image host.
    """
    settings = apply_overrides(load_settings(), inline=inline)

    with open(path, encoding="utf-8", newline="") as f:
        content = f.read()

    references = extract_references(content, path, settings.scan.mode)
    if not references:
        console.print(f"[yellow]No image references found in {path.name}.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Kind")
    table.add_column("URL", style="cyan")
    table.add_column("Resolved Path")
    table.add_column("Status")

    for ref in references:
        if ref.is_remote:
            table.add_row(
                str(ref.line_index + 1), ref.kind.value, ref.raw_url, "", "[dim]remote[/dim]"
            )
            continue
        status = "[green]local[/green]" if ref.absolute_path.exists() else "[red]missing[/red]"
        table.add_row(
            str(ref.line_index + 1),
            ref.kind.value,
            ref.raw_url,
            str(ref.absolute_path),
            status,
        )

    console.print(table)

    units = deduplicate(references)
    console.print(
        f"\n{len(references)} reference(s), {len(units)} distinct local image(s) to upload."
    )
