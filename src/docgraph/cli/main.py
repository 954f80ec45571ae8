"""docgraph CLI: convert TypeScript sources into a documentation graph."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import Settings, load_settings
from ..converter.service import ConversionResult, ConverterService
from ..core.errors import DocGraphError
from ..core.logging import configure_logging
from ..output.search_index import build_search_index
from ..output.serializer import outline_project, serialize_project, write_json

console = Console()
app = typer.Typer(add_completion=False, no_args_is_help=True)


def _resolve_settings(
    config_path: Optional[Path],
    paths: Optional[List[Path]],
    mode: Optional[str] = None,
    out: Optional[Path] = None,
) -> Settings:
    settings = load_settings(config_path)
    if paths:
        settings.entry_points = [Path(p).expanduser() for p in paths]
    if mode:
        if mode not in ("file", "modules"):
            console.print(f"[red]Unknown mode:[/red] {mode} (expected 'file' or 'modules')")
            raise typer.Exit(1)
        settings.mode = mode  # type: ignore[assignment]
    if out:
        settings.out = Path(out).expanduser().resolve()
    configure_logging(level=settings.logging.level, json_format=settings.logging.json_format)
    return settings


def _run(settings: Settings) -> ConversionResult:
    try:
        return ConverterService(settings).convert_paths()
    except DocGraphError as exc:
        console.print(f"[red]{exc.error_name}:[/red] {exc.message}")
        raise typer.Exit(1) from exc


def _print_diagnostics(result: ConversionResult) -> None:
    if not result.diagnostics:
        return
    table = Table(title=f"{len(result.diagnostics)} diagnostics")
    table.add_column("Code", style="yellow")
    table.add_column("Message")
    table.add_column("File")
    for diagnostic in result.diagnostics:
        table.add_row(
            diagnostic.code.name,
            diagnostic.message,
            str(diagnostic.details.get("file", "")),
        )
    console.print(table)


@app.command()
def convert(
    paths: Optional[List[Path]] = typer.Argument(None, help="Files or directories to document"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to docgraph.yaml"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Where to write the JSON graph"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="'file' or 'modules'"),
):
    """Convert sources and write the resolved graph as JSON."""
    try:
        settings = _resolve_settings(config, paths, mode, out)
    except DocGraphError as exc:
        console.print(f"[red]{exc.error_name}:[/red] {exc.message}")
        raise typer.Exit(1) from exc

    result = _run(settings)
    written = write_json(serialize_project(result.project), settings.out)
    _print_diagnostics(result)
    console.print(
        f"[green]Wrote[/green] {written} "
        f"({len(result.project.project.registry)} reflections, "
        f"{len(result.project.unresolved)} unresolved references)"
    )


@app.command()
def outline(
    paths: Optional[List[Path]] = typer.Argument(None, help="Files or directories to document"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to docgraph.yaml"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="'file' or 'modules'"),
):
    """Print the declaration tree without writing anything."""
    try:
        settings = _resolve_settings(config, paths, mode)
    except DocGraphError as exc:
        console.print(f"[red]{exc.error_name}:[/red] {exc.message}")
        raise typer.Exit(1) from exc

    result = _run(settings)
    rows = outline_project(result.project)
    if not rows:
        console.print("[yellow]No declarations found[/yellow]")
        return

    table = Table(title=settings.name)
    table.add_column("Path", style="cyan")
    table.add_column("Kind")
    table.add_column("Signatures", justify="right")
    for path, kind, signatures in rows:
        table.add_row(path, kind, str(signatures) if signatures else "")
    console.print(table)
    _print_diagnostics(result)


@app.command("search-index")
def search_index(
    paths: Optional[List[Path]] = typer.Argument(None, help="Files or directories to document"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to docgraph.yaml"),
    out: Path = typer.Option(Path("search.json"), "--out", "-o", help="Where to write the index"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="'file' or 'modules'"),
):
    """Write the search index rows for every documented declaration."""
    try:
        settings = _resolve_settings(config, paths, mode)
    except DocGraphError as exc:
        console.print(f"[red]{exc.error_name}:[/red] {exc.message}")
        raise typer.Exit(1) from exc

    result = _run(settings)
    rows = build_search_index(result.project)
    written = write_json(rows, Path(out).expanduser().resolve())
    console.print(f"[green]Wrote[/green] {written} ({len(rows)} entries)")


if __name__ == "__main__":
    app()
