"""
DevControl CLI - Command Line Interface

Usage:
    devcontrol export csv <dependencies_file>    # Dependencies as CSV
    devcontrol export png <dependencies_file>    # Diagram snapshot
    devcontrol export pdf <dependencies_file>    # Full PDF report
    devcontrol export all <dependencies_file>    # All three
    devcontrol inspect <export.csv>              # Read back a CSV export
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console()


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _notify(level: str, message: str):
    if level == "error":
        console.print(f"[red]{message}[/red]")
    else:
        console.print(f"[green]✓[/green] {message}")


@click.group()
@click.version_option(version="1.0.0", prog_name="devcontrol")
def main():
    """DevControl - Service dependency report exports

    Export dependency data as CSV, diagram snapshots as PNG, and full
    dependency reports as PDF.
    """
    pass


@main.command()
@click.argument("fmt", metavar="FORMAT", type=click.Choice(["csv", "png", "pdf", "all"]))
@click.argument("input_path", type=click.Path(exists=True, file_okay=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(file_okay=False), help="Downloads directory")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="Export settings YAML")
@click.option("--graph/--no-graph", "with_graph", default=True,
              help="Embed the dependency diagram in the PDF report")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def export(fmt: str, input_path: str, output: Optional[str], config_path: Optional[str],
           with_graph: bool, verbose: bool):
    """Export dependencies loaded from a JSON or YAML file.

    FORMAT: csv, png, pdf or all

    INPUT_PATH: File with a "dependencies" list (and optional "cycles")
    """
    from devcontrol.core.errors import ExportError
    from devcontrol.core.graph import build_dependency_graph
    from devcontrol.core.loader import load_dependency_input
    from devcontrol.core.settings import ExportSettings, load_export_settings
    from devcontrol.orchestrator import ExportOrchestrator
    from devcontrol.render.diagram import render_dependency_diagram

    _setup_logging(verbose)

    try:
        settings = load_export_settings(Path(config_path)) if config_path else ExportSettings()
        if output:
            settings.downloads_dir = Path(output).resolve()

        loaded = load_dependency_input(Path(input_path))
        graph = build_dependency_graph(loaded.dependencies)

        cycles = loaded.cycles
        if cycles is None:
            cycles = graph.circular_dependencies()
            if cycles:
                console.print(f"[yellow]Detected {len(cycles)} circular dependency cycle(s)[/yellow]")

        surface = None
        if fmt in ("png", "all") or (fmt == "pdf" and with_graph):
            surface = render_dependency_diagram(graph)

        orchestrator = ExportOrchestrator(settings, notifier=_notify)
        formats = ["csv", "png", "pdf"] if fmt == "all" else [fmt]

        results = []
        for name in formats:
            try:
                if name == "csv":
                    result = asyncio.run(orchestrator.export_csv(loaded.dependencies, cycles))
                elif name == "png":
                    result = asyncio.run(orchestrator.export_png(surface))
                else:
                    pdf_surface = surface if with_graph else None
                    result = asyncio.run(orchestrator.export_pdf(loaded.dependencies, cycles, pdf_surface))
            except ExportError:
                # Already reported by the orchestrator
                if verbose:
                    console.print_exception()
                continue
            if result is not None:
                results.append((name, result))

        table = Table(title="Export Results")
        table.add_column("Format", style="cyan")
        table.add_column("File", style="green")
        table.add_column("Size", justify="right")
        for name, result in results:
            table.add_row(name.upper(), str(result.output_path), f"{result.size:,} bytes")
        console.print(table)

        if len(results) < len(formats):
            sys.exit(1)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


@main.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--limit", "-n", default=20, show_default=True, help="Rows to show")
def inspect(csv_path: str, limit: int):
    """Show the preamble and first rows of a CSV export."""
    from devcontrol.exporters.csv_exporter import parse_csv

    text = Path(csv_path).read_text(encoding="utf-8")
    parsed = parse_csv(text)

    meta = Table(title="Export Metadata")
    meta.add_column("Key", style="cyan")
    meta.add_column("Value", style="green")
    for key, value in parsed.preamble.items():
        meta.add_row(key, value)
    console.print(meta)

    rows = Table(title=f"Dependencies ({len(parsed.records)})")
    for column in parsed.header:
        rows.add_column(column)
    for record in parsed.records[:limit]:
        rows.add_row(
            record.subject,
            record.related_to,
            record.relation_kind,
            record.state,
            "Yes" if record.is_critical_path else "No",
            "; ".join(record.tags),
        )
    console.print(rows)


@main.command("init-config")
@click.argument("output_path", type=click.Path(dir_okay=False), default="devcontrol-export.yaml")
def init_config(output_path: str):
    """Write an example export settings file."""
    from devcontrol.core.settings import create_example_settings

    path = Path(output_path)
    if path.exists():
        console.print(f"[yellow]{path} already exists, not overwriting[/yellow]")
        sys.exit(1)

    path.write_text(create_example_settings())
    console.print(f"[green]Wrote example settings to[/green] [cyan]{path}[/cyan]")


@main.command()
def info():
    """Show information about DevControl exports."""
    from devcontrol import __version__

    console.print(f"\n[bold blue]DevControl Exports v{__version__}[/bold blue]")
    console.print("Service dependency report exports\n")

    console.print("[bold]Capabilities:[/bold]")
    console.print("  [green]✓[/green] CSV export with metadata preamble")
    console.print("  [green]✓[/green] PNG diagram snapshot with watermark")
    console.print("  [green]✓[/green] PDF report with summary, graph, details and cycle advice")
    console.print("  [green]✓[/green] Circular dependency detection (NetworkX)")

    console.print("\n[bold]Quick Start:[/bold]")
    console.print("  devcontrol export csv dependencies.json")
    console.print("  devcontrol export pdf dependencies.yaml -o ./exports")
    console.print("  devcontrol export all dependencies.json --no-graph")
    console.print()


if __name__ == "__main__":
    main()
