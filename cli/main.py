"""
OpenBibles - Main CLI Application

Command-line interface for extracting original-language verses and
uploading them.
"""
from dataclasses import replace
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import Config, get_config
from core.errors import OpenBiblesConfigError
from db.verse_importer import ImportReport, VerseImporter
from integrations.detection import detect_format
from observability import get_logger, set_level, setup_logging
from pipeline.driver import PipelineDriver, RunReport, read_output, write_output

# Initialize app
app = typer.Typer(
    name="openbibles",
    help="OpenBibles - Original-language verse extraction",
    add_completion=False
)

console = Console()
logger = get_logger("openbibles.cli")


def _load_config(
    sources_dir: Optional[Path] = None,
    book_map: Optional[Path] = None,
    output: Optional[Path] = None,
    sources_file: Optional[Path] = None,
    verbose: bool = False,
) -> Config:
    """Effective configuration with command-line overrides applied."""
    config = get_config()
    paths = config.paths
    if sources_dir:
        paths = replace(paths, sources_dir=sources_dir)
    if book_map:
        paths = replace(paths, book_map_path=book_map)
    if output:
        paths = replace(paths, output_path=output)
    if sources_file:
        paths = replace(paths, sources_file=sources_file)
    config = replace(config, paths=paths)

    setup_logging(config.logging, force=True)
    if verbose:
        set_level("DEBUG")
    return config


def _fail(error: OpenBiblesConfigError) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {error.message}")
    for suggestion in error.suggestions:
        console.print(f"  [dim]{suggestion}[/dim]")
    raise typer.Exit(1)


@app.command()
def parse(
    sources_dir: Optional[Path] = typer.Option(None, "--sources", "-s", help="Sources root directory"),
    book_map: Optional[Path] = typer.Option(None, "--book-map", "-b", help="Book map JSON file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file"),
    sources_file: Optional[Path] = typer.Option(None, "--sources-file", help="JSON list of source collections"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Parse every source collection into one normalized verse file."""
    config = _load_config(sources_dir, book_map, output, sources_file, verbose)

    console.print(Panel.fit(
        "[bold blue]OpenBibles - Parsing original-language sources[/bold blue]",
        border_style="blue"
    ))

    try:
        driver = PipelineDriver.from_config(config)
        with console.status("Parsing..."):
            records, report = driver.run()
    except OpenBiblesConfigError as e:
        _fail(e)

    path = write_output(records, config.paths.output_path)
    _display_run_report(report)
    console.print(f"\n[green]Saved {len(records)} verses to {path}[/green]")


@app.command("import")
def import_verses(
    input_file: Optional[Path] = typer.Argument(None, help="Verses JSON file (defaults to the parse output)"),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", help="Verses per request"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Upload a normalized verse file to the remote verse store."""
    config = _load_config(output=input_file, verbose=verbose)
    importer_config = config.importer
    if batch_size:
        importer_config = replace(importer_config, batch_size=batch_size)

    try:
        records = read_output(config.paths.output_path)
        importer = VerseImporter.from_config(importer_config)
    except OpenBiblesConfigError as e:
        _fail(e)

    console.print(f"[bold]Importing {len(records)} verses to {importer.endpoint}[/bold]")
    with importer:
        report = importer.import_records(records)

    _display_import_report(report)


@app.command()
def detect(
    files: List[Path] = typer.Argument(..., exists=True, dir_okay=False, help="Files to classify")
):
    """Show the markup dialect detected for each file."""
    config = _load_config()

    table = Table(title="Detected Formats")
    table.add_column("File", style="cyan")
    table.add_column("Format", style="green")

    for path in files:
        try:
            content = path.read_text(encoding=config.parsing.encoding)
        except (OSError, UnicodeDecodeError) as e:
            table.add_row(str(path), f"[red]unreadable: {e}[/red]")
            continue
        table.add_row(str(path), detect_format(content).value)

    console.print(table)


@app.command()
def status():
    """Show the effective configuration and input availability."""
    config = _load_config()

    console.print(Panel.fit(
        "[bold blue]OpenBibles - Configuration[/bold blue]",
        border_style="blue"
    ))

    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in config.to_dict().items():
        table.add_row(key, "" if value is None else str(value))
    table.add_row("import_key_set", "yes" if config.importer.supabase_anon_key else "no")
    console.print(table)

    inputs = Table(title="Inputs")
    inputs.add_column("Input", style="cyan")
    inputs.add_column("Status")
    inputs.add_row("Book map", _exists(config.paths.book_map_path))
    inputs.add_row("Sources root", _exists(config.paths.sources_dir))
    try:
        sources = config.sources()
    except OpenBiblesConfigError as e:
        console.print(inputs)
        _fail(e)
    for source in sources:
        inputs.add_row(f"{source.code} ({source.display_name})", _exists(config.paths.sources_dir / source.code))
    console.print(inputs)


def _exists(path: Path) -> str:
    return "[green]✓ Found[/green]" if path.exists() else "[yellow]○ Missing[/yellow]"


def _display_run_report(report: RunReport) -> None:
    """Display per-source and overall parse counts."""
    table = Table(title="Sources")
    table.add_column("Source", style="cyan")
    table.add_column("Name")
    table.add_column("Files", justify="right")
    table.add_column("Verses", justify="right", style="green")
    table.add_column("Skipped", justify="right", style="yellow")

    for stats in report.sources.values():
        if stats.missing:
            table.add_row(stats.code, stats.display_name, "-", "-", "[dim]directory not found[/dim]")
        else:
            table.add_row(stats.code, stats.display_name, str(stats.files), str(stats.verses), str(stats.skipped))
    console.print(table)

    summary = report.summary
    totals = Table(title="Summary")
    totals.add_column("Metric", style="cyan")
    totals.add_column("Value", justify="right")
    totals.add_row("Files processed", str(report.files_processed))
    totals.add_row("Files failed", str(report.files_failed))
    totals.add_row("Files skipped (unrecognized)", str(report.files_skipped))
    totals.add_row("Verses extracted", str(report.verses_extracted))
    totals.add_row("Verses skipped", str(report.verses_skipped))
    totals.add_row("  unresolved book", str(report.unresolved))
    totals.add_row("  malformed reference", str(report.malformed))
    totals.add_row("  empty text", str(report.empty))
    totals.add_row("  unterminated", str(report.unterminated))
    if summary:
        totals.add_row("Total verses (deduplicated)", str(summary.total))
        totals.add_row("Old Testament", str(summary.old_testament))
        totals.add_row("New Testament", str(summary.new_testament))
    console.print(totals)

    if report.is_incomplete:
        console.print(
            f"\n[yellow]Warning: expected at least {report.expected_min_verses} verses "
            f"for a complete Bible, got {summary.total}[/yellow]"
        )


def _display_import_report(report: ImportReport) -> None:
    """Display import counts per source."""
    table = Table(title="Import Results")
    table.add_column("Source", style="cyan")
    table.add_column("Verses", justify="right")
    table.add_column("Inserted", justify="right", style="green")
    table.add_column("Updated", justify="right")
    table.add_column("Not found", justify="right", style="yellow")
    table.add_column("Errors", justify="right", style="red")

    for stats in report.sources.values():
        table.add_row(
            stats.source_code,
            str(stats.verses),
            str(stats.inserted),
            str(stats.updated),
            str(stats.not_found),
            str(stats.errors),
        )
    totals = report.totals
    table.add_row(
        "[bold]Total[/bold]",
        str(report.verses),
        str(totals.inserted),
        str(totals.updated),
        str(totals.not_found),
        str(totals.errors),
    )
    console.print(table)

    if totals.not_found:
        console.print("\n[yellow]Some verses have no matching row in bible_verses.[/yellow]")
    if totals.errors:
        console.print("\n[red]Some verses failed to import; re-running the import is safe.[/red]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
