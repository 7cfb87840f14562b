"""Command line interface for audiotally."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from audiotally.config import AppConfig
from audiotally.formats import AUDIO_EXTENSIONS, SUPPORTED_FORMATS
from audiotally.models import StatisticsRecord
from audiotally.pipeline.aggregator import CountMode
from audiotally.pipeline.calculator import DurationCalculator, ScanReport
from audiotally.utils.files import iter_audio_paths, resolve_root


console = Console()
app = typer.Typer(help="audiotally - total playback duration of the audio files in a folder")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _build_progress() -> Progress:
    return Progress(
        TextColumn("[cyan]{task.description}"),
        BarColumn(bar_width=50),
        MofNCompleteColumn(),
        TextColumn("files"),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console,
    )


def render_statistics(stats: StatisticsRecord) -> None:
    console.print("\n[bold]=== Results ===[/bold]")
    console.print(f"Total files found: {stats.total_files}")
    console.print(f"Successfully processed: {stats.success_count}")
    console.print(f"Errors: {stats.error_count}")
    console.print(f"Total audio duration: {stats.total_hours:.2f} hours")
    console.print(
        f"Mean audio duration per file: {stats.mean_hours:.4f} hours "
        f"({stats.mean_minutes:.2f} minutes)"
    )


def render_failures(report: ScanReport) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#")
    table.add_column("File")
    table.add_column("Error")
    for failure in report.failures:
        table.add_row(str(failure.index), str(failure.path), failure.message)
    console.print(table)


@app.command()
def scan(
    folder: Path = typer.Argument(..., help="Folder to scan for audio files."),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Worker threads (default: CPU core count)"
    ),
    count_mode: CountMode = typer.Option(
        CountMode.FAILURE,
        "--count-mode",
        help="Count successes by absence of failure or by positive duration",
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Per-file timeout in seconds"
    ),
    show_errors: bool = typer.Option(False, "--show-errors", help="List files that failed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Compute total and mean duration of every audio file under FOLDER."""
    _setup_logging(verbose)
    try:
        root = resolve_root(folder)
    except (OSError, RuntimeError) as exc:
        raise typer.BadParameter(f"Error resolving path: {exc}") from exc

    try:
        config = AppConfig(workers=workers, count_mode=count_mode, job_timeout=timeout)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    console.print(f"Scanning directory: [bold]{root}[/bold]")
    audio_paths = list(iter_audio_paths([root], config.extensions))
    if not audio_paths:
        console.print("[yellow]No audio files found in the folder.[/yellow]")
        return

    console.print(
        f"Found {len(audio_paths)} audio files. Processing with {config.workers} workers...\n"
    )

    with _build_progress() as progress:
        task = progress.add_task("Processing files...", total=len(audio_paths))
        calculator = DurationCalculator(
            config, progress=lambda: progress.update(task, advance=1)
        )
        report = calculator.calculate(audio_paths)

    render_statistics(report.statistics)
    if report.early_stops:
        console.print(
            f"[yellow]MP3 files with skipped or truncated data: {len(report.early_stops)}[/yellow]"
        )
    if show_errors and report.failures:
        render_failures(report)


@app.command()
def formats() -> None:
    """List recognized audio extensions."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Extension")
    table.add_column("Duration parser")
    for extension in AUDIO_EXTENSIONS:
        implemented = extension in SUPPORTED_FORMATS
        table.add_row(extension, "yes" if implemented else "[yellow]not implemented[/yellow]")
    console.print(table)
