"""Output formatting utilities for CLI.

Follows the golden rule:
- stdout = machine-readable data (JSON)
- stderr = human-readable logs (progress, errors, info, verbose output)

This separation allows piping the JSON summary to other tools while
keeping colored logs in the terminal.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from market_simulator.engine import DayReport

# stderr console for human logs (preserves colors when redirected)
console = Console(stderr=True)


def output_json(data: Any, indent: int | None = 2) -> None:
    """Output JSON to stdout (machine-readable).

    Args:
        data: Data to serialize as JSON
        indent: Indentation level (None for compact)
    """
    print(json.dumps(data, indent=indent), flush=True)


def log_info(message: str, quiet: bool = False) -> None:
    """Log info message to stderr unless quiet."""
    if not quiet:
        console.print(f"[blue]ℹ[/blue] {message}")


def log_success(message: str, quiet: bool = False) -> None:
    """Log success message to stderr unless quiet."""
    if not quiet:
        console.print(f"[green]✓[/green] {message}")


def log_error(message: str) -> None:
    """Log error message to stderr (always shown)."""
    console.print(f"[red]✗[/red] {message}", style="bold red")


def log_warning(message: str, quiet: bool = False) -> None:
    """Log warning message to stderr unless quiet."""
    if not quiet:
        console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")


def create_progress(description: str = "Simulating...") -> Progress:
    """Create a progress bar for stderr.

    Args:
        description: Progress description

    Returns:
        Progress instance configured for stderr
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,  # Output to stderr
    )


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route engine log records to the stderr console."""
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


# ============================================================================
# Verbose Mode Logging
# ============================================================================

def log_day_summary(report: DayReport) -> None:
    """Log a one-line summary of a closed day (verbose mode)."""
    event = f" [magenta]{report.active_event}[/magenta]" if report.active_event else ""
    console.print(
        f"[bold cyan]Day {report.day}[/bold cyan] index={report.market_index:.2f} "
        f"trades={report.trades} learning={report.learning_steps}{event}"
    )
    for action in report.corporate_actions:
        console.print(f"  [yellow]↳[/yellow] {action}")
