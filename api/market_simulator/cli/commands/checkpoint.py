"""Checkpoint CLI commands.

Provides commands to:
- Inspect a checkpoint file
- List checkpoints in a directory
- Delete checkpoints
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from market_simulator.cli.output import console, log_error, output_json
from market_simulator.persistence import CheckpointIntegrityError, CheckpointManager

# Checkpoint command group
checkpoint_app = typer.Typer(
    name="checkpoint",
    help="Inspect and manage simulation checkpoints (info/list/delete)",
    no_args_is_help=True,
)


# =============================================================================
# Info Command
# =============================================================================


@checkpoint_app.command(name="info")
def checkpoint_info(
    path: Path = typer.Argument(..., help="Checkpoint file"),
) -> None:
    """Show checkpoint metadata and verify its integrity.

    Example:
        market-sim checkpoint info checkpoints/3f2a.json
    """
    try:
        state, rng = CheckpointManager(path.parent).load_checkpoint(path)
    except CheckpointIntegrityError as e:
        log_error(str(e))
        raise typer.Exit(1)
    except (FileNotFoundError, ValueError) as e:
        log_error(f"Cannot read checkpoint: {e}")
        raise typer.Exit(1)

    output_json(
        {
            "path": str(path),
            "day": state.day,
            "time": state.time.isoformat(),
            "companies": len(state.companies),
            "active_companies": len(state.active_companies()),
            "investors": len(state.investors),
            "market_index": state.market_index,
            "events": len(state.event_history),
            "has_rng_state": rng is not None,
            "integrity": "ok",
        }
    )


# =============================================================================
# List Command
# =============================================================================


@checkpoint_app.command(name="list")
def list_checkpoints(
    directory: Path = typer.Argument(Path("checkpoints"), help="Checkpoint directory"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum number of results"),
) -> None:
    """List checkpoints in a directory.

    Example:
        market-sim checkpoint list checkpoints/ --limit 10
    """
    checkpoints = CheckpointManager(directory).list_checkpoints(limit=limit)
    if not checkpoints:
        console.print("[yellow]No checkpoints found[/yellow]")
        return

    table = Table(title=f"Simulation Checkpoints ({len(checkpoints)} found)")
    table.add_column("Checkpoint ID", style="cyan", no_wrap=True)
    table.add_column("Day", justify="right", style="yellow")
    table.add_column("Created", style="blue")
    table.add_column("Description", style="white", overflow="fold")

    for cp in checkpoints:
        table.add_row(
            cp.checkpoint_id[:8] + "...",
            str(cp.day),
            cp.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            cp.description[:40] if cp.description else "-",
        )
    console.print(table)


# =============================================================================
# Delete Command
# =============================================================================


@checkpoint_app.command(name="delete")
def delete_checkpoint(
    checkpoint_id: str = typer.Argument(..., help="Checkpoint ID to delete"),
    directory: Path = typer.Option(Path("checkpoints"), "--dir", help="Checkpoint directory"),
    confirm: bool = typer.Option(False, "--confirm", "-y", help="Skip confirmation prompt"),
) -> None:
    """Delete a checkpoint.

    Example:
        market-sim checkpoint delete 3f2a9c... --dir checkpoints/ --confirm
    """
    if not confirm and not typer.confirm(f"Delete checkpoint {checkpoint_id}?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    if CheckpointManager(directory).delete_checkpoint(checkpoint_id):
        console.print(f"[green]✓ Checkpoint {checkpoint_id} deleted[/green]")
    else:
        console.print(f"[yellow]Checkpoint {checkpoint_id} not found (may have been already deleted)[/yellow]")
