"""Run command - Execute simulations from config files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
from typing_extensions import Annotated

from market_simulator.cli.execution.stats import SimulationStats
from market_simulator.cli.output import (
    configure_logging,
    create_progress,
    log_day_summary,
    log_error,
    log_info,
    log_success,
    log_warning,
    output_json,
)
from market_simulator.config import SimulationConfig, load_config
from market_simulator.engine import (
    Collaborators,
    DayReport,
    SimulationState,
    advance,
    initialize,
)
from market_simulator.engine.advancer import SECONDS_PER_DAY
from market_simulator.engine.portfolio import portfolio_value
from market_simulator.persistence import CheckpointManager
from market_simulator.sampling import SeedManager


def _with_seed(config: SimulationConfig, seed: int) -> SimulationConfig:
    simulation = config.simulation.model_copy(update={"rng_seed": seed})
    return config.model_copy(update={"simulation": simulation})


def summarize(state: SimulationState, stats: SimulationStats, top: int = 5) -> dict[str, Any]:
    """Build the JSON summary printed at the end of a run."""
    prices = {c.symbol: c.last_close for c in state.companies if c.price_history}
    ranked = sorted(
        (
            {
                "id": investor.id,
                "name": investor.name,
                "strategy": investor.strategy_name,
                "value": round(portfolio_value(investor, prices), 2),
            }
            for investor in state.investors
        ),
        key=lambda row: row["value"],
        reverse=True,
    )
    return {
        "final_day": state.day,
        "time": state.time.isoformat(),
        "market_index": state.market_index,
        "active_companies": len(state.active_companies()),
        "delisted_companies": [c.symbol for c in state.companies if c.is_delisted],
        "statistics": stats.to_dict(),
        "top_investors": ranked[:top],
    }


def run_simulation(
    config: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Configuration file (YAML)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    days: Annotated[
        Optional[int],
        typer.Option("--days", "-d", help="Override number of days to run", min=1),
    ] = None,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", "-s", help="Override RNG seed"),
    ] = None,
    save: Annotated[
        Optional[Path],
        typer.Option("--save", help="Directory to write a checkpoint to after the run"),
    ] = None,
    resume: Annotated[
        Optional[Path],
        typer.Option(
            "--resume",
            help="Checkpoint file to resume from instead of initializing",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    top: Annotated[
        int,
        typer.Option("--top", help="Number of leading investors in the summary", min=0),
    ] = 5,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress logs (stdout only)"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose mode: show a line per simulated day"),
    ] = False,
) -> None:
    """Run a market simulation.

    Examples:

        # Basic run with JSON output
        market-sim run --config market.yaml

        # Override parameters
        market-sim run --config market.yaml --seed 999 --days 60

        # Save a checkpoint, then continue from it later
        market-sim run --config market.yaml --save checkpoints/
        market-sim run --resume checkpoints/<id>.json --days 30
    """
    configure_logging(verbose=verbose, quiet=quiet)

    if config is None and resume is None:
        log_error("Either --config or --resume is required")
        raise typer.Exit(1)

    try:
        if resume is not None:
            log_info(f"Resuming from checkpoint {resume}", quiet)
            state, rng = CheckpointManager(resume.parent).load_checkpoint(resume)
            seeds = SeedManager(state.config.simulation.rng_seed)
            if seed is not None:
                log_warning("--seed is ignored when resuming from a checkpoint", quiet)
            if rng is None:
                log_warning("Checkpoint has no generator state, deriving one from the seed", quiet)
                rng = seeds.rng_for("advance", "resume", state.day)
        else:
            log_info(f"Loading configuration from {config}", quiet)
            sim_config = load_config(config)
            if seed is not None:
                sim_config = _with_seed(sim_config, seed)
                log_info(f"Overriding seed: {seed}", quiet)
            seeds = SeedManager(sim_config.simulation.rng_seed)
            state = initialize(sim_config, seeds.initialize_rng())
            rng = seeds.advance_rng()
    except (FileNotFoundError, ValueError) as e:
        log_error(str(e))
        raise typer.Exit(1)

    num_days = days if days is not None else state.config.simulation.num_days
    collaborators = Collaborators()
    stats = SimulationStats()
    log_info(
        f"Simulating {num_days} days with {len(state.companies)} companies "
        f"and {len(state.investors)} investors",
        quiet,
    )

    if quiet or verbose:
        def on_day(report: DayReport) -> None:
            stats.update(report)
            if verbose:
                log_day_summary(report)

        state = advance(state, num_days * SECONDS_PER_DAY, rng, collaborators, on_day_complete=on_day)
    else:
        with create_progress() as progress:
            task = progress.add_task("Simulating...", total=num_days)

            def on_day(report: DayReport) -> None:
                stats.update(report)
                progress.advance(task)

            state = advance(state, num_days * SECONDS_PER_DAY, rng, collaborators, on_day_complete=on_day)

    log_success(f"Simulation reached day {state.day}", quiet)

    if save is not None:
        record = CheckpointManager(save).save_checkpoint(state, f"Day {state.day}", rng)
        log_success(f"Checkpoint saved to {record.path}", quiet)

    output_json(summarize(state, stats, top))
