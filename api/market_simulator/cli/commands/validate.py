"""CLI command for validating simulation configuration files."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table
from typing_extensions import Annotated

from market_simulator.cli.output import console, log_error, log_success, output_json
from market_simulator.config import load_config


def validate_config(
    config_file: Annotated[
        Path,
        typer.Argument(help="Path to the YAML configuration to validate"),
    ],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the normalized configuration as JSON"),
    ] = False,
) -> None:
    """Validate a simulation configuration file.

    Examples:

        # Basic validation
        market-sim validate configs/small_market.yaml

        # Show the configuration with every default filled in
        market-sim validate configs/small_market.yaml --json
    """
    try:
        config = load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        log_error(str(e))
        raise typer.Exit(1)

    log_success(f"{config_file} is a valid configuration")

    if json_output:
        output_json(config.model_dump(mode="json"))
        return

    table = Table(title="Configuration Summary")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Seed", str(config.simulation.rng_seed))
    table.add_row("Days", str(config.simulation.num_days))
    table.add_row("Companies", str(len(config.companies)))
    table.add_row("Population", f"{config.population.mode} ({config.population.ai_investors} AI)")
    table.add_row("Macro events", str(len(config.macro_events)))
    table.add_row("Scenario events", str(len(config.scenario_events)))
    console.print(table)
