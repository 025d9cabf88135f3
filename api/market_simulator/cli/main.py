"""Market Simulator CLI - Main entry point."""

import typer
from typing_extensions import Annotated

from market_simulator import __version__

app = typer.Typer(
    name="market-sim",
    help="Market Simulator - Closed-loop stock market with learning investors",
    add_completion=True,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from market_simulator.cli.output import console
        console.print(f"[bold]Market Simulator[/bold] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Market Simulator CLI - JSON on stdout, logs on stderr."""
    pass


# Import commands after app is defined to avoid circular imports
from market_simulator.cli.commands.checkpoint import checkpoint_app
from market_simulator.cli.commands.run import run_simulation
from market_simulator.cli.commands.validate import validate_config

app.command(name="run", help="Run a simulation from a configuration file")(run_simulation)
app.command(name="validate", help="Validate a simulation configuration file")(validate_config)
app.add_typer(checkpoint_app, name="checkpoint")


if __name__ == "__main__":
    app()
