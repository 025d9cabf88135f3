"""Closed-loop stock market simulator with learning investors."""
from .config import SimulationConfig, load_config
from .engine import (
    Collaborators,
    DayReport,
    SimulationState,
    advance,
    initialize,
    inject_scenario_event,
    player_buy,
    player_sell,
)
from .sampling import SeedManager, make_rng

__version__ = "0.1.0"

__all__ = [
    "Collaborators",
    "DayReport",
    "SeedManager",
    "SimulationConfig",
    "SimulationState",
    "advance",
    "initialize",
    "inject_scenario_event",
    "load_config",
    "make_rng",
    "player_buy",
    "player_sell",
]
