"""Services for hosting Market Simulator runs."""

from .simulation_service import (
    SimulationAdvanceError,
    SimulationNotFoundError,
    SimulationService,
)

__all__ = [
    "SimulationAdvanceError",
    "SimulationNotFoundError",
    "SimulationService",
]
