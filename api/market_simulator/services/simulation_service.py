"""Service layer for simulation management.

This module provides the SimulationService class which encapsulates
all logic for creating, managing, and advancing hosted simulations.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np

from market_simulator.config import ScenarioEvent, SimulationConfig, ValidationError
from market_simulator.engine import (
    HUMAN_INVESTOR_ID,
    Collaborators,
    DayReport,
    SimulationState,
    advance,
    initialize,
    inject_scenario_event,
    player_buy,
    player_sell,
)
from market_simulator.persistence import CheckpointManager, CheckpointRecord
from market_simulator.sampling import SeedManager


class SimulationNotFoundError(Exception):
    """Raised when a simulation cannot be found."""

    def __init__(self, simulation_id: str) -> None:
        self.simulation_id = simulation_id
        super().__init__(f"Simulation not found: {simulation_id}")


class SimulationAdvanceError(Exception):
    """Raised when advancing a simulation fails; its stored state is unchanged."""

    def __init__(self, simulation_id: str, cause: Exception) -> None:
        self.simulation_id = simulation_id
        super().__init__(f"Failed to advance simulation {simulation_id}: {cause}")


@dataclass
class _HostedSimulation:
    state: SimulationState
    rng: np.random.Generator
    collaborators: Collaborators
    lock: threading.Lock = field(default_factory=threading.Lock)


class SimulationService:
    """Service for managing simulation lifecycle.

    This service handles:
    - Simulation creation from configuration
    - State retrieval and queries
    - Time advancement, one lock per simulation
    - Player trades and scenario injection
    - Checkpoint save and restore

    A failed advance leaves the stored state and generator as they were, so
    the host can simply retry on its next tick.
    """

    def __init__(self, checkpoint_manager: CheckpointManager | None = None) -> None:
        """Initialize the simulation service.

        Args:
            checkpoint_manager: Optional checkpoint store for save/load
        """
        self._simulations: dict[str, _HostedSimulation] = {}
        self._checkpoint_manager = checkpoint_manager

    @property
    def checkpoint_manager(self) -> CheckpointManager | None:
        """Get the checkpoint manager."""
        return self._checkpoint_manager

    @checkpoint_manager.setter
    def checkpoint_manager(self, value: CheckpointManager | None) -> None:
        """Set the checkpoint manager."""
        self._checkpoint_manager = value

    def _hosted(self, sim_id: str) -> _HostedSimulation:
        if sim_id not in self._simulations:
            raise SimulationNotFoundError(sim_id)
        return self._simulations[sim_id]

    def create_simulation(
        self, config: SimulationConfig | dict[str, Any]
    ) -> tuple[str, SimulationState]:
        """Create a new simulation from configuration.

        Args:
            config: Validated config or a raw configuration dictionary

        Returns:
            Tuple of (simulation_id, initial state)

        Raises:
            ValueError: If configuration is invalid
        """
        if not isinstance(config, SimulationConfig):
            try:
                config = SimulationConfig.from_dict(config)
            except ValidationError as e:
                raise ValueError(f"Invalid configuration: {e}") from e

        seeds = SeedManager(config.simulation.rng_seed)
        state = initialize(config, seeds.initialize_rng())
        return self._register(state, seeds.advance_rng(), Collaborators()), state

    def _register(
        self, state: SimulationState, rng: np.random.Generator, collaborators: Collaborators
    ) -> str:
        sim_id = str(uuid.uuid4())
        self._simulations[sim_id] = _HostedSimulation(state, rng, collaborators)
        return sim_id

    def get_simulation(self, sim_id: str) -> SimulationState:
        """Get the current state of a simulation.

        Raises:
            SimulationNotFoundError: If simulation doesn't exist
        """
        return self._hosted(sim_id).state

    def get_state(self, sim_id: str) -> dict[str, Any]:
        """Get a summary of a simulation.

        Returns:
            Dictionary containing:
            - simulation_id: The simulation ID
            - current_day: Last completed day
            - time: Simulated clock, ISO formatted
            - market_index: Latest market index value
            - active_companies: Companies still listed
            - active_event: Name of today's active event, if any
            - human_cash: Cash held by the human player

        Raises:
            SimulationNotFoundError: If simulation doesn't exist
        """
        state = self.get_simulation(sim_id)
        human = state.investor(HUMAN_INVESTOR_ID)
        return {
            "simulation_id": sim_id,
            "current_day": state.day,
            "time": state.time.isoformat(),
            "market_index": state.market_index,
            "active_companies": len(state.active_companies()),
            "active_event": state.active_event.name if state.active_event else None,
            "human_cash": human.cash if human else None,
        }

    def list_simulations(self) -> list[dict[str, Any]]:
        """List all hosted simulations with their current day."""
        return [
            {"simulation_id": sim_id, "current_day": hosted.state.day}
            for sim_id, hosted in self._simulations.items()
        ]

    def delete_simulation(self, sim_id: str) -> None:
        """Delete a simulation.

        This operation is idempotent - deleting a non-existent
        simulation does not raise an error.
        """
        self._simulations.pop(sim_id, None)

    def has_simulation(self, sim_id: str) -> bool:
        """Check if a simulation exists."""
        return sim_id in self._simulations

    def clear_all(self) -> None:
        """Clear all simulations. Used for testing cleanup."""
        self._simulations.clear()

    # =========================================================================
    # State updates
    # =========================================================================

    def advance(
        self,
        sim_id: str,
        seconds: float,
        on_day_complete: Callable[[DayReport], None] | None = None,
        should_stop: Callable[[], bool] | None = None,
    ) -> list[DayReport]:
        """Advance a simulation by ``seconds`` of simulated time.

        Returns:
            Reports for every day closed during the advance

        Raises:
            SimulationNotFoundError: If simulation doesn't exist
            SimulationAdvanceError: If the advance fails
        """
        hosted = self._hosted(sim_id)
        reports: list[DayReport] = []

        def collect(report: DayReport) -> None:
            reports.append(report)
            if on_day_complete is not None:
                on_day_complete(report)

        with hosted.lock:
            rng_state = hosted.rng.bit_generator.state
            try:
                hosted.state = advance(
                    hosted.state,
                    seconds,
                    hosted.rng,
                    hosted.collaborators,
                    on_day_complete=collect,
                    should_stop=should_stop,
                )
            except Exception as e:
                hosted.rng.bit_generator.state = rng_state
                raise SimulationAdvanceError(sim_id, e) from e
        return reports

    def buy(self, sim_id: str, symbol: str, shares: int, investor_id: str = HUMAN_INVESTOR_ID) -> bool:
        """Place a player buy order.

        Returns:
            True if the order was executed, False if it was rejected
        """
        hosted = self._hosted(sim_id)
        with hosted.lock:
            updated = player_buy(hosted.state, investor_id, symbol, shares)
            accepted = updated is not hosted.state
            hosted.state = updated
        return accepted

    def sell(self, sim_id: str, symbol: str, shares: int, investor_id: str = HUMAN_INVESTOR_ID) -> bool:
        """Place a player sell order.

        Returns:
            True if the order was executed, False if it was rejected
        """
        hosted = self._hosted(sim_id)
        with hosted.lock:
            updated = player_sell(hosted.state, investor_id, symbol, shares)
            accepted = updated is not hosted.state
            hosted.state = updated
        return accepted

    def schedule_event(self, sim_id: str, event: ScenarioEvent) -> None:
        """Schedule a scenario event for a simulation.

        Raises:
            ValueError: If the event targets an unknown company
        """
        hosted = self._hosted(sim_id)
        with hosted.lock:
            hosted.state = inject_scenario_event(hosted.state, event)

    # =========================================================================
    # Checkpoints
    # =========================================================================

    def _require_checkpoints(self) -> CheckpointManager:
        if self._checkpoint_manager is None:
            raise RuntimeError("No checkpoint manager configured")
        return self._checkpoint_manager

    def save_checkpoint(self, sim_id: str, description: str | None = None) -> CheckpointRecord:
        """Save a simulation's state and generator to the checkpoint store."""
        manager = self._require_checkpoints()
        hosted = self._hosted(sim_id)
        with hosted.lock:
            return manager.save_checkpoint(hosted.state, description, hosted.rng)

    def load_checkpoint(self, checkpoint: str | Path) -> str:
        """Host a new simulation restored from a checkpoint.

        Returns:
            ID of the restored simulation
        """
        state, rng = self._require_checkpoints().load_checkpoint(checkpoint)
        seeds = SeedManager(state.config.simulation.rng_seed)
        if rng is None:
            rng = seeds.rng_for("advance", "resume", state.day)
        return self._register(state, rng, Collaborators())
