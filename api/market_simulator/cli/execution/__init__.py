"""Simulation execution helpers for the CLI."""

from .stats import SimulationStats

__all__ = ["SimulationStats"]
