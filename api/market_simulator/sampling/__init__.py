"""Seeded randomness for reproducible runs."""
from .seed_manager import SeedManager, make_rng

__all__ = ["SeedManager", "make_rng"]
