"""
Pytest configuration and shared fixtures.

Provides small market configurations that initialize and advance quickly:
a handful of companies, a short seed history and a tiny investor population.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

SMALL_MARKET: dict[str, Any] = {
    "simulation": {
        "rng_seed": 7,
        "num_days": 5,
        "initial_history_length": 60,
        "history_margin": 20,
    },
    "companies": [
        {"symbol": "ACME", "name": "Acme Robotics", "sector": "Technology", "region": "North America"},
        {"symbol": "BYTE", "name": "Byte Systems", "sector": "Technology", "region": "North America"},
        {"symbol": "CURE", "name": "Cure Labs", "sector": "Health", "region": "Europe"},
        {"symbol": "VOLT", "name": "Volt Power", "sector": "Energy", "region": "Asia"},
    ],
    "population": {
        "ai_investors": 12,
        "chaos_agents": 2,
        "advanced_traders": 2,
        "elite_traders": 1,
        "master_traders": 1,
        "include_oracle": False,
        "ai_cash": 10_000,
    },
}


@pytest.fixture
def small_config_dict() -> dict[str, Any]:
    """A fresh copy of the small market configuration."""
    return copy.deepcopy(SMALL_MARKET)


@pytest.fixture
def small_config(small_config_dict):
    """Validated small market configuration."""
    from market_simulator.config import SimulationConfig

    return SimulationConfig.from_dict(small_config_dict)


@pytest.fixture
def quiet_config_dict(small_config_dict) -> dict[str, Any]:
    """Small market with no spontaneous events.

    Macro events, corporate actions and company news are all pushed out of
    reach so that only scheduled scenario events move prices beyond drift.
    """
    small_config_dict["news_picker"] = {"enabled": False}
    small_config_dict["corporate"] = {
        "cosmetic_event_probability": 0.0,
        "min_action_interval": 10_000,
    }
    return small_config_dict


@pytest.fixture
def rng():
    """Seeded generator for tests that draw randomness."""
    from market_simulator.sampling import make_rng

    return make_rng(123)


@pytest.fixture
def state(small_config):
    """Initialized small market."""
    from market_simulator.engine import initialize
    from market_simulator.sampling import make_rng

    return initialize(small_config, make_rng(1))


@pytest.fixture
def write_config(tmp_path) -> Callable[[dict[str, Any]], Path]:
    """Write a configuration dict to a YAML file and return its path."""

    def _write(config: dict[str, Any], name: str = "market.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(config))
        return path

    return _write
