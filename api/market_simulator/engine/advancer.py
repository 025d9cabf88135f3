"""Continuous-time advancement.

Between day boundaries each listed company's running close follows a random
walk whose scale grows with the square root of the elapsed time. Crossing a
UTC midnight fires the daily transition.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import datetime, timedelta

import numpy as np

from market_simulator.engine.models import SimulationState
from market_simulator.engine.news import Collaborators
from market_simulator.engine.transition import DayReport, run_daily_transition

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400


def next_midnight(time: datetime) -> datetime:
    """The first UTC midnight strictly after ``time``."""
    return (time + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)


def diffuse_prices(state: SimulationState, seconds: float, rng: np.random.Generator) -> None:
    """Move every listed running close by one intraday random-walk step."""
    settings = state.config.simulation
    volatility = math.sqrt(seconds) * settings.intraday_volatility / math.sqrt(SECONDS_PER_DAY)
    for company in state.companies:
        if not company.is_tradable:
            continue
        company.scale_close(1.0 + (rng.random() - 0.5) * volatility, settings.min_price)


def advance(
    state: SimulationState,
    seconds: float,
    rng: np.random.Generator,
    collaborators: Collaborators | None = None,
    on_day_complete: Callable[[DayReport], None] | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> SimulationState:
    """Advance simulated time by ``seconds``.

    Works on a deep copy: the input state is never modified, so an exception
    part-way through leaves the caller's state as it was.

    Args:
        state: State to advance from.
        seconds: Simulated seconds to elapse.
        rng: Simulation generator.
        collaborators: Article writer and image lookup.
        on_day_complete: Called with each day's report right after its
            transition.
        should_stop: Polled after each transition; returning True ends the
            advance early, at that day boundary.

    Returns:
        The advanced state.

    Raises:
        ValueError: If seconds is negative.
    """
    if seconds < 0:
        raise ValueError(f"Cannot advance by a negative duration: {seconds}")
    if collaborators is None:
        collaborators = Collaborators()

    state = state.model_copy(deep=True)
    end = state.time + timedelta(seconds=seconds)

    while state.time < end:
        boundary = next_midnight(state.time)
        step_end = min(end, boundary)
        diffuse_prices(state, (step_end - state.time).total_seconds(), rng)
        state.time = step_end

        if state.time >= boundary:
            report = run_daily_transition(state, rng, collaborators)
            if on_day_complete is not None:
                on_day_complete(report)
            if should_stop is not None and should_stop():
                logger.info("Advance stopped after day %d", state.day)
                break

    return state
