"""Host-driven state updates: player trades and scenario injection.

Each function returns a new state and never mutates its input. Player
requests that cannot be honoured are rejected quietly by returning the input
state unchanged.
"""

from __future__ import annotations

import logging

from market_simulator.config.schemas import CompanyShockEvent, ScenarioEvent, StockSplitEvent
from market_simulator.engine.indicators import compute_indicators
from market_simulator.engine.models import Company, Investor, SimulationState
from market_simulator.engine.portfolio import buy_shares, sell_shares, shares_owned

logger = logging.getLogger(__name__)


def _resolve(
    state: SimulationState, investor_id: str, symbol: str, shares: int
) -> tuple[Investor, Company] | None:
    if not isinstance(shares, int) or shares <= 0:
        logger.debug("Rejected player order: invalid share count %r", shares)
        return None
    investor = state.investor(investor_id)
    if investor is None or not investor.is_human:
        logger.debug("Rejected player order: %s is not a human investor", investor_id)
        return None
    company = state.company(symbol)
    if company is None or not company.is_tradable:
        logger.debug("Rejected player order: %s is not tradable", symbol)
        return None
    return investor, company


def player_buy(state: SimulationState, investor_id: str, symbol: str, shares: int) -> SimulationState:
    """Buy ``shares`` of ``symbol`` at the running close for the human investor."""
    resolved = _resolve(state, investor_id, symbol, shares)
    if resolved is None:
        return state
    investor, company = resolved
    if shares * company.last_close > investor.cash:
        logger.debug(
            "Rejected player buy: %d %s costs more than %.2f cash", shares, symbol, investor.cash
        )
        return state

    updated = state.model_copy(deep=True)
    company = updated.company(symbol)
    buy_shares(
        updated.investor(investor_id),
        symbol,
        shares,
        company.last_close,
        updated.time,
        compute_indicators(company.price_history),
    )
    return updated


def player_sell(state: SimulationState, investor_id: str, symbol: str, shares: int) -> SimulationState:
    """Sell ``shares`` of ``symbol`` oldest lots first for the human investor."""
    resolved = _resolve(state, investor_id, symbol, shares)
    if resolved is None:
        return state
    investor, _ = resolved
    owned = shares_owned(investor, symbol)
    if shares > owned:
        logger.debug("Rejected player sell: %d %s requested, %d held", shares, symbol, owned)
        return state

    updated = state.model_copy(deep=True)
    sell_shares(
        updated.investor(investor_id),
        symbol,
        shares,
        updated.company(symbol).last_close,
        updated.time,
        updated.config.trading.long_term_holding_days,
    )
    return updated


def inject_scenario_event(state: SimulationState, event: ScenarioEvent) -> SimulationState:
    """Schedule a scenario event on a copy of ``state``.

    Raises:
        ValueError: If the event targets an unknown company.
    """
    if isinstance(event, (StockSplitEvent, CompanyShockEvent)) and state.company(event.symbol) is None:
        raise ValueError(f"Scenario event targets unknown company: {event.symbol}")
    updated = state.model_copy(deep=True)
    updated.config.scenario_events.append(event)
    logger.info("Scheduled %s scenario event", event.type)
    return updated
