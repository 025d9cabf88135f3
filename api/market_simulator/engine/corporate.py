"""Corporate actions, company news and scheduled company shocks."""

from __future__ import annotations

import logging
import math

import numpy as np

from market_simulator.config.catalog import CORPORATE_NEURONS
from market_simulator.config.schemas import (
    CompanyShockEvent,
    CorporateEventConfig,
    SimulationConfig,
    StockSplitEvent,
)
from market_simulator.engine.events import publish_event, schedule_is_due
from market_simulator.engine.indicators import compute_corporate_indicators, mean_impact, vectorize
from market_simulator.engine.ledger import DeferredOutcomeLedger
from market_simulator.engine.models import (
    Company,
    CorporateAction,
    CorporateActionDecision,
    Event,
    SimulationState,
)
from market_simulator.engine.network import feed_forward
from market_simulator.engine.news import Collaborators

logger = logging.getLogger(__name__)


def apply_split(company: Company, ratio: int) -> None:
    """Split a company's stock, rescaling its whole price history.

    Market capitalisation is unchanged: shares outstanding grow by ``ratio``
    while every OHLC value and eps shrink by it.
    """
    if ratio < 2:
        raise ValueError(f"Split ratio must be at least 2, got {ratio}")
    company.shares_outstanding *= ratio
    company.eps /= ratio
    for point in company.price_history:
        point.open /= ratio
        point.high /= ratio
        point.low /= ratio
        point.close /= ratio


def feature_event(state: SimulationState, event: Event) -> None:
    """Promote a company event to the day's active event when it is large enough.

    A macro event already active for the day always keeps the slot.
    """
    if state.active_event is not None or event.impact is None:
        return
    if abs(mean_impact(event.impact) - 1.0) > state.config.simulation.featured_threshold:
        state.active_event = event


def _event_pool(config: SimulationConfig, sector: str, kind: str) -> list[CorporateEventConfig]:
    pool = config.corporate_events.get(sector)
    if pool is not None and getattr(pool, kind):
        return list(getattr(pool, kind))
    # Sectors without their own pool draw from every sector's events.
    return [e for p in config.corporate_events.values() for e in getattr(p, kind)]


def _multiply(multipliers: dict[str, float], symbol: str, factor: float) -> None:
    multipliers[symbol] = multipliers.get(symbol, 1.0) * factor


def run_scheduled_company_events(
    state: SimulationState,
    collaborators: Collaborators,
    multipliers: dict[str, float],
) -> list[str]:
    """Execute scenario splits and company shocks due today.

    Scheduled events are unconditional and never enter the corporate ledger.
    """
    next_day = state.day + 1
    executed: list[str] = []
    for scenario in state.config.scenario_events:
        if not isinstance(scenario, (StockSplitEvent, CompanyShockEvent)):
            continue
        if not schedule_is_due(scenario.schedule, next_day):
            continue
        company = state.company(scenario.symbol)
        if company is None or not company.is_tradable:
            logger.warning(
                "Day %d: skipping scheduled %s for unavailable company %s",
                next_day, scenario.type, scenario.symbol,
            )
            continue

        match scenario:
            case StockSplitEvent(ratio=ratio):
                apply_split(company, ratio)
                publish_event(
                    state,
                    collaborators,
                    keywords=(company.sector, company.name, "split"),
                    subject_symbol=company.symbol,
                    subject_name=company.name,
                    name=f"Announces {ratio}-for-1 Stock Split",
                    description=f"The board has approved a {ratio}-for-1 stock split.",
                    kind="split",
                    split_ratio=ratio,
                )
                executed.append(f"split:{company.symbol}")
            case CompanyShockEvent(impact=impact):
                _multiply(multipliers, company.symbol, impact)
                event = publish_event(
                    state,
                    collaborators,
                    keywords=(company.sector, company.name, scenario.kind),
                    subject_symbol=company.symbol,
                    subject_name=company.name,
                    name=scenario.name,
                    description=scenario.description,
                    kind=scenario.kind,
                    impact=impact,
                )
                feature_event(state, event)
                executed.append(f"shock:{company.symbol}")
        logger.debug("Day %d: executed scheduled %s for %s", next_day, scenario.type, company.symbol)
    return executed


def _try_actions(
    state: SimulationState,
    company: Company,
    rng: np.random.Generator,
    collaborators: Collaborators,
    multipliers: dict[str, float],
    vector: np.ndarray,
) -> tuple[CorporateAction, int] | None:
    """Score the corporate networks in order and execute the first action that fires."""
    settings = state.config.corporate
    floor = state.config.simulation.min_price
    ai = company.corporate_ai
    price = company.last_close

    split_score = float(feed_forward(ai.split_network, vector)[0])
    if split_score > settings.split_threshold and price > settings.min_split_price:
        ratio = max(2, math.floor(price / 100))
        apply_split(company, ratio)
        publish_event(
            state,
            collaborators,
            keywords=(company.sector, company.name, "split"),
            subject_symbol=company.symbol,
            subject_name=company.name,
            name=f"Announces {ratio}-for-1 Stock Split",
            description=f"The board has approved a {ratio}-for-1 stock split.",
            kind="split",
            split_ratio=ratio,
        )
        return "split", settings.split_horizon

    peers = [
        c for c in state.companies
        if c.sector == company.sector and c.symbol != company.symbol and c.is_tradable
    ]

    alliance_score = float(feed_forward(ai.alliance_network, vector)[0])
    if alliance_score > settings.alliance_threshold and peers:
        partner = peers[int(rng.integers(len(peers)))]
        _multiply(multipliers, company.symbol, settings.alliance_bump)
        _multiply(multipliers, partner.symbol, settings.alliance_bump)
        event = publish_event(
            state,
            collaborators,
            keywords=(company.sector, "alliance", partner.name),
            subject_symbol=company.symbol,
            subject_name=company.name,
            name=f"Forms Alliance with {partner.name}",
            description="A strategic alliance to collaborate on new technologies.",
            kind="alliance",
            impact=settings.alliance_bump,
            partner_symbol=partner.symbol,
        )
        feature_event(state, event)
        return "alliance", settings.alliance_horizon

    acquisition_score = float(feed_forward(ai.acquisition_network, vector)[0])
    if acquisition_score > settings.acquisition_threshold:
        ceiling = company.market_cap * settings.max_target_cap_ratio
        targets = [c for c in peers if c.market_cap < ceiling]
        if targets:
            target = targets[int(rng.integers(len(targets)))]
            _multiply(multipliers, company.symbol, settings.acquirer_bump)
            # The target leaves the price pass once delisted, so its premium lands now.
            target.scale_close(settings.target_bump, floor)
            target.is_delisted = True
            event = publish_event(
                state,
                collaborators,
                keywords=(company.sector, "acquisition", target.name),
                subject_symbol=company.symbol,
                subject_name=company.name,
                name=f"Acquires {target.name}",
                description="An acquisition to consolidate market share.",
                kind="merger",
                impact=settings.acquirer_bump,
                acquired_symbol=target.symbol,
            )
            feature_event(state, event)
            return "acquisition", settings.acquisition_horizon

    return None


def _company_news(
    state: SimulationState,
    company: Company,
    rng: np.random.Generator,
    collaborators: Collaborators,
    multipliers: dict[str, float],
) -> Event | None:
    settings = state.config.corporate
    if rng.random() < settings.neutral_event_share:
        kind = "neutral"
    else:
        kind = ("positive", "negative")[int(rng.integers(2))]
    pool = _event_pool(state.config, company.sector, kind)
    if not pool:
        return None
    template = pool[int(rng.integers(len(pool)))]

    event = publish_event(
        state,
        collaborators,
        keywords=(company.sector, company.name, template.kind),
        subject_symbol=company.symbol,
        subject_name=company.name,
        name=template.name,
        description=template.description,
        kind=template.kind,
        impact=template.impact,
    )
    if template.impact is not None:
        _multiply(multipliers, company.symbol, template.impact)
        feature_event(state, event)
    return event


def run_corporate_step(
    state: SimulationState,
    rng: np.random.Generator,
    collaborators: Collaborators,
    multipliers: dict[str, float],
) -> list[str]:
    """Let every eligible company's corporate AI act, then draw company news.

    Price effects that belong to the day's price pass are accumulated into
    ``multipliers`` (symbol to factor).

    Returns:
        ``"<action>:<symbol>"`` for every action executed today.
    """
    next_day = state.day + 1
    settings = state.config.corporate
    latest_event = state.event_history[0] if state.event_history else None
    ledger = DeferredOutcomeLedger(state.corporate_actions)

    executed = run_scheduled_company_events(state, collaborators, multipliers)

    for company in state.companies:
        # Targets acquired earlier in this pass are skipped here.
        if not company.is_tradable:
            continue

        taken = None
        ai = company.corporate_ai
        if next_day >= ai.next_action_day:
            indicators = compute_corporate_indicators(
                company, state.companies, state.market_index_history, latest_event
            )
            vector = vectorize(indicators, CORPORATE_NEURONS)
            taken = _try_actions(state, company, rng, collaborators, multipliers, vector)
            if taken is not None:
                action, horizon = taken
                ledger.record(
                    CorporateActionDecision(
                        created_day=next_day,
                        evaluation_day=next_day + horizon,
                        reference_value=company.last_close,
                        features=vector.tolist(),
                        symbol=company.symbol,
                        action=action,
                        reference_market_index=state.market_index,
                    )
                )
                ai.next_action_day = (
                    next_day
                    + settings.min_action_interval
                    + int(rng.integers(settings.action_interval_range))
                )
                executed.append(f"{action}:{company.symbol}")
                logger.debug("Day %d: %s took corporate action %s", next_day, company.symbol, action)

        if taken is None and rng.random() < settings.cosmetic_event_probability:
            _company_news(state, company, rng, collaborators, multipliers)

    return executed
