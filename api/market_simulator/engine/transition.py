"""End-of-day transition.

``run_daily_transition`` closes the in-progress day. Steps run in a fixed
order, and each one only sees the effects of the steps before it:

1. Clear yesterday's active event
2. Settle matured decisions (corporate, news picker, articles, trades)
3. Macro event
4. Corporate actions and company news
5. Price update
6. Investor trading
7. Day close (volumes, snapshots, index, taxes, next bar, trimming)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field

import numpy as np

from market_simulator.config.catalog import INDICATOR_NEURONS
from market_simulator.engine.corporate import run_corporate_step
from market_simulator.engine.events import generate_macro_event, resolve_impact
from market_simulator.engine.indicators import compute_indicators, vectorize
from market_simulator.engine.ledger import DeferredOutcomeLedger, realized_return, squash_outcome
from market_simulator.engine.models import (
    ArticleDecision,
    Company,
    CorporateActionDecision,
    HyperComplexStrategy,
    NewsCategoryDecision,
    PricePoint,
    SimulationState,
    TradeDecision,
    ValuePoint,
)
from market_simulator.engine.network import backpropagate, backpropagate_slot
from market_simulator.engine.news import Collaborators
from market_simulator.engine.portfolio import (
    buy_shares,
    portfolio_value,
    sell_shares,
    settle_annual_tax,
    shares_owned,
)
from market_simulator.engine.strategies import decide, is_trading_day, learns

logger = logging.getLogger(__name__)


@dataclass
class DayReport:
    """What happened during one daily transition."""

    day: int
    active_event: str | None = None
    new_events: int = 0
    corporate_actions: list[str] = field(default_factory=list)
    trades: int = 0
    shares_traded: int = 0
    trades_settled: int = 0
    corporate_settled: int = 0
    news_settled: int = 0
    articles_settled: int = 0
    taxes_collected: float = 0.0
    market_index: float = 0.0

    @property
    def learning_steps(self) -> int:
        """Settled decisions that produced a training signal."""
        return self.trades_settled + self.corporate_settled + self.news_settled


# ============================================================================
# Settlement
# ============================================================================

def _settle_corporate(state: SimulationState, day: int, companies: dict[str, Company]) -> int:
    gain = state.config.corporate.outcome_gain

    def evaluate(decision: CorporateActionDecision) -> None:
        company = companies.get(decision.symbol)
        if company is None or company.is_delisted:
            logger.warning("Day %d: dropping %s outcome for %s", day, decision.action, decision.symbol)
            return
        stock_return = company.last_close / decision.reference_value
        market_return = (
            state.market_index / decision.reference_market_index
            if decision.reference_market_index > 0
            else 0.0
        )
        # Relative to the market when the market return is usable.
        if market_return > 0:
            outcome = stock_return / market_return - 1
        else:
            outcome = stock_return - 1
        ai = company.corporate_ai
        backpropagate(
            ai.network_for(decision.action),
            decision.features,
            [squash_outcome(outcome, gain)],
            ai.learning_rate,
        )

    return DeferredOutcomeLedger(state.corporate_actions).settle(day, evaluate)


def _settle_news(state: SimulationState, day: int) -> int:
    settings = state.config.news_picker
    picker = state.news_picker

    def evaluate(decision: NewsCategoryDecision) -> None:
        if picker is None:
            return
        market = realized_return(state.market_index, decision.reference_value)
        target = squash_outcome(decision.direction * market, settings.outcome_gain)
        backpropagate_slot(
            picker, decision.features, decision.category_index, target, settings.learning_rate
        )

    return DeferredOutcomeLedger(state.news_decisions).settle(day, evaluate)


def _settle_articles(
    state: SimulationState,
    day: int,
    companies: dict[str, Company],
    collaborators: Collaborators,
) -> int:
    gain = state.config.articles.outcome_gain

    def evaluate(decision: ArticleDecision) -> None:
        subject = companies.get(decision.subject_symbol) if decision.subject_symbol else None
        current = subject.last_close if subject else state.market_index
        change = realized_return(current, decision.reference_value)
        collaborators.articles.reinforce(
            decision.trace, squash_outcome(decision.direction * change, gain), state
        )

    return DeferredOutcomeLedger(state.article_decisions).settle(day, evaluate)


def _settle_trades(state: SimulationState, day: int, companies: dict[str, Company]) -> int:
    gain = state.config.trading.outcome_gain
    settled = 0
    for investor in state.investors:
        if investor.is_human or not investor.pending_trades:
            continue
        strategy = investor.strategy

        def evaluate(decision: TradeDecision) -> None:
            company = companies.get(decision.symbol)
            tradable = company is not None and not company.is_delisted
            if not tradable or not isinstance(strategy, HyperComplexStrategy):
                logger.warning(
                    "Day %d: dropping trade outcome for %s on %s",
                    day, decision.investor_id, decision.symbol,
                )
                return
            r = realized_return(company.last_close, decision.reference_value, decision.side)
            backpropagate(
                strategy.network,
                decision.features,
                [squash_outcome(r, gain)],
                strategy.learning_rate,
            )

        settled += DeferredOutcomeLedger(investor.pending_trades).settle(day, evaluate)
    return settled


# ============================================================================
# Prices and trading
# ============================================================================

def _update_prices(state: SimulationState, multipliers: dict[str, float]) -> None:
    settings = state.config.simulation
    event = state.active_event
    for company in state.companies:
        if not company.is_tradable:
            continue
        drag = settings.sector_drag_rates.get(
            company.sector, settings.regional_drag_rates.get(company.region, 0.0)
        )
        factor = 1.0 - drag / 365 + settings.inflation_rate
        if event is not None and event.is_macro:
            factor *= resolve_impact(
                event.impact, event.region, company, settings.spillover_damping
            )
        factor *= multipliers.get(company.symbol, 1.0)
        company.scale_close(factor, settings.min_price)


def _trade(state: SimulationState, rng: np.random.Generator, report: DayReport) -> dict[str, int]:
    """Let every autonomous investor act on every tradable company.

    Returns:
        Shares traded per symbol.
    """
    trading = state.config.trading
    next_day = state.day + 1
    tradable = [c for c in state.companies if c.is_tradable]
    latest_event = state.event_history[0] if state.event_history else None

    by_sector: dict[str, list[Company]] = defaultdict(list)
    by_region: dict[str, list[Company]] = defaultdict(list)
    for company in tradable:
        by_sector[company.sector].append(company)
        by_region[company.region].append(company)

    features = {}
    for company in tradable:
        indicators = compute_indicators(
            company.price_history,
            sector_peers=by_sector[company.sector],
            region_peers=by_region[company.region],
            latest_event=latest_event,
        )
        features[company.symbol] = (indicators, vectorize(indicators, INDICATOR_NEURONS))

    volumes = {c.symbol: 0 for c in tradable}
    for slot, investor in enumerate(state.investors):
        if investor.is_human or not is_trading_day(investor.strategy, next_day, slot):
            continue
        pending = DeferredOutcomeLedger(investor.pending_trades)
        for company in tradable:
            indicators, vector = features[company.symbol]
            price = company.last_close
            order = decide(
                investor.strategy,
                indicators,
                vector,
                price,
                investor.cash,
                shares_owned(investor, company.symbol),
                rng,
                trading,
            )
            if order is None:
                continue

            if order.side == "buy":
                buy_shares(investor, company.symbol, order.shares, price, state.time, indicators)
            else:
                sell_shares(
                    investor, company.symbol, order.shares, price, state.time,
                    trading.long_term_holding_days,
                )
            volumes[company.symbol] += order.shares
            report.trades += 1
            report.shares_traded += order.shares

            if learns(investor.strategy):
                pending.record(
                    TradeDecision(
                        created_day=next_day,
                        evaluation_day=next_day + trading.evaluation_horizon,
                        reference_value=price,
                        features=vector.tolist(),
                        investor_id=investor.id,
                        symbol=company.symbol,
                        side=order.side,
                        shares=order.shares,
                    )
                )
    return volumes


# ============================================================================
# Day close
# ============================================================================

def _close_day(
    state: SimulationState,
    rng: np.random.Generator,
    volumes: dict[str, int],
    report: DayReport,
) -> None:
    config = state.config
    settings = config.simulation
    next_day = state.day + 1

    for company in state.companies:
        if company.is_delisted or not company.price_history:
            continue
        noise = rng.uniform(0, config.trading.noise_volume_max)
        company.price_history[-1].volume = float(round(volumes.get(company.symbol, 0) + noise))

    prices = {c.symbol: c.last_close for c in state.companies if c.price_history}
    for investor in state.investors:
        investor.portfolio_history.append(
            ValuePoint(day=next_day, value=portfolio_value(investor, prices))
        )
        del investor.portfolio_history[:-settings.portfolio_history_limit]

    listed = [c.last_close for c in state.active_companies() if c.price_history]
    index = float(np.mean(listed)) if listed else 0.0
    state.market_index_history.append(ValuePoint(day=next_day, value=index))

    if next_day % config.trading.tax_period_days == 0:
        for investor in state.investors:
            if investor.is_human:
                continue
            regime = config.tax_regimes.get(investor.jurisdiction)
            if regime is None:
                logger.warning("No tax regime for jurisdiction %s", investor.jurisdiction)
                continue
            report.taxes_collected += settle_annual_tax(investor, regime)

    window = settings.history_window
    for company in state.companies:
        if company.is_delisted or not company.price_history:
            continue
        close = company.last_close
        company.price_history.append(
            PricePoint(day=next_day + 1, open=close, high=close, low=close, close=close)
        )
        del company.price_history[:-window]
    del state.market_index_history[:-window]


def run_daily_transition(
    state: SimulationState,
    rng: np.random.Generator,
    collaborators: Collaborators | None = None,
) -> DayReport:
    """Close day ``state.day + 1`` in place.

    Args:
        state: Simulation state (mutated).
        rng: Simulation generator.
        collaborators: Article writer and image lookup; defaults are built
            when omitted.

    Returns:
        A DayReport for the closed day.
    """
    if collaborators is None:
        collaborators = Collaborators()
    next_day = state.day + 1
    report = DayReport(day=next_day)
    companies = {c.symbol: c for c in state.companies}

    state.active_event = None

    report.corporate_settled = _settle_corporate(state, next_day, companies)
    report.news_settled = _settle_news(state, next_day)
    report.articles_settled = _settle_articles(state, next_day, companies, collaborators)
    report.trades_settled = _settle_trades(state, next_day, companies)

    generate_macro_event(state, rng, collaborators)

    multipliers: dict[str, float] = {}
    report.corporate_actions = run_corporate_step(state, rng, collaborators, multipliers)

    _update_prices(state, multipliers)
    volumes = _trade(state, rng, report)
    _close_day(state, rng, volumes, report)

    state.day = next_day
    report.active_event = state.active_event.name if state.active_event else None
    report.new_events = sum(1 for e in state.event_history if e.day == next_day)
    report.market_index = state.market_index
    logger.debug(
        "Day %d closed: index=%.2f trades=%d actions=%d",
        next_day, report.market_index, report.trades, len(report.corporate_actions),
    )
    return report
