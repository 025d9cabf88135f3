"""Initial state construction: seed price histories, companies and investors."""

from __future__ import annotations

import logging
from datetime import timedelta

import numpy as np

from market_simulator.config.catalog import (
    APEX_FUND_NAMES,
    CHAOS_AGENT_NAMES,
    CORPORATE_NEURONS,
    INDICATOR_NEURONS,
    JURISDICTIONS,
    NEWS_EVENT_CATEGORIES,
    NEWS_PICKER_NEURONS,
    QUANT_FUND_NAMES,
    RETAIL_STRATEGY_NAMES,
    STRATEGY_NAMES,
)
from market_simulator.config.schemas import CompanyConfig, SimulationConfig
from market_simulator.engine.models import (
    Company,
    ComplexStrategy,
    ComplexWeights,
    CorporateAI,
    HyperComplexStrategy,
    Investor,
    PricePoint,
    RandomStrategy,
    SimpleStrategy,
    SimulationState,
    ValuePoint,
)
from market_simulator.engine.network import NeuralNetwork, create_network

logger = logging.getLogger(__name__)

HUMAN_INVESTOR_ID = "human-player"

RETAIL_LAYERS = [10, 5]
TIER_LAYERS: dict[str, list[int]] = {
    "advanced": [15, 10, 5],
    "elite": [20, 15, 10, 5],
    "master": [30, 25, 20, 15, 10],
    "oracle": [50, 50, 50, 50, 50],
}
APEX_LAYERS = [50, 50, 50]
QUANT_LAYERS = [30, 20, 10]
BOUTIQUE_LAYERS = [20, 10]

# Share of the population per realistic-mode role.
APEX_SHARE = 0.005
QUANT_SHARE = 0.015
BOUTIQUE_SHARE = 0.03
NOISE_SHARE = 0.10


def _uniform(rng: np.random.Generator, low: float, high: float) -> float:
    return float(rng.uniform(low, high))


def _investor_network(hidden: list[int], rng: np.random.Generator) -> NeuralNetwork:
    return create_network([len(INDICATOR_NEURONS), *hidden, 1], INDICATOR_NEURONS, rng)


# ============================================================================
# Companies
# ============================================================================

def generate_initial_history(
    length: int, initial_price: float, rng: np.random.Generator, min_price: float = 0.01
) -> list[PricePoint]:
    """Seed a random-walk OHLCV history of ``length`` closed days.

    Days are numbered from 1. Each close drifts slightly upward on average;
    high and low widen the open/close range by up to 2%.
    """
    history: list[PricePoint] = []
    last_close = initial_price
    for i in range(length):
        open_ = last_close
        volume = float(round(200_000 + rng.random() * 800_000))
        close = max(min_price, open_ * (1 + (rng.random() - 0.49) * 0.05))
        high = max(open_, close) * (1 + rng.random() * 0.02)
        low = min(open_, close) * (1 - rng.random() * 0.02)
        history.append(
            PricePoint(day=i + 1, open=open_, high=high, low=low, close=close, volume=volume)
        )
        last_close = close
    return history


def _build_company(
    spec: CompanyConfig, config: SimulationConfig, rng: np.random.Generator
) -> Company:
    settings = config.simulation
    corporate = config.corporate
    length = settings.initial_history_length

    price = spec.base_price
    if price is None:
        price = _uniform(rng, settings.min_initial_price, settings.max_initial_price)
    history = generate_initial_history(length, price, rng, settings.min_price)
    close = history[-1].close
    history.append(PricePoint(day=length + 1, open=close, high=close, low=close, close=close))

    layers = [len(CORPORATE_NEURONS), *corporate.hidden_layers, 1]
    corporate_ai = CorporateAI(
        split_network=create_network(layers, CORPORATE_NEURONS, rng),
        alliance_network=create_network(layers, CORPORATE_NEURONS, rng),
        acquisition_network=create_network(layers, CORPORATE_NEURONS, rng),
        learning_rate=_uniform(rng, corporate.learning_rate_min, corporate.learning_rate_max),
        next_action_day=(
            length + corporate.min_action_interval + int(rng.integers(corporate.action_interval_range))
        ),
    )
    return Company(
        symbol=spec.symbol,
        name=spec.name,
        sector=spec.sector,
        region=spec.region,
        is_etf=spec.is_etf,
        shares_outstanding=(
            spec.shares_outstanding
            if spec.shares_outstanding is not None
            else _uniform(rng, 50_000_000, 200_000_000)
        ),
        eps=spec.eps if spec.eps is not None else _uniform(rng, 1.0, 5.0),
        price_history=history,
        corporate_ai=corporate_ai,
    )


# ============================================================================
# Investors
# ============================================================================

def _hyper_complex(
    index: int,
    config: SimulationConfig,
    rng: np.random.Generator,
    *,
    risk: tuple[float, float],
    frequency: tuple[int, int],
    learning_rate: tuple[float, float],
) -> Investor:
    return Investor(
        id=f"ai-{index + 1}",
        name=f"AI Trader #{index + 1}",
        strategy_name=STRATEGY_NAMES[index % len(STRATEGY_NAMES)],
        jurisdiction=JURISDICTIONS[index % len(JURISDICTIONS)],
        cash=config.population.ai_cash,
        strategy=HyperComplexStrategy(
            network=_investor_network(RETAIL_LAYERS, rng),
            risk_aversion=_uniform(rng, *risk),
            trade_frequency=int(rng.integers(*frequency)),
            learning_rate=_uniform(rng, *learning_rate),
        ),
    )


def _shuffled(investors: list[Investor], rng: np.random.Generator) -> list[Investor]:
    return [investors[i] for i in rng.permutation(len(investors))]


def _upgrade(investor: Investor, name: str, hidden: list[int], rng: np.random.Generator) -> None:
    strategy = investor.strategy
    if not isinstance(strategy, HyperComplexStrategy):
        return
    investor.name = name
    strategy.network = _investor_network(hidden, rng)


def _standard_population(config: SimulationConfig, rng: np.random.Generator) -> list[Investor]:
    population = config.population
    investors = [
        _hyper_complex(
            i, config, rng, risk=(0.3, 0.8), frequency=(1, 15), learning_rate=(0.005, 0.05)
        )
        for i in range(population.ai_investors)
    ]
    investors = _shuffled(investors, rng)

    for i in range(population.chaos_agents):
        investor = investors[len(investors) - 1 - i]
        investor.name = CHAOS_AGENT_NAMES[i % len(CHAOS_AGENT_NAMES)]
        investor.strategy_name = "Randomized Algorithm"
        investor.strategy = RandomStrategy(trade_chance=0.05)

    # Later tiers overwrite the leading slots of earlier ones.
    for i in range(population.advanced_traders):
        _upgrade(investors[i], f"Advanced Trader #{i + 1}", TIER_LAYERS["advanced"], rng)
    for i in range(population.elite_traders):
        _upgrade(investors[i], f"Elite Trader #{i + 1}", TIER_LAYERS["elite"], rng)
    for i in range(population.master_traders):
        _upgrade(investors[i], f"Master Trader #{i + 1}", TIER_LAYERS["master"], rng)
    if population.include_oracle and investors:
        _upgrade(investors[0], "The Oracle", TIER_LAYERS["oracle"], rng)

    offset = len(investors)
    for i in range(population.simple_traders):
        investors.append(
            Investor(
                id=f"simple-{i + 1}",
                name=f"Simple Trader #{i + 1}",
                strategy_name="Momentum Rule",
                jurisdiction=JURISDICTIONS[(offset + i) % len(JURISDICTIONS)],
                cash=population.ai_cash,
                strategy=SimpleStrategy(
                    price_momentum_weight=_uniform(rng, 0.5, 1.5),
                    volatility_weight=_uniform(rng, 0.5, 1.5),
                    risk_aversion=_uniform(rng, 0.3, 0.8),
                ),
            )
        )
    for i in range(population.complex_traders):
        investors.append(
            Investor(
                id=f"complex-{i + 1}",
                name=f"Complex Trader #{i + 1}",
                strategy_name="Multi-Factor Rule",
                jurisdiction=JURISDICTIONS[(offset + i) % len(JURISDICTIONS)],
                cash=population.ai_cash,
                strategy=ComplexStrategy(
                    weights=ComplexWeights(
                        growth=_uniform(rng, 0, 1),
                        value=_uniform(rng, 0, 1),
                        trend=_uniform(rng, 0, 1),
                        safety=_uniform(rng, 0, 1),
                    ),
                    risk_aversion=_uniform(rng, 0.3, 0.8),
                    trade_frequency=int(rng.integers(1, 15)),
                ),
            )
        )
    return investors


def _realistic_population(config: SimulationConfig, rng: np.random.Generator) -> list[Investor]:
    total = config.population.ai_investors
    investors = []
    for i in range(total):
        investor = _hyper_complex(
            i, config, rng, risk=(0.5, 0.9), frequency=(5, 30), learning_rate=(0.001, 0.011)
        )
        investor.name = f"Retail Investor #{i + 1}"
        investor.strategy_name = RETAIL_STRATEGY_NAMES[i % len(RETAIL_STRATEGY_NAMES)]
        investor.cash = _uniform(rng, 10_000, 100_000)
        investors.append(investor)
    investors = _shuffled(investors, rng)

    roles = [
        ("apex", round(total * APEX_SHARE)),
        ("quant", round(total * QUANT_SHARE)),
        ("boutique", round(total * BOUTIQUE_SHARE)),
        ("noise", round(total * NOISE_SHARE)),
    ]
    cursor = 0
    for role, count in roles:
        for i in range(count):
            if cursor >= len(investors):
                break
            investor = investors[cursor]
            cursor += 1
            strategy = investor.strategy
            match role:
                case "apex":
                    investor.name = APEX_FUND_NAMES[i % len(APEX_FUND_NAMES)]
                    investor.strategy_name = "Apex Predator Fund"
                    investor.cash = _uniform(rng, 50_000_000, 200_000_000)
                    strategy.network = _investor_network(APEX_LAYERS, rng)
                    strategy.learning_rate = _uniform(rng, 0.05, 0.08)
                    strategy.risk_aversion = _uniform(rng, 0.1, 0.3)
                case "quant":
                    base = QUANT_FUND_NAMES[i % len(QUANT_FUND_NAMES)]
                    investor.name = f"{base} #{i // len(QUANT_FUND_NAMES) + 1}"
                    investor.strategy_name = "Quantitative Hedge Fund"
                    investor.cash = _uniform(rng, 5_000_000, 25_000_000)
                    strategy.network = _investor_network(QUANT_LAYERS, rng)
                    strategy.learning_rate = _uniform(rng, 0.03, 0.05)
                    strategy.risk_aversion = _uniform(rng, 0.2, 0.4)
                case "boutique":
                    investor.name = f"Boutique Fund #{i + 1}"
                    investor.strategy_name = "Sector Specialist"
                    investor.cash = _uniform(rng, 500_000, 5_000_000)
                    strategy.network = _investor_network(BOUTIQUE_LAYERS, rng)
                    strategy.learning_rate = _uniform(rng, 0.01, 0.03)
                    strategy.risk_aversion = _uniform(rng, 0.3, 0.5)
                case "noise":
                    investor.name = CHAOS_AGENT_NAMES[i % len(CHAOS_AGENT_NAMES)]
                    investor.strategy_name = "Randomized Algorithm"
                    investor.cash = _uniform(rng, 5_000, 25_000)
                    investor.strategy = RandomStrategy(trade_chance=0.10)
    return investors


def build_population(config: SimulationConfig, rng: np.random.Generator) -> list[Investor]:
    """Human player first, then the autonomous investors for the configured mode."""
    population = config.population
    human = Investor(
        id=HUMAN_INVESTOR_ID,
        name="You",
        is_human=True,
        strategy_name="Human",
        jurisdiction=population.human_jurisdiction,
        cash=population.human_cash,
        strategy=RandomStrategy(trade_chance=0.0),
    )
    if population.mode == "realistic":
        others = _realistic_population(config, rng)
    else:
        others = _standard_population(config, rng)
    return [human, *others]


# ============================================================================
# State
# ============================================================================

def initialize(config: SimulationConfig, rng: np.random.Generator) -> SimulationState:
    """Build a fresh simulation.

    Every company gets ``initial_history_length`` closed days plus a running
    bar for the next day; ``state.day`` is the last closed day.

    Args:
        config: Validated simulation configuration.
        rng: Generator for every random draw made while building.

    Returns:
        A ready-to-advance SimulationState.
    """
    settings = config.simulation
    length = settings.initial_history_length

    companies = [_build_company(spec, config, rng) for spec in config.companies]
    investors = build_population(config, rng)
    for investor in investors:
        investor.portfolio_history.append(ValuePoint(day=length, value=investor.cash))

    market_index_history = [
        ValuePoint(
            day=day + 1,
            value=float(np.mean([c.price_history[day].close for c in companies])),
        )
        for day in range(length)
    ]

    news_picker = create_network(
        [len(NEWS_PICKER_NEURONS), *config.news_picker.hidden_layers, len(NEWS_EVENT_CATEGORIES)],
        NEWS_PICKER_NEURONS,
        rng,
    )
    picker = config.news_picker
    state = SimulationState(
        config=config,
        day=length,
        time=settings.start_date + timedelta(days=length),
        start_date=settings.start_date,
        companies=companies,
        investors=investors,
        news_picker=news_picker,
        market_index_history=market_index_history,
        next_macro_event_day=(
            length + picker.first_event_delay + int(rng.integers(picker.first_event_range))
        ),
    )
    logger.info(
        "Initialized market with %d companies and %d investors at day %d",
        len(companies), len(investors), length,
    )
    return state
