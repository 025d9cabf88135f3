"""Integration tests for the end-of-day transition."""

import numpy as np
import pytest

from market_simulator.config import SimulationConfig
from market_simulator.config.catalog import INDICATOR_NEURONS
from market_simulator.engine import initialize, run_daily_transition
from market_simulator.engine.models import HyperComplexStrategy, RandomStrategy, TradeDecision
from market_simulator.engine.network import NeuralNetwork
from market_simulator.sampling import make_rng


def test_day_advances_and_bars_roll(state):
    day = state.day
    before = {c.symbol: len(c.price_history) for c in state.companies}

    report = run_daily_transition(state, make_rng(2))

    assert report.day == day + 1
    assert state.day == day + 1
    assert state.market_index_history[-1].day == day + 1
    assert report.market_index == state.market_index
    for company in state.companies:
        assert len(company.price_history) == before[company.symbol] + 1
        assert company.price_history[-2].day == day + 1
        assert company.price_history[-1].day == day + 2
        assert company.price_history[-1].open == company.price_history[-2].close


def test_closed_bar_gets_volume(state):
    run_daily_transition(state, make_rng(2))

    for company in state.companies:
        assert company.price_history[-2].volume >= 0
        assert company.price_history[-1].volume == 0


def eager_traders(state):
    """Make one noise trader and one learner that act on every company every day."""
    width = len(INDICATOR_NEURONS)
    state.investors[1].strategy = RandomStrategy(trade_chance=1.0)
    state.investors[2].strategy = HyperComplexStrategy(
        network=NeuralNetwork(
            layer_sizes=[width, 1],
            weights=[np.zeros((1, width))],
            biases=[np.array([1.0])],
        ),
        risk_aversion=0.5,
        trade_frequency=1,
        learning_rate=0.001,
    )


def test_investors_trade_and_learners_queue_decisions(state):
    eager_traders(state)

    reports = [run_daily_transition(state, make_rng(3 + i)) for i in range(5)]

    assert sum(r.trades for r in reports) > 0
    pending = [d for i in state.investors for d in i.pending_trades]
    assert state.investors[2].pending_trades
    assert not state.investors[1].pending_trades
    assert all(isinstance(d, TradeDecision) for d in pending)
    assert all(d.evaluation_day > state.day - 5 for d in pending)
    assert all(not i.pending_trades for i in state.investors if i.is_human)


def test_cash_and_holdings_stay_non_negative(state):
    for i in range(8):
        run_daily_transition(state, make_rng(10 + i))

    for investor in state.investors:
        assert investor.cash >= -1e-9
        for lots in investor.holdings.values():
            assert all(lot.shares > 0 for lot in lots)


def test_matured_trades_are_settled(state):
    eager_traders(state)
    horizon = state.config.trading.evaluation_horizon
    reports = [run_daily_transition(state, make_rng(20 + i)) for i in range(horizon + 1)]

    assert sum(r.trades_settled for r in reports) > 0
    for investor in state.investors:
        assert all(d.evaluation_day > state.day for d in investor.pending_trades)


def queue_matured_trade(state, symbol):
    """Give a zero-weight learner one overdue buy on ``symbol``; return its network."""
    width = len(INDICATOR_NEURONS)
    network = NeuralNetwork(
        layer_sizes=[width, 1],
        weights=[np.zeros((1, width))],
        biases=[np.array([0.0])],
    )
    learner = state.investors[2]
    learner.strategy = HyperComplexStrategy(
        network=network, risk_aversion=0.5, trade_frequency=1, learning_rate=0.1
    )
    company = state.company(symbol)
    learner.pending_trades = [
        TradeDecision(
            created_day=state.day - 5,
            evaluation_day=state.day,
            reference_value=company.last_close / 2,
            features=[0.5] * width,
            investor_id=learner.id,
            symbol=symbol,
            side="buy",
            shares=10,
        )
    ]
    return network


def test_trade_outcome_on_delisted_company_is_not_learned(state):
    company = state.companies[0]
    company.is_delisted = True
    network = queue_matured_trade(state, company.symbol)

    report = run_daily_transition(state, make_rng(4))

    assert report.trades_settled == 1
    assert np.all(network.weights[0] == 0.0)
    assert network.biases[0][0] == 0.0


def test_trade_outcome_on_listed_company_is_learned(state):
    network = queue_matured_trade(state, state.companies[0].symbol)

    run_daily_transition(state, make_rng(4))

    assert network.biases[0][0] != 0.0


def test_history_window_bounds_every_series(small_config_dict):
    small_config_dict["simulation"].update(initial_history_length=10, history_margin=2)
    config = SimulationConfig.from_dict(small_config_dict)
    state = initialize(config, make_rng(1))

    for i in range(6):
        run_daily_transition(state, make_rng(i))

    window = config.simulation.history_window
    assert len(state.market_index_history) == window
    for company in state.companies:
        assert len(company.price_history) == window
        assert company.price_history[-1].day == state.day + 1


def test_portfolio_snapshots_are_bounded(state):
    state.config.simulation.portfolio_history_limit = 3

    for i in range(5):
        run_daily_transition(state, make_rng(i))

    for investor in state.investors:
        assert [p.day for p in investor.portfolio_history] == [state.day - 2, state.day - 1, state.day]


def test_annual_tax_is_collected_on_tax_day(state):
    state.config.trading.tax_period_days = state.day + 1
    investor = state.investors[1]
    investor.jurisdiction = "GLOBAL"
    investor.annual_net_stcg = 1_000.0

    report = run_daily_transition(state, make_rng(4))

    assert report.taxes_collected >= 250.0
    assert investor.total_taxes_paid >= 250.0
    assert investor.annual_net_ltcg == 0.0


def test_prices_stay_above_floor(small_config_dict):
    small_config_dict["simulation"]["min_price"] = 5.0
    small_config_dict["scenario_events"] = [
        {"type": "MacroShock", "impact": 0.01, "schedule": {"type": "OneTime", "day": 61}},
    ]
    state = initialize(SimulationConfig.from_dict(small_config_dict), make_rng(1))

    report = run_daily_transition(state, make_rng(2))

    assert report.active_event == "Macro Shock"
    for company in state.companies:
        assert company.last_close >= 5.0


@pytest.mark.slow
def test_long_run_keeps_invariants(small_config_dict):
    small_config_dict["news_picker"] = {"first_event_delay": 0, "first_event_range": 1, "interval_min": 3}
    small_config_dict["corporate"] = {"min_action_interval": 0, "cosmetic_event_probability": 0.5}
    state = initialize(SimulationConfig.from_dict(small_config_dict), make_rng(5))

    for i in range(40):
        run_daily_transition(state, make_rng(100 + i))

    assert state.day == 100
    assert len(state.event_history) <= state.config.simulation.event_history_limit
    assert [e.day for e in state.event_history] == sorted((e.day for e in state.event_history), reverse=True)
    for company in state.active_companies():
        assert company.last_close >= state.config.simulation.min_price
