"""Unit tests for initial state construction."""

from datetime import timedelta

import pytest

from market_simulator.config import SimulationConfig
from market_simulator.config.catalog import APEX_FUND_NAMES, CORPORATE_NEURONS, INDICATOR_NEURONS
from market_simulator.engine import HUMAN_INVESTOR_ID, initialize
from market_simulator.engine.initializer import generate_initial_history
from market_simulator.engine.models import HyperComplexStrategy, RandomStrategy
from market_simulator.sampling import make_rng


class TestInitialHistory:
    def test_days_are_numbered_from_one(self):
        history = generate_initial_history(10, 50.0, make_rng(1))

        assert [p.day for p in history] == list(range(1, 11))
        assert history[0].open == 50.0

    def test_bars_are_consistent(self):
        history = generate_initial_history(200, 10.0, make_rng(2), min_price=0.01)

        for previous, point in zip(history, history[1:]):
            assert point.open == previous.close
        for point in history:
            assert point.low <= min(point.open, point.close)
            assert point.high >= max(point.open, point.close)
            assert point.close >= 0.01
            assert point.volume >= 200_000


class TestInitialize:
    def test_state_shape(self, state, small_config):
        length = small_config.simulation.initial_history_length

        assert state.day == length
        assert state.time == small_config.simulation.start_date + timedelta(days=length)
        assert len(state.market_index_history) == length
        assert state.market_index_history[-1].day == length
        assert state.next_macro_event_day >= length + small_config.news_picker.first_event_delay
        for company in state.companies:
            assert len(company.price_history) == length + 1
            # Running bar for tomorrow opens flat at the last close.
            running = company.price_history[-1]
            assert running.day == length + 1
            assert running.close == company.price_history[-2].close
            assert company.corporate_ai.split_network.input_names == list(CORPORATE_NEURONS)

    def test_market_index_is_mean_close(self, state):
        closes = [c.price_history[9].close for c in state.companies]

        assert state.market_index_history[9].value == pytest.approx(sum(closes) / len(closes))

    def test_human_player_first(self, state, small_config):
        human = state.investors[0]

        assert human.id == HUMAN_INVESTOR_ID
        assert human.is_human
        assert human.cash == small_config.population.human_cash
        assert sum(1 for i in state.investors if i.is_human) == 1

    def test_standard_population_tiers(self, state):
        ai = state.investors[1:]

        assert len(ai) == 12
        assert all(isinstance(i.strategy, RandomStrategy) for i in ai[-2:])
        assert all(isinstance(i.strategy, HyperComplexStrategy) for i in ai[:-2])
        assert ai[0].name == "Master Trader #1"
        assert ai[0].strategy.network.layer_sizes == [len(INDICATOR_NEURONS), 30, 25, 20, 15, 10, 1]
        assert ai[1].name == "Advanced Trader #2"
        assert all(i.cash == 10_000 for i in ai)
        assert len({i.id for i in state.investors}) == len(state.investors)

    def test_portfolio_history_starts_at_cash(self, state):
        for investor in state.investors:
            assert [p.value for p in investor.portfolio_history] == [investor.cash]

    def test_same_seed_same_state(self, small_config):
        first = initialize(small_config, make_rng(99))
        second = initialize(small_config, make_rng(99))

        assert first.model_dump_json() == second.model_dump_json()

    def test_configured_base_price_and_fundamentals(self, small_config_dict):
        small_config_dict["companies"][0].update(base_price=250.0, shares_outstanding=1_000, eps=4.0)
        config = SimulationConfig.from_dict(small_config_dict)

        company = initialize(config, make_rng(1)).company("ACME")

        assert company.price_history[0].open == 250.0
        assert company.shares_outstanding == 1_000
        assert company.eps == 4.0

    def test_rule_based_traders_are_appended(self, small_config_dict):
        small_config_dict["population"].update(simple_traders=2, complex_traders=1)
        config = SimulationConfig.from_dict(small_config_dict)

        state = initialize(config, make_rng(1))

        assert [i.id for i in state.investors[-3:]] == ["simple-1", "simple-2", "complex-1"]
        assert state.investors[-1].strategy.type == "Complex"

    def test_realistic_population_roles(self, small_config_dict):
        small_config_dict["population"] = {"mode": "realistic", "ai_investors": 200}
        config = SimulationConfig.from_dict(small_config_dict)

        state = initialize(config, make_rng(1))
        ai = state.investors[1:]

        assert len(ai) == 200
        assert sum(isinstance(i.strategy, RandomStrategy) for i in ai) == 20
        assert ai[0].name in APEX_FUND_NAMES
        assert ai[0].cash >= 50_000_000
        assert ai[1].strategy_name == "Quantitative Hedge Fund"
