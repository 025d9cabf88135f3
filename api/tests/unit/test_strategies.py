"""Unit tests for investor decision rules."""

import math

import numpy as np
import pytest

from market_simulator.config import TradingSettings
from market_simulator.engine.models import (
    ComplexStrategy,
    ComplexWeights,
    HyperComplexStrategy,
    RandomStrategy,
    SimpleStrategy,
)
from market_simulator.engine.network import NeuralNetwork
from market_simulator.engine.strategies import decide, is_trading_day, learns, score
from market_simulator.sampling import make_rng

TRADING = TradingSettings(buy_fraction=0.2, sell_fraction=0.5)


def constant_network(output: float, width: int = 3) -> NeuralNetwork:
    """Single-layer network whose output is its bias."""
    return NeuralNetwork(
        layer_sizes=[width, 1],
        weights=[np.zeros((1, width))],
        biases=[np.array([output])],
    )


def hyper(output: float, risk: float = 0.5, frequency: int = 1) -> HyperComplexStrategy:
    return HyperComplexStrategy(
        network=constant_network(output),
        risk_aversion=risk,
        trade_frequency=frequency,
        learning_rate=0.01,
    )


class TestThresholdStrategies:
    def test_conviction_above_risk_buys_fraction_of_cash(self):
        order = decide(hyper(0.9), {}, np.zeros(3), 10.0, 1_000.0, 0, make_rng(1), TRADING)

        assert order is not None
        assert order.side == "buy"
        assert order.shares == 20

    def test_conviction_below_negative_risk_sells_fraction_of_holding(self):
        order = decide(hyper(-0.9), {}, np.zeros(3), 10.0, 1_000.0, 7, make_rng(1), TRADING)

        assert order.side == "sell"
        assert order.shares == 3

    def test_sell_signal_without_holdings_holds(self):
        assert decide(hyper(-0.9), {}, np.zeros(3), 10.0, 1_000.0, 0, make_rng(1), TRADING) is None

    def test_weak_conviction_holds(self):
        assert decide(hyper(0.2), {}, np.zeros(3), 10.0, 1_000.0, 5, make_rng(1), TRADING) is None

    def test_unaffordable_buy_holds(self):
        assert decide(hyper(0.9), {}, np.zeros(3), 500.0, 100.0, 0, make_rng(1), TRADING) is None

    def test_simple_score_uses_momentum_and_volatility(self):
        strategy = SimpleStrategy(price_momentum_weight=1.0, volatility_weight=0.5, risk_aversion=0.5)
        indicators = {"momentum_5d": 0.1, "volatility_atr_14": 0.02}

        value = score(strategy, indicators, np.zeros(3), signal_gain=10.0)

        assert value == pytest.approx(math.tanh(10.0 * (0.1 - 0.01)))

    def test_complex_score_blends_weights(self):
        strategy = ComplexStrategy(
            weights=ComplexWeights(growth=1.0, value=0.0, trend=0.0, safety=0.0),
            risk_aversion=0.5,
        )

        value = score(strategy, {"momentum_10d": -0.2}, np.zeros(3))

        assert value == pytest.approx(math.tanh(-2.0))


class TestRandomStrategy:
    def test_zero_chance_never_trades(self):
        rng = make_rng(2)
        strategy = RandomStrategy(trade_chance=0.0)

        orders = [decide(strategy, {}, np.zeros(3), 10.0, 1_000.0, 10, rng, TRADING) for _ in range(200)]

        assert orders == [None] * 200
        assert score(strategy, {}, np.zeros(3)) is None

    def test_orders_respect_cash_and_holdings(self):
        rng = make_rng(3)
        strategy = RandomStrategy(trade_chance=1.0)

        for _ in range(200):
            order = decide(strategy, {}, np.zeros(3), 10.0, 55.0, 4, rng, TRADING)
            if order is None:
                continue
            if order.side == "buy":
                assert 1 <= order.shares <= 5
            else:
                assert 1 <= order.shares <= 4


class TestTradingDays:
    def test_frequency_gates_trading(self):
        strategy = hyper(0.9, frequency=5)

        days = [day for day in range(100, 115) if is_trading_day(strategy, day, slot=2)]

        assert days == [103, 108, 113]

    def test_unlimited_strategies_trade_daily(self):
        assert is_trading_day(RandomStrategy(trade_chance=0.1), 7, 3)

    def test_only_network_strategies_learn(self):
        assert learns(hyper(0.0))
        assert not learns(RandomStrategy(trade_chance=0.1))
        assert not learns(SimpleStrategy(price_momentum_weight=1, volatility_weight=1, risk_aversion=0.5))
