"""Investor decision rules.

``decide`` turns a feature vector and the investor's position into an order.
Variants differ only in how the score is produced:

- HyperComplex: network inference on the ordered indicator vector
- Simple / Complex: fixed weights over a few named indicators
- Random: coin flips, independent of features
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np

from market_simulator.config.schemas import TradingSettings
from market_simulator.engine.models import (
    ComplexStrategy,
    HyperComplexStrategy,
    RandomStrategy,
    SimpleStrategy,
    Strategy,
    TradeSide,
)
from market_simulator.engine.network import feed_forward


@dataclass(frozen=True)
class TradeOrder:
    """A sized trade produced by a strategy."""

    side: TradeSide
    shares: int


def learns(strategy: Strategy) -> bool:
    """Whether trades made under this strategy are reinforced later."""
    return isinstance(strategy, HyperComplexStrategy)


def is_trading_day(strategy: Strategy, day: int, slot: int) -> bool:
    """Frequency-limited strategies only act every ``trade_frequency`` days.

    ``slot`` staggers investors so they do not all act on the same day.
    """
    match strategy:
        case ComplexStrategy(trade_frequency=frequency) | HyperComplexStrategy(
            trade_frequency=frequency
        ):
            return (day + slot) % frequency == 0
        case _:
            return True


def score(
    strategy: Strategy,
    indicators: Mapping[str, float],
    vector: np.ndarray,
    signal_gain: float = 10.0,
) -> float | None:
    """Signed conviction in [-1, 1] for scored strategies, None for Random."""
    match strategy:
        case HyperComplexStrategy(network=network):
            return float(feed_forward(network, vector)[0])
        case SimpleStrategy(price_momentum_weight=momentum_w, volatility_weight=volatility_w):
            raw = (
                momentum_w * indicators.get("momentum_5d", 0.0)
                - volatility_w * indicators.get("volatility_atr_14", 0.0)
            )
            return math.tanh(signal_gain * raw)
        case ComplexStrategy(weights=w):
            raw = (
                w.growth * indicators.get("momentum_10d", 0.0)
                + w.value * indicators.get("oscillator_rsi_14_contrarian", 0.0)
                + w.trend * indicators.get("trend_sma_crossover_10_20", 0.0)
                - w.safety * indicators.get("volatility_atr_14", 0.0)
            )
            return math.tanh(signal_gain * raw)
        case RandomStrategy():
            return None
        case _:
            raise ValueError(f"Unknown strategy type: {type(strategy)}")


def _threshold_order(
    conviction: float,
    risk_aversion: float,
    price: float,
    cash: float,
    owned: int,
    trading: TradingSettings,
) -> TradeOrder | None:
    if conviction > risk_aversion:
        shares = math.floor(cash * trading.buy_fraction / price)
        return TradeOrder("buy", shares) if shares > 0 else None
    if conviction < -risk_aversion and owned > 0:
        shares = math.floor(owned * trading.sell_fraction)
        return TradeOrder("sell", shares) if shares > 0 else None
    return None


def decide(
    strategy: Strategy,
    indicators: Mapping[str, float],
    vector: np.ndarray,
    price: float,
    cash: float,
    owned: int,
    rng: np.random.Generator,
    trading: TradingSettings,
) -> TradeOrder | None:
    """Produce an order for one company, or None to hold.

    Args:
        strategy: The investor's strategy variant.
        indicators: Named features for the company.
        vector: ``indicators`` ordered for network input.
        price: Current close.
        cash: Investor cash.
        owned: Shares of the company currently held.
        rng: Simulation generator (used by Random only).
        trading: Sizing parameters.

    Returns:
        A TradeOrder whose size never exceeds what cash or holdings allow.
    """
    if price <= 0:
        return None

    match strategy:
        case RandomStrategy(trade_chance=chance):
            if chance <= 0 or rng.random() >= chance:
                return None
            if rng.random() < 0.5:
                affordable = int(cash // price)
                if affordable < 1:
                    return None
                return TradeOrder("buy", int(rng.integers(1, affordable + 1)))
            if owned < 1:
                return None
            return TradeOrder("sell", int(rng.integers(1, owned + 1)))
        case SimpleStrategy(risk_aversion=risk) | ComplexStrategy(
            risk_aversion=risk
        ) | HyperComplexStrategy(risk_aversion=risk):
            conviction = score(strategy, indicators, vector, trading.signal_gain)
            return _threshold_order(conviction, risk, price, cash, owned, trading)
        case _:
            raise ValueError(f"Unknown strategy type: {type(strategy)}")
