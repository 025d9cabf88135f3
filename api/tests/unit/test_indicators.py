"""Unit tests for technical indicators."""

import numpy as np
import pytest

from market_simulator.engine.indicators import (
    compute_corporate_indicators,
    compute_indicators,
    compute_market_indicators,
    event_features,
    mean_impact,
    peer_momentum,
    vectorize,
)
from market_simulator.engine.models import Event, PricePoint, ValuePoint


def make_history(closes, volume=1_000.0):
    return [
        PricePoint(day=i + 1, open=c, high=c, low=c, close=c, volume=volume)
        for i, c in enumerate(closes)
    ]


def test_momentum_5d_on_short_series():
    history = make_history([100, 102, 101, 105, 110, 108])

    indicators = compute_indicators(history)

    assert indicators["momentum_5d"] == pytest.approx(0.08)
    assert "momentum_10d" not in indicators
    assert "trend_price_vs_sma_10" not in indicators


def test_fewer_than_two_points_yields_nothing():
    assert compute_indicators(make_history([100])) == {}
    assert compute_indicators([]) == {}


def test_flat_series_rsi_is_neutral():
    indicators = compute_indicators(make_history([50.0] * 30))

    assert indicators["oscillator_rsi_14_contrarian"] == 0.0
    assert indicators["trend_price_vs_sma_20"] == pytest.approx(0.0)
    # Zero range leaves the Bollinger %b undefined.
    assert "volatility_bollinger_percent_b_20" not in indicators


def test_rising_series_is_overbought():
    closes = list(np.linspace(100, 130, 30))

    indicators = compute_indicators(make_history(closes))

    # Without losses the RSI is undefined and reported as neutral.
    assert indicators["oscillator_rsi_14_contrarian"] == 0.0
    assert indicators["trend_price_vs_sma_20"] > 0
    assert indicators["oscillator_stochastic_k_14_contrarian"] == pytest.approx(-1.0)


def test_long_history_populates_all_families():
    rng = np.random.default_rng(0)
    closes = 100 * np.cumprod(1 + rng.normal(0, 0.01, 260))

    indicators = compute_indicators(make_history(closes))

    for key in (
        "momentum_50d",
        "trend_price_vs_sma_200",
        "trend_sma_crossover_50_200",
        "trend_ema_crossover_20_50",
        "oscillator_rsi_21_contrarian",
        "volatility_bollinger_bandwidth_20",
        "macd_histogram",
        "volatility_atr_14",
    ):
        assert key in indicators, key
        assert np.isfinite(indicators[key])


def test_latest_event_features():
    event = Event(id="61-0", day=61, name="Oil Shock", kind="negative", impact=0.9)

    features = event_features(event)

    assert features["event_sentiment_recent"] == -1.0
    assert features["event_impact_magnitude"] == pytest.approx(1.0)
    assert features["event_type_is_macro"] == 1.0
    assert features["event_type_is_corporate"] == 0.0
    assert event_features(None) == {}


def test_vectorize_orders_and_fills_missing():
    vector = vectorize({"b": 2.0, "a": 1.0}, ["a", "missing", "b"])

    np.testing.assert_array_equal(vector, [1.0, 0.0, 2.0])


@pytest.mark.parametrize(
    "impact,expected",
    [(None, 1.0), (1.2, 1.2), ({"Technology": 1.1, "Energy": 0.9}, 1.0), ({}, 1.0)],
)
def test_mean_impact(impact, expected):
    assert mean_impact(impact) == pytest.approx(expected)


def test_peer_momentum_ignores_delisted_and_short_histories(state):
    company = state.companies[0]
    peers = [c.model_copy(deep=True) for c in state.companies]
    for peer in peers[1:]:
        peer.is_delisted = True

    only_first = peer_momentum(peers)

    closes = [p.close for p in company.price_history]
    assert only_first == pytest.approx(closes[-1] / closes[-51] - 1)
    assert peer_momentum([]) is None


def test_corporate_and_market_indicators(state):
    company = state.companies[0]

    corporate = compute_corporate_indicators(
        company, state.companies, state.market_index_history
    )
    market = compute_market_indicators(
        state.companies, state.market_index_history, state.event_history, state.day + 1
    )

    assert corporate["price_vs_ath"] <= 0
    assert "self_momentum_50d" in corporate
    assert "market_momentum_50d" in corporate
    assert "market_momentum_50d" in market
    assert "market_momentum_200d" not in market
    assert market["market_avg_pe_ratio"] > 0


def test_market_index_point_is_a_value_record():
    point = ValuePoint(day=3, value=101.5)

    assert point.model_dump() == {"day": 3, "value": 101.5}
