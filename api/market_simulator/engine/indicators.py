"""Technical indicators over bounded price histories.

Every function here is pure. Results are flat ``{name: value}`` maps; keys
whose inputs are too short or whose denominators vanish are left out, and
``vectorize`` fills them with 0 when building a network input.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

import numpy as np

from market_simulator.engine.models import Company, Event, PricePoint, ValuePoint

# Sentiment assigned to an event kind when used as a feature.
EVENT_SENTIMENT: dict[str, float] = {
    "positive": 1.0,
    "negative": -1.0,
    "disaster": -1.0,
    "split": 0.5,
    "alliance": 0.5,
    "merger": 0.5,
    "neutral": 0.0,
    "political": 0.0,
}

MOMENTUM_PERIODS = (5, 10, 20, 50)
SMA_PERIODS = (10, 20, 50, 100, 200)
SMA_CROSSOVERS = ((10, 20), (20, 50), (50, 200))
EMA_PERIODS = (10, 20, 50)
EMA_CROSSOVERS = ((10, 20), (20, 50))
RSI_PERIODS = (7, 14, 21)
PEER_LOOKBACK = 50
VALUATION_WINDOW = 252


def vectorize(indicators: Mapping[str, float], names: Sequence[str]) -> np.ndarray:
    """Ordered input vector for a network, missing names as 0."""
    return np.array([indicators.get(name, 0.0) for name in names], dtype=np.float64)


def mean_impact(impact: float | Mapping[str, float] | None) -> float:
    """Average multiplier of a scalar or keyed impact, 1 when absent."""
    if impact is None:
        return 1.0
    if isinstance(impact, Mapping):
        return float(np.mean(list(impact.values()))) if impact else 1.0
    return float(impact)


# ============================================================================
# Primitive series functions
# ============================================================================

def _closes(history: Sequence[PricePoint]) -> np.ndarray:
    return np.array([p.close for p in history], dtype=np.float64)


def _momentum(closes: np.ndarray, period: int) -> float | None:
    if len(closes) <= period:
        return None
    past = closes[-1 - period]
    return closes[-1] / past - 1 if past > 0 else None


def _sma(closes: np.ndarray, period: int) -> float | None:
    if len(closes) < period:
        return None
    return float(closes[-period:].mean())


def _ema(closes: np.ndarray, period: int) -> float | None:
    if len(closes) < period:
        return None
    k = 2.0 / (period + 1)
    ema = float(closes[:period].mean())
    for value in closes[period:]:
        ema = value * k + ema * (1 - k)
    return ema


def _relative(value: float | None, base: float | None) -> float | None:
    if value is None or base is None or base == 0:
        return None
    return (value - base) / base


def _atr(closes: np.ndarray, period: int) -> float | None:
    """Mean absolute close-to-close move over ``period`` changes, over price."""
    if len(closes) <= period or closes[-1] <= 0:
        return None
    moves = np.abs(np.diff(closes[-(period + 1):]))
    return float(moves.mean()) / closes[-1]


def _put(out: dict[str, float], key: str, value: float | None) -> None:
    if value is not None and np.isfinite(value):
        out[key] = float(value)


# ============================================================================
# Company indicators
# ============================================================================

def peer_momentum(peers: Iterable[Company], lookback: int = PEER_LOOKBACK) -> float | None:
    """Momentum of the equal-weighted average close of listed peers."""
    eligible = [c for c in peers if not c.is_delisted and len(c.price_history) > lookback]
    if not eligible:
        return None
    current = np.mean([c.price_history[-1].close for c in eligible])
    past = np.mean([c.price_history[-1 - lookback].close for c in eligible])
    return float(current / past - 1) if past > 0 else None


def event_features(event: Event | None) -> dict[str, float]:
    """Features describing the most recent event."""
    if event is None:
        return {}
    is_macro = 1.0 if event.subject_symbol is None else 0.0
    return {
        "event_sentiment_recent": EVENT_SENTIMENT.get(event.kind, 0.0),
        "event_impact_magnitude": abs(mean_impact(event.impact) - 1) * 10,
        "event_type_is_macro": is_macro,
        "event_type_is_corporate": 1.0 - is_macro,
    }


def compute_indicators(
    history: Sequence[PricePoint],
    *,
    sector_peers: Iterable[Company] = (),
    region_peers: Iterable[Company] = (),
    latest_event: Event | None = None,
) -> dict[str, float]:
    """Compute the investor feature set for one company.

    Args:
        history: The company's price history, oldest first.
        sector_peers: Companies in the same sector (delisted ones are ignored).
        region_peers: Companies in the same region (delisted ones are ignored).
        latest_event: Most recent event in the market, if any.

    Returns:
        Indicator name to value. Empty when fewer than two points exist.

    Example:
        >>> history = [PricePoint(day=i, open=c, high=c, low=c, close=c)
        ...            for i, c in enumerate([100, 102, 101, 105, 110, 108])]
        >>> round(compute_indicators(history)["momentum_5d"], 6)
        0.08
    """
    if len(history) < 2:
        return {}

    closes = _closes(history)
    volumes = np.array([p.volume for p in history], dtype=np.float64)
    n = len(closes)
    current = closes[-1]
    out: dict[str, float] = {}

    # Momentum
    for period in MOMENTUM_PERIODS:
        _put(out, f"momentum_{period}d", _momentum(closes, period))
    if n > 5:
        avg = closes[-5:-1].mean()
        _put(out, "momentum_1d_vs_avg5d", current / avg - 1 if avg > 0 else None)

    # Moving averages
    smas = {p: _sma(closes, p) for p in SMA_PERIODS}
    for period, sma in smas.items():
        _put(out, f"trend_price_vs_sma_{period}", _relative(current, sma))
    for fast, slow in SMA_CROSSOVERS:
        _put(out, f"trend_sma_crossover_{fast}_{slow}", _relative(smas[fast], smas[slow]))

    emas = {p: _ema(closes, p) for p in EMA_PERIODS}
    for period, ema in emas.items():
        _put(out, f"trend_price_vs_ema_{period}", _relative(current, ema))
    for fast, slow in EMA_CROSSOVERS:
        _put(out, f"trend_ema_crossover_{fast}_{slow}", _relative(emas[fast], emas[slow]))

    # Oscillators, recast so that positive means oversold
    for period in RSI_PERIODS:
        if n > period:
            changes = np.diff(closes[-(period + 1):])
            avg_gain = changes[changes > 0].sum() / period
            avg_loss = -changes[changes < 0].sum() / period
            if avg_loss > 0:
                rsi = 100 - 100 / (1 + avg_gain / avg_loss)
                _put(out, f"oscillator_rsi_{period}_contrarian", (50 - rsi) / 50)
            else:
                out[f"oscillator_rsi_{period}_contrarian"] = 0.0

    if n >= 14:
        window = closes[-14:]
        high, low = window.max(), window.min()
        k = 50.0 if high == low else 100 * (current - low) / (high - low)
        _put(out, "oscillator_stochastic_k_14_contrarian", (50 - k) / 50)

    # Bollinger bands (population std, 2 sigma)
    if n >= 20:
        window = closes[-20:]
        sma20 = window.mean()
        std = window.std()
        upper, lower = sma20 + 2 * std, sma20 - 2 * std
        if sma20 > 0:
            _put(out, "volatility_bollinger_bandwidth_20", (upper - lower) / sma20)
        if upper > lower:
            _put(out, "volatility_bollinger_percent_b_20", (current - lower) / (upper - lower))

    ema12, ema26 = _ema(closes, 12), _ema(closes, 26)
    _put(out, "macd_histogram", _relative(ema12, ema26))

    # Volume
    if n >= 20:
        avg_volume = volumes[-20:].mean()
        if avg_volume > 0:
            _put(out, "volume_avg_20d_spike", (volumes[-1] - avg_volume) / avg_volume)
    if n > 20:
        obv = 0.0
        obv_values = []
        flow = 0.0
        for i in range(n - 20, n):
            direction = np.sign(closes[i] - closes[i - 1])
            obv += direction * volumes[i]
            flow += direction * volumes[i]
            obv_values.append(obv)
        obv_mean = float(np.mean(obv_values))
        if obv_mean != 0:
            _put(out, "volume_obv_trend_20d", (obv - obv_mean) / abs(obv_mean))
        volume_sum = volumes[-20:].sum()
        if volume_sum > 0:
            _put(out, "volume_cmf_20", flow / volume_sum)

    _put(out, "volatility_atr_14", _atr(closes, 14))

    _put(out, "sector_momentum_50d", peer_momentum(sector_peers))
    _put(out, "region_momentum_50d", peer_momentum(region_peers))

    out.update(event_features(latest_event))
    return out


def compute_corporate_indicators(
    company: Company,
    companies: Sequence[Company],
    market_index_history: Sequence[ValuePoint],
    latest_event: Event | None = None,
) -> dict[str, float]:
    """Compute the feature set seen by a company's corporate AI."""
    history = company.price_history
    if not history:
        return {}
    closes = _closes(history)
    current = closes[-1]
    out: dict[str, float] = {}

    _put(out, "self_momentum_50d", _momentum(closes, 50))
    atr = _atr(closes, 14)
    _put(out, "self_volatility_atr_14", atr)

    all_time_high = max(p.high for p in history)
    _put(out, "price_vs_ath", current / all_time_high - 1 if all_time_high > 0 else None)

    if len(market_index_history) > PEER_LOOKBACK:
        past = market_index_history[-1 - PEER_LOOKBACK].value
        now = market_index_history[-1].value
        _put(out, "market_momentum_50d", now / past - 1 if past > 0 else None)

    _put(out, "sector_momentum_50d",
         peer_momentum(c for c in companies if c.sector == company.sector))
    _put(out, "region_momentum_50d",
         peer_momentum(c for c in companies if c.region == company.region))

    window = history[-VALUATION_WINDOW:]
    high_52w = max(p.high for p in window)
    low_52w = min(p.low for p in window)
    valuation = (current - low_52w) / (high_52w - low_52w) if high_52w > low_52w else 0.5
    _put(out, "opportunity_score", (1 - valuation) - (atr or 0.0) * 2)

    out.update(event_features(latest_event))
    return out


def compute_market_indicators(
    companies: Sequence[Company],
    market_index_history: Sequence[ValuePoint],
    event_history: Sequence[Event],
    current_day: int,
) -> dict[str, float]:
    """Compute the market-wide feature set seen by the news picker."""
    out: dict[str, float] = {}
    index = np.array([p.value for p in market_index_history], dtype=np.float64)
    for period in (50, 200):
        _put(out, f"market_momentum_{period}d", _momentum(index, period))

    active = [c for c in companies if not c.is_delisted]
    atrs = [
        atr for atr in (_atr(_closes(c.price_history), 20) for c in active) if atr is not None
    ]
    if atrs:
        _put(out, "market_volatility_atr_20d", float(np.mean(atrs)))

    pe_ratios = [c.last_close / c.eps for c in active if c.eps > 0 and c.price_history]
    if pe_ratios:
        _put(out, "market_avg_pe_ratio", float(np.mean(pe_ratios)))

    recent = [e for e in event_history if e.day > current_day - 30]
    if recent:
        positive = sum(1 for e in recent if EVENT_SENTIMENT.get(e.kind, 0.0) > 0)
        out["positive_event_ratio_30d"] = positive / len(recent)
    return out
