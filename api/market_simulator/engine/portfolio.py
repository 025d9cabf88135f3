"""FIFO lot accounting and capital gains tax."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from market_simulator.config.schemas import TaxRegime
from market_simulator.engine.models import Investor, Lot

SECONDS_PER_DAY = 86_400


def shares_owned(investor: Investor, symbol: str) -> int:
    """Total shares held across all lots of a symbol."""
    return sum(lot.shares for lot in investor.holdings.get(symbol, []))


def portfolio_value(investor: Investor, prices: Mapping[str, float]) -> float:
    """Cash plus holdings marked at the given prices."""
    held = sum(
        shares_owned(investor, symbol) * prices.get(symbol, 0.0)
        for symbol in investor.holdings
    )
    return investor.cash + held


def buy_shares(
    investor: Investor,
    symbol: str,
    shares: int,
    price: float,
    time: datetime,
    indicators: Mapping[str, float] | None = None,
) -> float:
    """Debit cash and open a new lot.

    Returns:
        The cost of the purchase.

    Raises:
        ValueError: If shares or price is not positive.
    """
    if shares <= 0:
        raise ValueError(f"Share count must be positive, got {shares}")
    if price <= 0:
        raise ValueError(f"Price must be positive, got {price}")

    cost = shares * price
    investor.cash -= cost
    investor.holdings.setdefault(symbol, []).append(
        Lot(
            purchase_time=time,
            purchase_price=price,
            shares=shares,
            indicators_at_purchase=dict(indicators or {}),
        )
    )
    return cost


def sell_shares(
    investor: Investor,
    symbol: str,
    shares: int,
    price: float,
    time: datetime,
    long_term_days: int = 365,
) -> float:
    """Consume lots oldest-first, credit cash and book realized gains.

    Gains on lots held longer than ``long_term_days`` accrue to the long-term
    accumulator, the rest to the short-term one.

    Returns:
        Sale proceeds.

    Raises:
        ValueError: If shares is not positive or exceeds the holding.
    """
    if shares <= 0:
        raise ValueError(f"Share count must be positive, got {shares}")
    owned = shares_owned(investor, symbol)
    if shares > owned:
        raise ValueError(f"Cannot sell {shares} {symbol}: only {owned} held")

    lots = sorted(investor.holdings[symbol], key=lambda lot: lot.purchase_time)
    remaining = shares
    kept: list[Lot] = []
    for lot in lots:
        if remaining == 0:
            kept.append(lot)
            continue
        sold = min(lot.shares, remaining)
        gain = (price - lot.purchase_price) * sold
        held_days = (time - lot.purchase_time).total_seconds() / SECONDS_PER_DAY
        if held_days > long_term_days:
            investor.annual_net_ltcg += gain
        else:
            investor.annual_net_stcg += gain
        remaining -= sold
        if sold < lot.shares:
            lot.shares -= sold
            kept.append(lot)

    if kept:
        investor.holdings[symbol] = kept
    else:
        del investor.holdings[symbol]

    proceeds = shares * price
    investor.cash += proceeds
    return proceeds


def settle_annual_tax(investor: Investor, regime: TaxRegime) -> float:
    """Charge the year's capital gains tax and reset the accumulators.

    Short- and long-term results net against each other first, a remaining
    loss is carried forward, and prior carryforward offsets short-term gains
    before long-term ones. Each bucket is taxed above its exemption.

    Returns:
        Tax charged (never negative).
    """
    long_term = investor.annual_net_ltcg
    short_term = investor.annual_net_stcg
    carry = investor.tax_loss_carryforward

    if long_term < 0:
        short_term += long_term
        long_term = 0.0
    if short_term < 0:
        long_term += short_term
        short_term = 0.0
    if long_term < 0:
        carry += -long_term
        long_term = 0.0

    used = min(carry, short_term)
    short_term -= used
    carry -= used
    used = min(carry, long_term)
    long_term -= used
    carry -= used

    tax = regime.ltcg_rate * max(0.0, long_term - regime.ltcg_exemption)
    tax += regime.stcg_rate * max(0.0, short_term - regime.stcg_exemption)

    investor.cash -= tax
    investor.total_taxes_paid += tax
    investor.tax_loss_carryforward = carry
    investor.annual_net_ltcg = 0.0
    investor.annual_net_stcg = 0.0
    return tax
