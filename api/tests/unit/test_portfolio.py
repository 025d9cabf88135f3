"""Unit tests for FIFO lot accounting and capital gains tax."""

from datetime import datetime, timedelta, timezone

import pytest

from market_simulator.config import TaxRegime
from market_simulator.engine.models import Investor, RandomStrategy
from market_simulator.engine.portfolio import (
    buy_shares,
    portfolio_value,
    sell_shares,
    settle_annual_tax,
    shares_owned,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def investor():
    return Investor(id="ai-1", name="AI Trader #1", cash=1_000.0, strategy=RandomStrategy(trade_chance=0))


class TestBuyAndSell:
    def test_buy_opens_lot_and_debits_cash(self, investor):
        cost = buy_shares(investor, "ACME", 10, 10.0, T0, {"momentum_5d": 0.1})

        assert cost == 100.0
        assert investor.cash == 900.0
        assert shares_owned(investor, "ACME") == 10
        assert investor.holdings["ACME"][0].indicators_at_purchase == {"momentum_5d": 0.1}

    def test_sell_consumes_oldest_lot_first(self, investor):
        buy_shares(investor, "ACME", 10, 10.0, T0)
        buy_shares(investor, "ACME", 5, 20.0, T0 + timedelta(days=100))

        proceeds = sell_shares(investor, "ACME", 12, 15.0, T0 + timedelta(days=400))

        assert proceeds == 180.0
        lots = investor.holdings["ACME"]
        assert len(lots) == 1
        assert lots[0].shares == 3
        assert lots[0].purchase_price == 20.0
        # First lot held 400 days, second 300 days.
        assert investor.annual_net_ltcg == pytest.approx(50.0)
        assert investor.annual_net_stcg == pytest.approx(-10.0)

    def test_selling_everything_removes_symbol(self, investor):
        buy_shares(investor, "ACME", 4, 10.0, T0)

        sell_shares(investor, "ACME", 4, 12.0, T0 + timedelta(days=1))

        assert "ACME" not in investor.holdings
        assert investor.cash == pytest.approx(1_008.0)

    def test_oversell_raises(self, investor):
        buy_shares(investor, "ACME", 4, 10.0, T0)

        with pytest.raises(ValueError, match="only 4 held"):
            sell_shares(investor, "ACME", 5, 10.0, T0)

    @pytest.mark.parametrize("shares,price", [(0, 10.0), (-1, 10.0), (1, 0.0)])
    def test_buy_rejects_non_positive_inputs(self, investor, shares, price):
        with pytest.raises(ValueError):
            buy_shares(investor, "ACME", shares, price, T0)

    def test_portfolio_value_marks_holdings(self, investor):
        buy_shares(investor, "ACME", 10, 10.0, T0)
        buy_shares(investor, "CURE", 2, 50.0, T0)

        value = portfolio_value(investor, {"ACME": 12.0, "CURE": 40.0})

        assert value == pytest.approx(800.0 + 120.0 + 80.0)


class TestAnnualTax:
    REGIME = TaxRegime(ltcg_rate=0.15, stcg_rate=0.25)

    def test_losses_net_against_gains(self, investor):
        investor.annual_net_ltcg = 1_000.0
        investor.annual_net_stcg = -400.0

        tax = settle_annual_tax(investor, self.REGIME)

        assert tax == pytest.approx(90.0)
        assert investor.cash == pytest.approx(910.0)
        assert investor.annual_net_ltcg == 0.0
        assert investor.annual_net_stcg == 0.0

    def test_net_loss_is_carried_forward(self, investor):
        investor.annual_net_ltcg = -500.0
        investor.annual_net_stcg = 200.0

        assert settle_annual_tax(investor, self.REGIME) == 0.0
        assert investor.tax_loss_carryforward == pytest.approx(300.0)

        investor.annual_net_stcg = 400.0
        tax = settle_annual_tax(investor, self.REGIME)

        assert tax == pytest.approx(25.0)
        assert investor.tax_loss_carryforward == 0.0
        assert investor.total_taxes_paid == pytest.approx(25.0)

    def test_exemption_applies_per_bucket(self, investor):
        regime = TaxRegime(ltcg_rate=0.07, ltcg_exemption=250_000, stcg_rate=0.0)
        investor.annual_net_ltcg = 300_000.0

        assert settle_annual_tax(investor, regime) == pytest.approx(3_500.0)
