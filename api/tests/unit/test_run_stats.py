"""Unit tests for SimulationStats."""

from market_simulator.cli.execution.stats import SimulationStats
from market_simulator.engine import DayReport


class TestSimulationStats:
    def test_initialization_zeros_all_totals(self):
        stats = SimulationStats()

        assert stats.days == 0
        assert stats.total_trades == 0
        assert stats.total_learning_steps == 0
        assert stats.last_day is None

    def test_update_accumulates_reports(self):
        stats = SimulationStats()

        stats.update(DayReport(day=61, trades=4, shares_traded=40, trades_settled=2,
                               corporate_actions=["split:ACME"], new_events=2))
        stats.update(DayReport(day=62, trades=1, shares_traded=5, news_settled=1,
                               articles_settled=3, corporate_actions=["alliance:ACME", "split:VOLT"],
                               taxes_collected=12.5))

        data = stats.to_dict()
        assert data["days_simulated"] == 2
        assert data["last_day"] == 62
        assert data["total_trades"] == 5
        assert data["total_shares_traded"] == 45
        assert data["total_learning_steps"] == 3
        assert data["total_articles_reinforced"] == 3
        assert data["total_events"] == 2
        assert data["total_taxes"] == 12.5
        assert data["corporate_actions"] == {"split": 2, "alliance": 1}

    def test_learning_steps_exclude_articles(self):
        report = DayReport(day=61, trades_settled=1, corporate_settled=2, news_settled=3, articles_settled=9)

        assert report.learning_steps == 6
