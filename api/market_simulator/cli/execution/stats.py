"""
Centralized statistics tracking for simulation runs.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from market_simulator.engine import DayReport


class SimulationStats:
    """Accumulates DayReports into run totals.

    Usage:
        stats = SimulationStats()
        state = advance(state, days * 86_400, rng, on_day_complete=stats.update)
        output_json(stats.to_dict())
    """

    def __init__(self) -> None:
        """Initialize statistics with all counters at zero."""
        self.days = 0
        self.total_trades = 0
        self.total_shares_traded = 0
        self.total_learning_steps = 0
        self.total_articles_reinforced = 0
        self.total_events = 0
        self.total_taxes = 0.0
        self.actions: Counter[str] = Counter()
        self.last_day: int | None = None

    def update(self, report: DayReport) -> None:
        """Add one day's report to the totals.

        Example:
            >>> stats = SimulationStats()
            >>> stats.update(DayReport(day=253, trades=12, corporate_actions=["split:ACME"]))
            >>> stats.total_trades, stats.actions["split"]
            (12, 1)
        """
        self.days += 1
        self.last_day = report.day
        self.total_trades += report.trades
        self.total_shares_traded += report.shares_traded
        self.total_learning_steps += report.learning_steps
        self.total_articles_reinforced += report.articles_settled
        self.total_events += report.new_events
        self.total_taxes += report.taxes_collected
        for action in report.corporate_actions:
            self.actions[action.split(":", 1)[0]] += 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for final output."""
        return {
            "days_simulated": self.days,
            "last_day": self.last_day,
            "total_trades": self.total_trades,
            "total_shares_traded": self.total_shares_traded,
            "total_learning_steps": self.total_learning_steps,
            "total_articles_reinforced": self.total_articles_reinforced,
            "total_events": self.total_events,
            "total_taxes": self.total_taxes,
            "corporate_actions": dict(self.actions),
        }
