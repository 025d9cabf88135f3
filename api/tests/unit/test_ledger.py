"""Unit tests for deferred-outcome bookkeeping."""

import math

import pytest

from market_simulator.engine.ledger import DeferredOutcomeLedger, realized_return, squash_outcome
from market_simulator.engine.models import TradeDecision


def make_decision(created_day=100, horizon=5, **overrides):
    fields = {
        "created_day": created_day,
        "evaluation_day": created_day + horizon,
        "reference_value": 10.0,
        "features": [0.1, 0.2],
        "investor_id": "ai-1",
        "symbol": "ACME",
        "side": "buy",
        "shares": 3,
    }
    fields.update(overrides)
    return TradeDecision(**fields)


class TestDeferredOutcomeLedger:
    """Decisions are evaluated exactly once, on their evaluation day."""

    def test_not_settled_before_evaluation_day(self):
        pending = []
        ledger = DeferredOutcomeLedger(pending)
        ledger.record(make_decision())
        seen = []

        assert ledger.settle(104, seen.append) == 0
        assert seen == []
        assert len(pending) == 1

    def test_settled_once_and_removed(self):
        pending = []
        ledger = DeferredOutcomeLedger(pending)
        decision = make_decision()
        ledger.record(decision)
        seen = []

        assert ledger.settle(105, seen.append) == 1
        assert ledger.settle(106, seen.append) == 0
        assert seen == [decision]
        assert pending == []

    def test_only_due_entries_are_settled(self):
        pending = []
        ledger = DeferredOutcomeLedger(pending)
        early = make_decision(created_day=100)
        late = make_decision(created_day=103)
        ledger.record(early)
        ledger.record(late)
        seen = []

        assert ledger.due(105) == [early]
        ledger.settle(105, seen.append)

        assert seen == [early]
        assert pending == [late]
        assert len(ledger) == 1

    def test_overdue_entries_still_settle(self):
        pending = [make_decision(created_day=90)]
        seen = []

        DeferredOutcomeLedger(pending).settle(120, seen.append)

        assert len(seen) == 1


class TestOutcomes:
    def test_sell_return_is_negated(self):
        assert realized_return(11.0, 10.0, "buy") == pytest.approx(0.1)
        assert realized_return(11.0, 10.0, "sell") == pytest.approx(-0.1)

    def test_non_positive_reference_is_neutral(self):
        assert realized_return(11.0, 0.0) == 0.0

    def test_squash_is_bounded(self):
        assert squash_outcome(0.1, 10.0) == pytest.approx(math.tanh(1.0))
        assert -1.0 <= squash_outcome(-50.0, 10.0) <= 1.0
