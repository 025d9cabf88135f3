"""Deferred-outcome bookkeeping.

A decision is recorded when it is made and only scored once its evaluation
day arrives; the score is the sole training signal any network receives.
The same ledger type backs investor trades, corporate actions, news picker
choices and article reinforcement.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Generic, TypeVar

from market_simulator.engine.models import DeferredDecision, TradeSide

D = TypeVar("D", bound=DeferredDecision)


def squash_outcome(value: float, gain: float) -> float:
    """Map a realized outcome into a training target in [-1, 1]."""
    return math.tanh(value * gain)


def realized_return(current: float, reference: float, side: TradeSide = "buy") -> float:
    """Return since the reference value, sign-flipped for sells.

    A sell is good when the price fell afterwards, so its effective return is
    the negated price return. A non-positive reference yields 0.
    """
    if reference <= 0:
        return 0.0
    r = current / reference - 1
    return -r if side == "sell" else r


class DeferredOutcomeLedger(Generic[D]):
    """View over a state-owned list of pending decisions.

    The ledger never copies ``entries``; recording and settling mutate the list
    the simulation state holds, so pending decisions survive serialization.

    Example:
        >>> pending: list[TradeDecision] = []
        >>> ledger = DeferredOutcomeLedger(pending)
        >>> ledger.record(decision)          # evaluation_day = 105
        >>> ledger.settle(104, train)        # not due yet
        0
        >>> ledger.settle(105, train)        # train(decision) called once
        1
    """

    def __init__(self, entries: list[D]) -> None:
        self.entries = entries

    def __len__(self) -> int:
        return len(self.entries)

    def record(self, decision: D) -> None:
        """Append a decision awaiting evaluation."""
        self.entries.append(decision)

    def due(self, current_day: int) -> list[D]:
        """Decisions whose evaluation day has been reached."""
        return [d for d in self.entries if d.evaluation_day <= current_day]

    def settle(self, current_day: int, evaluate: Callable[[D], None]) -> int:
        """Evaluate and discard every due decision.

        Args:
            current_day: The day being closed.
            evaluate: Called exactly once per due decision, oldest first.

        Returns:
            Number of decisions settled.
        """
        due: list[D] = []
        keep: list[D] = []
        for decision in self.entries:
            (due if decision.evaluation_day <= current_day else keep).append(decision)
        # Replace contents in place; callers hold a reference to this list.
        self.entries[:] = keep
        for decision in due:
            evaluate(decision)
        return len(due)
