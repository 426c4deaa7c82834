"""Unanimous-agreement combinator over several strategies."""

from __future__ import annotations

import logging
from typing import List, Sequence

from trendkit.bars import PriceBars
from trendkit.strategies.base import Action, Strategy

logger = logging.getLogger(__name__)


def combine_unanimous(action_series: Sequence[Sequence[Action]]) -> List[Action]:
    """Merge equal-length action series: the shared action, else HOLD.

    Raises ValueError for an empty input or series of differing lengths.
    """
    if not action_series:
        raise ValueError("Need at least one action series to combine")
    lengths = [len(s) for s in action_series]
    if len(set(lengths)) > 1:
        raise ValueError(f"Action series lengths differ: {lengths}")

    combined: List[Action] = []
    for column in zip(*action_series):
        first = column[0]
        combined.append(first if all(a is first for a in column[1:]) else Action.HOLD)
    return combined


class AllStrategy(Strategy):
    """Strategy of strategies: acts only where every member agrees."""

    name = "all"

    def __init__(self, *strategies: Strategy) -> None:
        if not strategies:
            raise ValueError("AllStrategy needs at least one strategy")
        self.strategies = tuple(strategies)

    def run(self, bars: PriceBars) -> List[Action]:
        results = []
        for strategy in self.strategies:
            actions = strategy.run(bars)
            if len(actions) != len(bars):
                raise ValueError(
                    f"{strategy!r} produced {len(actions)} actions for {len(bars)} bars"
                )
            results.append(actions)

        combined = combine_unanimous(results)
        logger.debug(
            "Consensus of %d strategies: %d/%d bars actionable",
            len(self.strategies),
            sum(1 for a in combined if a is not Action.HOLD),
            len(combined),
        )
        return combined

    def __repr__(self) -> str:
        inner = ", ".join(repr(s) for s in self.strategies)
        return f"AllStrategy({inner})"
