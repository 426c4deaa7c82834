"""Action alphabet and the Strategy interface.

Every strategy maps a ``PriceBars`` to one ``Action`` per bar.  Concrete
strategies subclass ``Strategy`` and implement ``run``; nothing else about
them is assumed, which is what lets ``AllStrategy`` combine arbitrary
strategies.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections import Counter
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from trendkit.bars import PriceBars


class Action(enum.Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class Strategy(ABC):
    """Maps price bars to a per-bar Action series of the same length."""

    #: Registry / report label.
    name: str = "strategy"

    @abstractmethod
    def run(self, bars: PriceBars) -> List[Action]:
        """Return one Action per bar in *bars*."""

    def __call__(self, bars: PriceBars) -> List[Action]:
        return self.run(bars)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def compare_actions(upper, lower) -> List[Action]:
    """BUY where upper > lower, SELL where upper < lower, HOLD otherwise.

    NaN on either side compares false both ways and yields HOLD.
    """
    upper = np.asarray(upper, dtype=float)
    lower = np.asarray(lower, dtype=float)
    if upper.shape != lower.shape:
        raise ValueError(f"Series lengths differ: {len(upper)} vs {len(lower)}")

    actions: List[Action] = []
    for u, lo in zip(upper, lower):
        if u > lo:
            actions.append(Action.BUY)
        elif u < lo:
            actions.append(Action.SELL)
        else:
            actions.append(Action.HOLD)
    return actions


def sign_actions(values, below: Action = Action.SELL, above: Action = Action.BUY) -> List[Action]:
    """Map each value to *above* when > 0, *below* when < 0, HOLD at 0 or NaN."""
    values = np.asarray(values, dtype=float)
    actions = compare_actions(values, np.zeros_like(values))
    swap = {Action.BUY: above, Action.SELL: below, Action.HOLD: Action.HOLD}
    return [swap[a] for a in actions]


def action_counts(actions: Sequence[Action]) -> Dict[str, int]:
    """Count of each action label, every label present."""
    counts = Counter(a.value for a in actions)
    return {a.value: counts.get(a.value, 0) for a in Action}


def actions_to_frame(results: Dict[str, Sequence[Action]], dates) -> pd.DataFrame:
    """One column of action labels per strategy, indexed by *dates*."""
    index = pd.Index(dates, name="Date")
    data = {}
    for name, actions in results.items():
        if len(actions) != len(index):
            raise ValueError(
                f"Strategy '{name}' produced {len(actions)} actions for {len(index)} bars"
            )
        data[name] = [a.value for a in actions]
    return pd.DataFrame(data, index=index)
