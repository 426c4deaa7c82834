"""Signal derivation: Action alphabet, Strategy interface, concrete strategies
and the unanimous consensus combinator.
"""

from trendkit.strategies.base import (
    Action,
    Strategy,
    action_counts,
    actions_to_frame,
    compare_actions,
    sign_actions,
)
from trendkit.strategies.consensus import AllStrategy, combine_unanimous
from trendkit.strategies.trend import (
    STRATEGY_REGISTRY,
    AbsolutePriceOscillatorStrategy,
    AroonStrategy,
    BalanceOfPowerStrategy,
    ChandeForecastOscillatorStrategy,
    KdjStrategy,
    MacdStrategy,
    MovingChandeForecastOscillatorStrategy,
    ParabolicSarStrategy,
    TrendStrategy,
    VortexStrategy,
    VwmaStrategy,
    make_strategy,
)

__all__ = [
    "AbsolutePriceOscillatorStrategy",
    "Action",
    "AllStrategy",
    "AroonStrategy",
    "BalanceOfPowerStrategy",
    "ChandeForecastOscillatorStrategy",
    "KdjStrategy",
    "MacdStrategy",
    "MovingChandeForecastOscillatorStrategy",
    "ParabolicSarStrategy",
    "STRATEGY_REGISTRY",
    "Strategy",
    "TrendStrategy",
    "VortexStrategy",
    "VwmaStrategy",
    "action_counts",
    "actions_to_frame",
    "combine_unanimous",
    "compare_actions",
    "make_strategy",
    "sign_actions",
]
