"""Strategies built on the trend indicators.

Each strategy is a small elementwise mapping from indicator output to
BUY / SELL / HOLD.  Periods default to the indicator defaults.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from trendkit.bars import PriceBars
from trendkit.filters import sma
from trendkit.indicators import (
    absolute_price_oscillator,
    aroon,
    balance_of_power,
    chande_forecast_oscillator,
    kdj,
    macd,
    moving_chande_forecast_oscillator,
    vortex,
    vwma,
)
from trendkit.parabolic_sar import Trend, parabolic_sar
from trendkit.sequences import check_period
from trendkit.strategies.base import Action, Strategy, compare_actions, sign_actions

# KDJ bands.
KDJ_OVERSOLD = 20.0
KDJ_OVERBOUGHT = 80.0


class ChandeForecastOscillatorStrategy(Strategy):
    """BUY when close sits below its regression forecast (CFO < 0)."""

    name = "cfo"

    def run(self, bars: PriceBars) -> List[Action]:
        cfo = chande_forecast_oscillator(bars.close)
        return sign_actions(cfo, below=Action.BUY, above=Action.SELL)


class MovingChandeForecastOscillatorStrategy(Strategy):
    """CFO strategy against a trailing-window regression."""

    name = "moving_cfo"

    def __init__(self, period: int = 14) -> None:
        check_period(period)
        self.period = period

    def run(self, bars: PriceBars) -> List[Action]:
        cfo = moving_chande_forecast_oscillator(self.period, bars.close)
        return sign_actions(cfo, below=Action.BUY, above=Action.SELL)

    def __repr__(self) -> str:
        return f"MovingChandeForecastOscillatorStrategy(period={self.period})"


class KdjStrategy(Strategy):
    """BUY when K sits above D and J inside the oversold band (K <= 20).

    SELL when K sits below D and J inside the overbought band (K >= 80).
    """

    name = "kdj"

    def __init__(self, r_period: int = 9, k_period: int = 3, d_period: int = 3) -> None:
        for label, p in (("r_period", r_period), ("k_period", k_period), ("d_period", d_period)):
            check_period(p, label)
        self.r_period = r_period
        self.k_period = k_period
        self.d_period = d_period

    def run(self, bars: PriceBars) -> List[Action]:
        k, d, j = kdj(
            bars.high, bars.low, bars.close,
            self.r_period, self.k_period, self.d_period,
        )
        actions: List[Action] = []
        for ki, di, ji in zip(k, d, j):
            if ki > di and ki > ji and ki <= KDJ_OVERSOLD:
                actions.append(Action.BUY)
            elif ki < di and ki < ji and ki >= KDJ_OVERBOUGHT:
                actions.append(Action.SELL)
            else:
                actions.append(Action.HOLD)
        return actions

    def __repr__(self) -> str:
        return f"KdjStrategy({self.r_period}, {self.k_period}, {self.d_period})"


class MacdStrategy(Strategy):
    """BUY when MACD is above its signal line, SELL when below."""

    name = "macd"

    def run(self, bars: PriceBars) -> List[Action]:
        macd_line, signal = macd(bars.close)
        return compare_actions(macd_line, signal)


class TrendStrategy(Strategy):
    """BUY after *count* bars of non-falling closes, SELL after *count* non-rising.

    The run starts as a down-run of length 1 at bar 0; bar 0 is always HOLD.
    A tie (equal closes) extends whichever run is in progress.
    """

    name = "trend"

    def __init__(self, count: int = 3) -> None:
        check_period(count, "count")
        self.count = count

    def run(self, bars: PriceBars) -> List[Action]:
        closes = bars.close
        if len(closes) == 0:
            return []

        actions = [Action.HOLD]
        last_closing = closes[0]
        trend_count = 1
        trend_up = False

        for closing in closes[1:]:
            if trend_up and last_closing <= closing:
                trend_count += 1
            elif not trend_up and last_closing >= closing:
                trend_count += 1
            else:
                trend_up = not trend_up
                trend_count = 1
            last_closing = closing

            if trend_count >= self.count:
                actions.append(Action.BUY if trend_up else Action.SELL)
            else:
                actions.append(Action.HOLD)

        return actions

    def __repr__(self) -> str:
        return f"TrendStrategy(count={self.count})"


class ParabolicSarStrategy(Strategy):
    """Follow the SAR trend once it has held for *count* consecutive bars.

    Rising run >= count -> BUY, falling run >= count -> SELL, else HOLD.
    With count=1 every bar simply follows the SAR trend.
    """

    name = "psar"

    def __init__(self, count: int = 1) -> None:
        check_period(count, "count")
        self.count = count

    def run(self, bars: PriceBars) -> List[Action]:
        _, trend = parabolic_sar(bars.high, bars.low, bars.close)

        actions: List[Action] = []
        run_length = 0
        previous = None
        for t in trend:
            run_length = run_length + 1 if t is previous else 1
            previous = t
            if run_length >= self.count:
                actions.append(Action.BUY if t is Trend.RISING else Action.SELL)
            else:
                actions.append(Action.HOLD)
        return actions

    def __repr__(self) -> str:
        return f"ParabolicSarStrategy(count={self.count})"


class VwmaStrategy(Strategy):
    """BUY when VWMA is above the SMA of the same period, SELL when below."""

    name = "vwma"

    def __init__(self, period: int = 20) -> None:
        check_period(period)
        self.period = period

    def run(self, bars: PriceBars) -> List[Action]:
        average = sma(self.period, bars.close)
        weighted = vwma(self.period, bars.close, bars.volume)
        return compare_actions(weighted, average)

    def __repr__(self) -> str:
        return f"VwmaStrategy(period={self.period})"


class AbsolutePriceOscillatorStrategy(Strategy):
    """BUY when APO is above zero, SELL when below."""

    name = "apo"

    def __init__(self, fast_period: int = 14, slow_period: int = 30) -> None:
        check_period(fast_period, "fast_period")
        check_period(slow_period, "slow_period")
        self.fast_period = fast_period
        self.slow_period = slow_period

    def run(self, bars: PriceBars) -> List[Action]:
        apo = absolute_price_oscillator(bars.close, self.fast_period, self.slow_period)
        return sign_actions(apo)


class AroonStrategy(Strategy):
    """BUY when Aroon Up is above Aroon Down, SELL when below."""

    name = "aroon"

    def __init__(self, period: int = 25) -> None:
        check_period(period)
        self.period = period

    def run(self, bars: PriceBars) -> List[Action]:
        up, down = aroon(bars.high, bars.low, self.period)
        return compare_actions(up, down)


class BalanceOfPowerStrategy(Strategy):
    """BUY on buying pressure (BOP > 0), SELL on selling pressure."""

    name = "bop"

    def run(self, bars: PriceBars) -> List[Action]:
        return sign_actions(balance_of_power(bars.open, bars.high, bars.low, bars.close))


class VortexStrategy(Strategy):
    """BUY when +VI is above -VI, SELL when below."""

    name = "vortex"

    def __init__(self, period: int = 14) -> None:
        check_period(period)
        self.period = period

    def run(self, bars: PriceBars) -> List[Action]:
        plus_vi, minus_vi = vortex(bars.high, bars.low, bars.close, self.period)
        return compare_actions(plus_vi, minus_vi)


# ---------------------------------------------------------------------------
# Registry: config name -> factory accepting the strategy's keyword params
# ---------------------------------------------------------------------------

STRATEGY_REGISTRY: Dict[str, Callable[..., Strategy]] = {
    cls.name: cls
    for cls in (
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
    )
}


def make_strategy(name: str, **params) -> Strategy:
    """Instantiate a registered strategy by name.  KeyError if unknown."""
    try:
        factory = STRATEGY_REGISTRY[name]
    except KeyError:
        raise KeyError(
            f"Unknown strategy '{name}'. Known: {sorted(STRATEGY_REGISTRY)}"
        ) from None
    return factory(**params)
