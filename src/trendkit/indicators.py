"""Trend indicator calculations.

Each indicator is a pure function of one or more price arrays (plus small
integer periods) returning float64 arrays of the same length, built by
composing ``filters``, ``extrema`` and ``sequences``:
  - EMA uses ewm(span=N, adjust=False)  -> seed = first value
  - SMA uses a partial window until N samples exist (no NaN warm-up)
  - Moving min/max come from the sorted-multiset window in ``extrema``

Formulas with a denominator that can reach zero (BOP, CCI, KDJ, TRIX,
Vortex, VWMA) return NaN / inf on flat input instead of raising.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
import pandas as pd

from trendkit.bars import PriceBars
from trendkit.extrema import moving_max, moving_min
from trendkit.filters import (
    ema,
    linear_regression,
    moving_linear_regression,
    moving_sum,
    sma,
)
from trendkit.parabolic_sar import parabolic_sar
from trendkit.sequences import (
    abs_values,
    add,
    as_float_array,
    check_period,
    check_same_size,
    divide,
    generate_numbers,
    multiply,
    multiply_by,
    shift_right_and_fill_by,
    since,
    subtract,
)


# ---------------------------------------------------------------------------
# Oscillators
# ---------------------------------------------------------------------------

def absolute_price_oscillator(
    values,
    fast_period: int = 14,
    slow_period: int = 30,
) -> np.ndarray:
    """APO = EMA(fast) - EMA(slow).

    Positive values indicate an upward trend, negative a downward one.
    """
    return subtract(ema(fast_period, values), ema(slow_period, values))


def default_absolute_price_oscillator(values) -> np.ndarray:
    return absolute_price_oscillator(values, 14, 30)


def aroon(high, low, period: int = 25) -> Tuple[np.ndarray, np.ndarray]:
    """Aroon Up / Aroon Down.

    Up   = ((period - bars since last period-high) / period) * 100
    Down = ((period - bars since last period-low) / period) * 100

    "Bars since" counts how long the moving max / min has held its value.
    """
    check_same_size(high, low)
    since_high = since(moving_max(period, high))
    since_low = since(moving_min(period, low))

    aroon_up = (period - since_high) / float(period) * 100.0
    aroon_down = (period - since_low) / float(period) * 100.0
    return aroon_up, aroon_down


def balance_of_power(opening, high, low, closing) -> np.ndarray:
    """BOP = (Closing - Opening) / (High - Low)."""
    check_same_size(opening, high, low, closing)
    return divide(subtract(closing, opening), subtract(high, low))


def chande_forecast_oscillator(closing) -> np.ndarray:
    """Percentage gap between close and its least-squares forecast.

    R   = Linreg(Closing) over the whole series
    CFO = ((Closing - R) / Closing) * 100
    """
    x = generate_numbers(0, len(closing), 1)
    r = linear_regression(x, closing)
    return multiply_by(divide(subtract(closing, r), closing), 100.0)


def moving_chande_forecast_oscillator(period: int, closing) -> np.ndarray:
    """CFO against a regression over the trailing *period* closes."""
    x = generate_numbers(0, len(closing), 1)
    r = moving_linear_regression(period, x, closing)
    return multiply_by(divide(subtract(closing, r), closing), 100.0)


def community_channel_index(high, low, closing, period: int = 20) -> np.ndarray:
    """Commodity channel index.

    Moving Average  = Sma(period, Typical Price)
    Mean Deviation  = Sma(period, Abs(Typical Price - Moving Average))
    CCI             = (Typical Price - Moving Average) / (0.015 * Mean Deviation)

    CCI[0] is forced to 0: the first mean deviation is always 0.
    """
    tp, _ = typical_price(low, high, closing)
    ma = sma(period, tp)
    md = sma(period, abs_values(subtract(tp, ma)))
    cci = divide(subtract(tp, ma), multiply_by(md, 0.015))
    if len(cci):
        cci[0] = 0.0
    return cci


def default_community_channel_index(high, low, closing) -> np.ndarray:
    return community_channel_index(high, low, closing, 20)


def macd(
    closing,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> Tuple[np.ndarray, np.ndarray]:
    """MACD = EMA12 - EMA26, Signal = EMA9(MACD)."""
    macd_line = subtract(ema(fast_period, closing), ema(slow_period, closing))
    signal = ema(signal_period, macd_line)
    return macd_line, signal


def mass_index(
    high,
    low,
    ema_period: int = 9,
    sum_period: int = 25,
) -> np.ndarray:
    """Range-expansion reversal indicator.

    Single EMA = EMA(9, High - Low)
    Double EMA = EMA(9, Single EMA)
    MI         = Sum(25, Single EMA / Double EMA)
    """
    ema1 = ema(ema_period, subtract(high, low))
    ema2 = ema(ema_period, ema1)
    return moving_sum(sum_period, divide(ema1, ema2))


def qstick(period: int, opening, closing) -> np.ndarray:
    """QS = Sma(Closing - Opening)."""
    return sma(period, subtract(closing, opening))


def kdj(
    high,
    low,
    closing,
    r_period: int = 9,
    k_period: int = 3,
    d_period: int = 3,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """KDJ (random index): a stochastic oscillator with a J line.

    RSV = (Closing - Min(Low, r)) / (Max(High, r) - Min(Low, r)) * 100
    K   = Sma(RSV, k)
    D   = Sma(K, d)
    J   = 3K - 2D
    """
    check_same_size(high, low, closing)
    highest = moving_max(r_period, high)
    lowest = moving_min(r_period, low)

    rsv = multiply_by(
        divide(subtract(closing, lowest), subtract(highest, lowest)), 100.0,
    )
    k = sma(k_period, rsv)
    d = sma(d_period, k)
    j = subtract(multiply_by(k, 3.0), multiply_by(d, 2.0))
    return k, d, j


def default_kdj(high, low, closing) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    return kdj(high, low, closing, 9, 3, 3)


def trix(period: int, values) -> np.ndarray:
    """Triple exponential average rate of change.

    EMA3 = EMA(EMA(EMA(values)))
    TRIX = (EMA3 - Previous EMA3) / Previous EMA3

    The previous value at index 0 is EMA3[0] itself, so TRIX[0] is 0.
    """
    ema3 = ema(period, ema(period, ema(period, values)))
    if len(ema3) == 0:
        return ema3
    previous = shift_right_and_fill_by(1, ema3[0], ema3)
    return divide(subtract(ema3, previous), previous)


# ---------------------------------------------------------------------------
# Moving averages
# ---------------------------------------------------------------------------

def dema(period: int, values) -> np.ndarray:
    """DEMA = 2 * EMA(values) - EMA(EMA(values))."""
    ema1 = ema(period, values)
    ema2 = ema(period, ema1)
    return subtract(multiply_by(ema1, 2.0), ema2)


def tema(period: int, values) -> np.ndarray:
    """TEMA = 3 * EMA1 - 3 * EMA2 + EMA3 (cascaded EMAs)."""
    ema1 = ema(period, values)
    ema2 = ema(period, ema1)
    ema3 = ema(period, ema2)
    return add(subtract(multiply_by(ema1, 3.0), multiply_by(ema2, 3.0)), ema3)


def trima(period: int, values) -> np.ndarray:
    """Triangular moving average.

    Even period: SMA(p/2, SMA(p/2 + 1, values))
    Odd period:  SMA((p+1)/2, SMA((p+1)/2, values))
    """
    check_period(period)
    if period % 2 == 0:
        n1 = period // 2
        n2 = n1 + 1
    else:
        n1 = (period + 1) // 2
        n2 = n1
    return sma(n1, sma(n2, values))


def typical_price(low, high, closing) -> Tuple[np.ndarray, np.ndarray]:
    """Typical Price = (High + Low + Closing) / 3.

    Returned together with the 20-period SMA of the closing prices.
    """
    check_same_size(high, low, closing)
    sma20 = sma(20, closing)
    tp = (as_float_array(high) + as_float_array(low) + as_float_array(closing)) / 3.0
    return tp, sma20


def vwma(period: int, closing, volume) -> np.ndarray:
    """VWMA = Sum(Price * Volume) / Sum(Volume) over *period* bars."""
    check_same_size(closing, volume)
    vol = as_float_array(volume)
    return divide(moving_sum(period, multiply(closing, vol)), moving_sum(period, vol))


def default_vwma(closing, volume) -> np.ndarray:
    return vwma(20, closing, volume)


# ---------------------------------------------------------------------------
# Directional movement
# ---------------------------------------------------------------------------

def vortex(
    high,
    low,
    closing,
    period: int = 14,
) -> Tuple[np.ndarray, np.ndarray]:
    """Vortex indicator (+VI, -VI).

    +VM  = Abs(High[i] - Low[i-1])
    -VM  = Abs(Low[i] - High[i-1])
    TR   = Max(High[i] - Low[i], Abs(High[i] - Closing[i-1]), Abs(Low[i] - Closing[i-1]))
    +VI  = Sum(period, +VM) / Sum(period, TR)
    -VI  = Sum(period, -VM) / Sum(period, TR)

    Bar 0 has no prior bar; it is paired with itself, so +VM = -VM = TR =
    High[0] - Low[0] there.  Sums cover the bars seen so far until *period*
    bars exist.
    """
    check_same_size(high, low, closing)
    check_period(period)
    h = as_float_array(high)
    lo = as_float_array(low)
    c = as_float_array(closing)

    n = len(h)
    plus_vi = np.empty(n, dtype=float)
    minus_vi = np.empty(n, dtype=float)
    plus_vm = np.zeros(period, dtype=float)
    minus_vm = np.zeros(period, dtype=float)
    tr = np.zeros(period, dtype=float)

    plus_vm_sum = np.float64(0.0)
    minus_vm_sum = np.float64(0.0)
    tr_sum = np.float64(0.0)

    with np.errstate(divide="ignore", invalid="ignore"):
        for i in range(n):
            prev = i - 1 if i > 0 else 0
            j = i % period

            plus_vm_sum -= plus_vm[j]
            plus_vm[j] = abs(h[i] - lo[prev])
            plus_vm_sum += plus_vm[j]

            minus_vm_sum -= minus_vm[j]
            minus_vm[j] = abs(lo[i] - h[prev])
            minus_vm_sum += minus_vm[j]

            tr_sum -= tr[j]
            tr[j] = max(h[i] - lo[i], abs(h[i] - c[prev]), abs(lo[i] - c[prev]))
            tr_sum += tr[j]

            plus_vi[i] = plus_vm_sum / tr_sum
            minus_vi[i] = minus_vm_sum / tr_sum

    return plus_vi, minus_vi


# ---------------------------------------------------------------------------
# Convenience: every default indicator as one frame
# ---------------------------------------------------------------------------

def compute_indicator_frame(bars: PriceBars) -> pd.DataFrame:
    """Evaluate every indicator with its default periods over *bars*.

    Returns a DataFrame indexed by the bars' dates with one column per
    output line.
    """
    o, h, lo, c, v = bars.open, bars.high, bars.low, bars.close, bars.volume

    aroon_up, aroon_down = aroon(h, lo)
    macd_line, macd_signal = macd(c)
    k, d, j = default_kdj(h, lo, c)
    tp, sma20 = typical_price(lo, h, c)
    plus_vi, minus_vi = vortex(h, lo, c)
    sar, trend = parabolic_sar(h, lo, c)

    columns = {
        "APO": default_absolute_price_oscillator(c),
        "AroonUp": aroon_up,
        "AroonDown": aroon_down,
        "BOP": balance_of_power(o, h, lo, c),
        "CFO": chande_forecast_oscillator(c),
        "CCI": default_community_channel_index(h, lo, c),
        "DEMA": dema(20, c),
        "TEMA": tema(20, c),
        "TRIMA": trima(20, c),
        "MACD": macd_line,
        "MACDSignal": macd_signal,
        "MassIndex": mass_index(h, lo),
        "PSAR": sar,
        "PSARTrend": [t.value for t in trend],
        "QStick": qstick(14, o, c),
        "K": k,
        "D": d,
        "J": j,
        "TRIX": trix(15, c),
        "TypicalPrice": tp,
        "SMA20": sma20,
        "PlusVI": plus_vi,
        "MinusVI": minus_vi,
        "VWMA": default_vwma(c, v),
    }
    return pd.DataFrame(columns, index=pd.Index(bars.dates, name="Date"))
