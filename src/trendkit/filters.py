"""Smoothing and aggregation kernels every indicator is built from.

Warm-up conventions (no NaN padding anywhere):
  - SMA / moving sum use a partial window until *period* samples exist
  - EMA uses ewm(span=N, adjust=False)  -> seed = first value, then recursive
  - RMA is the cumulative mean for the first *period* samples, then Wilder
    smoothing
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

from trendkit.sequences import as_float_array, check_period, check_same_size


def _trailing_sums(period: int, arr: np.ndarray) -> np.ndarray:
    """Running sum minus the value that left the window.

    Built from a cumulative sum so that a NaN or inf, once seen, stays in
    the running total exactly as a loop with trailing subtraction would.
    """
    csum = np.cumsum(arr)
    sums = csum.copy()
    sums[period:] = csum[period:] - csum[:-period]
    return sums


def sma(period: int, values) -> np.ndarray:
    """Simple moving average.  Divisor is min(i + 1, period)."""
    check_period(period)
    arr = as_float_array(values)
    counts = np.minimum(np.arange(1, len(arr) + 1), period)
    return _trailing_sums(period, arr) / counts


def ema(period: int, values) -> np.ndarray:
    """Exponential moving average.  Seed = first value, then recursive.

    k = 2/(period+1), out[i] = v[i]*k + out[i-1]*(1-k).
    pandas ewm(span=period, adjust=False) produces this exactly for finite
    input.  ewm skips NaN and carries the last mean forward, whereas the
    recurrence makes every value from the first NaN onward NaN.
    """
    check_period(period)
    arr = as_float_array(values)
    if len(arr) == 0:
        return arr
    out = pd.Series(arr).ewm(span=period, adjust=False).mean().to_numpy(copy=True)
    out[np.maximum.accumulate(np.isnan(arr))] = np.nan
    return out


def rma(period: int, values) -> np.ndarray:
    """Rolling (Wilder) moving average.

    R[0..p-1] = cumulative mean of values
    R[i]      = (R[i-1] * (p - 1) + v[i]) / p   for i >= p
    """
    check_period(period)
    arr = as_float_array(values)
    result = np.empty(len(arr), dtype=float)

    head = min(period, len(arr))
    result[:head] = np.cumsum(arr[:head]) / np.arange(1, head + 1)
    for i in range(period, len(arr)):
        result[i] = (result[i - 1] * (period - 1) + arr[i]) / period

    return result


def moving_sum(period: int, values) -> np.ndarray:
    """Sum over the trailing *period* values (partial at the start)."""
    check_period(period)
    return _trailing_sums(period, as_float_array(values))


# ---------------------------------------------------------------------------
# Least-squares regression
# ---------------------------------------------------------------------------

def _fit(
    n: np.ndarray,
    sum_x: np.ndarray,
    sum_y: np.ndarray,
    sum_xy: np.ndarray,
    sum_x2: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Slope and intercept from accumulated sums.

    A window with no x-variance (a single point) gets slope 0, so the
    fitted line is the mean of y.
    """
    denom = n * sum_x2 - sum_x * sum_x
    defined = (denom != 0) & (n > 1)
    with np.errstate(divide="ignore", invalid="ignore"):
        m = np.where(defined, (n * sum_xy - sum_x * sum_y) / denom, 0.0)
    b = (sum_y - m * sum_x) / n
    return m, b


def linear_regression(x, y) -> np.ndarray:
    """Fit one least-squares line through all (x, y) points.

    Returns the fitted value m * x[i] + b at every position.  x is
    centred on its mean before the sums are taken.
    """
    check_same_size(x, y)
    xs = as_float_array(x)
    ys = as_float_array(y)
    if len(xs) == 0:
        return xs

    xc = xs - xs.mean()
    m, b = _fit(
        np.asarray(float(len(xs))),
        np.asarray(xc.sum()),
        np.asarray(ys.sum()),
        np.asarray((xc * ys).sum()),
        np.asarray((xc * xc).sum()),
    )
    return m * xc + b


def _trailing_windows(period: int, arr: np.ndarray) -> np.ndarray:
    """Row i holds arr[i - period + 1 .. i], left-padded with zeros."""
    padded = np.concatenate([np.zeros(period - 1), arr])
    return sliding_window_view(padded, period)


def moving_linear_regression(period: int, x, y) -> np.ndarray:
    """Least-squares fit over the trailing *period* points at each index.

    The window is partial until *period* points exist.  Returns the fitted
    value at the newest point of each window.  Each window is fitted on its
    own points with x measured from the newest x, so the result is the
    intercept and does not depend on how large x has grown.  A NaN only
    affects the windows that contain it.
    """
    check_period(period)
    check_same_size(x, y)
    xs = as_float_array(x)
    ys = as_float_array(y)
    if len(xs) == 0:
        return xs

    n = np.minimum(np.arange(1, len(xs) + 1), period)
    # False on the zero padding of partial windows.
    valid = np.arange(period) >= (period - n)[:, None]
    xw = np.where(valid, _trailing_windows(period, xs) - xs[:, None], 0.0)
    yw = np.where(valid, _trailing_windows(period, ys), 0.0)

    _, b = _fit(
        n.astype(float),
        xw.sum(axis=1),
        yw.sum(axis=1),
        np.einsum("ij,ij->i", xw, yw),
        np.einsum("ij,ij->i", xw, xw),
    )
    return b
