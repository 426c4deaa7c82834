"""Tests for the smoothing and aggregation filters."""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from trendkit.filters import (
    ema,
    linear_regression,
    moving_linear_regression,
    moving_sum,
    rma,
    sma,
)


def _series(n: int = 60, seed: int = 42) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return 100.0 + rng.standard_normal(n).cumsum()


# --- SMA -------------------------------------------------------------------

def test_sma_example():
    np.testing.assert_allclose(sma(2, [1.0, 2.0, 3.0, 4.0]), [1.0, 1.5, 2.5, 3.5])


def test_sma_first_value_is_input():
    v = _series()
    for p in (1, 3, 20):
        assert sma(p, v)[0] == v[0]


def test_sma_partial_window_average():
    result = sma(5, [2.0, 4.0, 6.0])
    np.testing.assert_allclose(result, [2.0, 3.0, 4.0])


@pytest.mark.parametrize("period", [2, 5, 14])
def test_sma_full_window_mean(period):
    v = _series()
    result = sma(period, v)
    for i in range(period, len(v)):
        assert result[i] == pytest.approx(v[i - period + 1: i + 1].mean())


def test_sma_nan_propagates():
    result = sma(2, [1.0, float("nan"), 3.0])
    assert result[0] == 1.0
    assert np.isnan(result[1])


def test_sma_bad_period():
    with pytest.raises(ValueError):
        sma(0, [1.0])


# --- EMA -------------------------------------------------------------------

def test_ema_example():
    np.testing.assert_allclose(ema(3, [10.0, 20.0, 30.0]), [10.0, 15.0, 22.5])


def test_ema_seed_equals_first_value():
    v = _series()
    for p in (1, 5, 26):
        assert ema(p, v)[0] == v[0]


def test_ema_matches_manual_calculation():
    v = [10.0, 11.0, 12.0, 11.5, 13.0]
    k = 2.0 / (4 + 1)
    expected = [v[0]]
    for x in v[1:]:
        expected.append(x * k + expected[-1] * (1 - k))
    np.testing.assert_allclose(ema(4, v), expected, atol=1e-10)


def test_ema_accepts_series_and_empty():
    assert len(ema(3, pd.Series([], dtype=float))) == 0
    assert isinstance(ema(3, pd.Series([1.0, 2.0])), np.ndarray)


def test_ema_nan_propagates():
    result = ema(3, [10.0, float("nan"), 30.0, 40.0])
    assert result[0] == 10.0
    assert np.isnan(result[1:]).all()


def test_ema_nan_poisons_macd_style_chain():
    v = _series(40)
    v[10] = np.nan
    result = ema(12, v) - ema(26, v)
    assert np.isfinite(result[:10]).all()
    assert np.isnan(result[10:]).all()



# --- RMA -------------------------------------------------------------------

def test_rma_warmup_then_wilder():
    result = rma(3, [1.0, 2.0, 3.0, 4.0, 5.0])
    np.testing.assert_allclose(result, [1.0, 1.5, 2.0, 8.0 / 3.0, 31.0 / 9.0])


def test_rma_short_input():
    np.testing.assert_allclose(rma(10, [4.0, 6.0]), [4.0, 5.0])


# --- moving sum ------------------------------------------------------------

def test_moving_sum():
    np.testing.assert_allclose(moving_sum(2, [1.0, 2.0, 3.0, 4.0]), [1.0, 3.0, 5.0, 7.0])


def test_moving_sum_window_longer_than_input():
    np.testing.assert_allclose(moving_sum(10, [1.0, 2.0, 3.0]), [1.0, 3.0, 6.0])


# --- regression ------------------------------------------------------------

def test_linear_regression_exact_line():
    x = np.arange(5, dtype=float)
    y = 2.0 * x + 1.0
    np.testing.assert_allclose(linear_regression(x, y), y, atol=1e-9)


def test_linear_regression_matches_polyfit():
    x = np.arange(40, dtype=float)
    y = _series(40)
    m, b = np.polyfit(x, y, 1)
    np.testing.assert_allclose(linear_regression(x, y), m * x + b, atol=1e-8)


def test_linear_regression_single_point():
    np.testing.assert_allclose(linear_regression([0.0], [7.0]), [7.0])


def test_linear_regression_length_mismatch():
    with pytest.raises(ValueError):
        linear_regression([0.0, 1.0], [1.0])


def test_moving_regression_matches_window_fit():
    period = 5
    x = np.arange(30, dtype=float)
    y = _series(30)
    result = moving_linear_regression(period, x, y)

    assert result[0] == pytest.approx(y[0])
    for i in range(1, len(x)):
        lo = max(0, i - period + 1)
        m, b = np.polyfit(x[lo: i + 1], y[lo: i + 1], 1)
        assert result[i] == pytest.approx(m * x[i] + b, abs=1e-6)


def test_moving_regression_period_one_returns_y():
    x = np.arange(6, dtype=float)
    y = _series(6)
    np.testing.assert_allclose(moving_linear_regression(1, x, y), y, atol=1e-9)


def test_moving_regression_long_series_matches_polyfit():
    # x grows to 2e5; window sums must not lose precision to it.
    n, period = 200_000, 14
    x = np.arange(n, dtype=float)
    y = 100.0 + 0.1 * np.sin(x / 7.0) + 0.01 * np.cos(x / 3.0)
    result = moving_linear_regression(period, x, y)

    for i in range(n - 200, n):
        window = slice(i - period + 1, i + 1)
        _, b = np.polyfit(x[window] - x[i], y[window], 1)
        assert result[i] == pytest.approx(b, abs=1e-9)


def test_moving_regression_nan_stays_in_its_windows():
    x = np.arange(10, dtype=float)
    y = _series(10)
    y[2] = np.nan
    result = moving_linear_regression(3, x, y)
    assert np.isfinite(result[:2]).all()
    assert np.isnan(result[2:5]).all()
    assert np.isfinite(result[5:]).all()


def test_linear_regression_large_x_offset():
    x = 1e7 + np.arange(40, dtype=float)
    y = _series(40)
    m, b = np.polyfit(x - x[0], y, 1)
    np.testing.assert_allclose(linear_regression(x, y), m * (x - x[0]) + b, atol=1e-8)
