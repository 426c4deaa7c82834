"""Elementwise helpers shared by the filters and indicators.

Every function accepts any 1-D array-like (list, ndarray, pd.Series) and
returns a new float64 ndarray.  Division by zero is not an error: it
yields NaN / +-inf per IEEE arithmetic, and numpy's warnings for it are
silenced here so degenerate flat-price regions stay quiet.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def as_float_array(values) -> np.ndarray:
    """Copy *values* into a 1-D float64 array."""
    arr = np.asarray(values, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"Expected a 1-D series, got shape {arr.shape}")
    return arr


def check_same_size(*series: Sequence[float]) -> None:
    """Raise ValueError unless every series has the same length."""
    if not series:
        return
    lengths = [len(s) for s in series]
    if len(set(lengths)) > 1:
        raise ValueError(f"Series lengths differ: {lengths}")


def check_period(period: int, name: str = "period") -> None:
    if period <= 0:
        raise ValueError(f"{name} must be >= 1, got {period}")


def add(a, b) -> np.ndarray:
    check_same_size(a, b)
    return as_float_array(a) + as_float_array(b)


def subtract(a, b) -> np.ndarray:
    check_same_size(a, b)
    return as_float_array(a) - as_float_array(b)


def multiply(a, b) -> np.ndarray:
    check_same_size(a, b)
    return as_float_array(a) * as_float_array(b)


def divide(a, b) -> np.ndarray:
    """Elementwise a / b.  Zero denominators give NaN or +-inf."""
    check_same_size(a, b)
    with np.errstate(divide="ignore", invalid="ignore"):
        return as_float_array(a) / as_float_array(b)


def multiply_by(values, factor: float) -> np.ndarray:
    return as_float_array(values) * factor


def abs_values(values) -> np.ndarray:
    return np.abs(as_float_array(values))


def shift_right_and_fill_by(n: int, fill: float, values) -> np.ndarray:
    """Shift *values* right by *n* positions, filling the gap with *fill*.

    >>> shift_right_and_fill_by(1, 0.0, [1.0, 2.0, 3.0])
    array([0., 1., 2.])
    """
    if n < 0:
        raise ValueError(f"shift must be >= 0, got {n}")
    arr = as_float_array(values)
    result = np.full(len(arr), fill, dtype=float)
    if n < len(arr):
        result[n:] = arr[: len(arr) - n]
    return result


def since(values) -> np.ndarray:
    """Bars since the value last changed.

    Resets to 0 wherever ``v[i] != v[i-1]`` and counts up otherwise.  The
    value before index 0 is taken to be 0, so a leading 0.0 counts as
    unchanged.
    """
    arr = as_float_array(values)
    result = np.zeros(len(arr), dtype=int)

    last_value = 0.0
    since_last = 0
    for i, value in enumerate(arr):
        if value != last_value:
            last_value = value
            since_last = 0
        else:
            since_last += 1
        result[i] = since_last

    return result


def generate_numbers(begin: float, end: float, step: float = 1.0) -> np.ndarray:
    """Half-open float range [begin, end) used as a regression x-axis."""
    if step == 0:
        raise ValueError("step must be non-zero")
    return np.arange(begin, end, step, dtype=float)
