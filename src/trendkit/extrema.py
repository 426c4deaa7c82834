"""Sliding-window minimum / maximum.

The window contents live in a ``SortedMultiset``: distinct values kept in
sorted order with a count per value, so repeated prices are inserted and
evicted by multiplicity.  A circular buffer of size ``period`` remembers
which value leaves the window at each step.

    out[i] = max(values[max(0, i - period + 1) .. i])    (moving_max)
    out[i] = min(values[max(0, i - period + 1) .. i])    (moving_min)

Before the window fills (i < period) nothing is evicted and the result is
the extremum of everything seen so far.
"""

from __future__ import annotations

import bisect
from typing import Callable, Dict, List

import numpy as np

from trendkit.sequences import as_float_array, check_period


class SortedMultiset:
    """Sorted bag of floats with binary-search lookup and O(1) min/max.

    Adding or dropping a distinct value shifts the key list, so those steps
    cost O(n) in the number of distinct values held.  Windows here are a
    few dozen bars at most.
    """

    def __init__(self) -> None:
        self._keys: List[float] = []
        self._counts: Dict[float, int] = {}
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def insert(self, value: float) -> None:
        count = self._counts.get(value)
        if count is None:
            bisect.insort(self._keys, value)
            self._counts[value] = 1
        else:
            self._counts[value] = count + 1
        self._size += 1

    def remove(self, value: float) -> None:
        """Remove one occurrence of *value*.  KeyError if absent."""
        count = self._counts.get(value)
        if count is None:
            raise KeyError(value)
        if count == 1:
            del self._counts[value]
            idx = bisect.bisect_left(self._keys, value)
            del self._keys[idx]
        else:
            self._counts[value] = count - 1
        self._size -= 1

    def count(self, value: float) -> int:
        return self._counts.get(value, 0)

    def min(self) -> float:
        if not self._keys:
            raise ValueError("min() of an empty multiset")
        return self._keys[0]

    def max(self) -> float:
        if not self._keys:
            raise ValueError("max() of an empty multiset")
        return self._keys[-1]


def _moving_extremum(
    period: int,
    values,
    pick: Callable[[SortedMultiset], float],
) -> np.ndarray:
    check_period(period)
    arr = as_float_array(values)
    if np.isnan(arr).any():
        # NaN has no place in a sorted order and NaN != NaN breaks eviction.
        raise ValueError("moving min/max input contains NaN")

    result = np.empty(len(arr), dtype=float)
    buffer = np.zeros(period, dtype=float)
    window = SortedMultiset()

    for i, value in enumerate(arr):
        window.insert(value)
        slot = i % period
        if i >= period:
            window.remove(buffer[slot])
        buffer[slot] = value
        result[i] = pick(window)

    return result


def moving_max(period: int, values) -> np.ndarray:
    """Maximum over the trailing *period* values (partial at the start)."""
    return _moving_extremum(period, values, SortedMultiset.max)


def moving_min(period: int, values) -> np.ndarray:
    """Minimum over the trailing *period* values (partial at the start)."""
    return _moving_extremum(period, values, SortedMultiset.min)
