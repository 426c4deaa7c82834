"""Parabolic SAR (stop-and-reverse) trend tracker.

PSAR[i] = PSAR[i-1] - (PSAR[i-1] - EP) * AF

Falling trend: PSAR is raised to the previous two highs; if the current
high reaches it, PSAR snaps to EP.  Rising trend: PSAR is lowered to the
previous two lows; if the current low reaches it, PSAR snaps to EP.

PSAR above the close -> Falling, EP = min(EP, Low).
Otherwise             -> Rising,  EP = max(EP, High).

AF resets to the step on every flip and grows by the step (up to the cap)
while the trend holds and EP keeps moving.

Bar 0 is the seed (Falling, PSAR = High[0], EP = Low[0]), so no step ever
reads before the first bar.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import List, Tuple

import numpy as np

from trendkit.sequences import as_float_array, check_same_size

AF_STEP = 0.02
AF_MAX = 0.20


class Trend(enum.Enum):
    RISING = "Rising"
    FALLING = "Falling"


@dataclass(frozen=True)
class SarState:
    """Tracker state after one bar."""

    sar: float
    trend: Trend
    ep: float
    af: float


def initial_state(high0: float, low0: float, af_step: float = AF_STEP) -> SarState:
    return SarState(sar=high0, trend=Trend.FALLING, ep=low0, af=af_step)


def step(
    prev: SarState,
    i: int,
    high: np.ndarray,
    low: np.ndarray,
    closing: np.ndarray,
    af_step: float = AF_STEP,
    af_max: float = AF_MAX,
) -> SarState:
    """Advance the tracker from bar i-1 to bar i (i >= 1)."""
    sar = prev.sar - (prev.sar - prev.ep) * prev.af

    if prev.trend is Trend.FALLING:
        sar = max(sar, high[i - 1])
        if i > 1:
            sar = max(sar, high[i - 2])
        if high[i] >= sar:
            sar = prev.ep
    else:
        sar = min(sar, low[i - 1])
        if i > 1:
            sar = min(sar, low[i - 2])
        if low[i] <= sar:
            sar = prev.ep

    if sar > closing[i]:
        trend = Trend.FALLING
        ep = min(prev.ep, low[i])
    else:
        trend = Trend.RISING
        ep = max(prev.ep, high[i])

    af = prev.af
    if trend is not prev.trend:
        af = af_step
    elif ep != prev.ep and af < af_max:
        af = min(af + af_step, af_max)

    return replace(prev, sar=float(sar), trend=trend, ep=float(ep), af=af)


def parabolic_sar_states(
    high,
    low,
    closing,
    af_step: float = AF_STEP,
    af_max: float = AF_MAX,
) -> List[SarState]:
    """Run the tracker over every bar and return the per-bar states."""
    check_same_size(high, low, closing)
    if af_step <= 0 or af_max < af_step:
        raise ValueError(
            f"Need 0 < af_step <= af_max, got af_step={af_step}, af_max={af_max}"
        )
    h = as_float_array(high)
    lo = as_float_array(low)
    c = as_float_array(closing)
    if len(h) == 0:
        return []

    states = [initial_state(float(h[0]), float(lo[0]), af_step)]
    for i in range(1, len(h)):
        states.append(step(states[-1], i, h, lo, c, af_step, af_max))
    return states


def parabolic_sar(
    high,
    low,
    closing,
    af_step: float = AF_STEP,
    af_max: float = AF_MAX,
) -> Tuple[np.ndarray, List[Trend]]:
    """Returns (psar, trend) aligned to the input bars."""
    states = parabolic_sar_states(high, low, closing, af_step, af_max)
    psar = np.array([s.sar for s in states], dtype=float)
    return psar, [s.trend for s in states]
