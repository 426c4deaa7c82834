"""OHLCV bar container and loaders.

``PriceBars`` holds parallel float arrays sharing one date axis.  Every
indicator and strategy reads its inputs from here; loaders normalise CSV
exports and DataFrames into it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Canonical column order after normalisation.
OHLCV_COLS = ["Date", "Open", "High", "Low", "Close", "Volume"]

# Common column aliases found in broker / vendor exports.
_COL_MAP = {
    "date": "Date",
    "datetime": "Date",
    "timestamp": "Date",
    "open": "Open",
    "high": "High",
    "low": "Low",
    "close": "Close",
    "vol": "Volume",
    "volume": "Volume",
}


@dataclass(frozen=True, eq=False)
class PriceBars:
    """Equal-length OHLCV arrays indexed by bar number."""

    dates: np.ndarray
    open: np.ndarray
    high: np.ndarray
    low: np.ndarray
    close: np.ndarray
    volume: np.ndarray

    def __post_init__(self) -> None:
        lengths = {
            "dates": len(self.dates),
            "open": len(self.open),
            "high": len(self.high),
            "low": len(self.low),
            "close": len(self.close),
            "volume": len(self.volume),
        }
        if len(set(lengths.values())) > 1:
            raise ValueError(f"PriceBars arrays differ in length: {lengths}")

    def __len__(self) -> int:
        return len(self.close)

    @classmethod
    def from_arrays(
        cls,
        open,
        high,
        low,
        close,
        volume=None,
        dates=None,
    ) -> "PriceBars":
        """Build bars from plain sequences.  Missing volume -> zeros, dates -> 0..n-1."""
        n = len(close)
        return cls(
            dates=np.arange(n) if dates is None else np.asarray(dates),
            open=np.asarray(open, dtype=float),
            high=np.asarray(high, dtype=float),
            low=np.asarray(low, dtype=float),
            close=np.asarray(close, dtype=float),
            volume=np.zeros(n) if volume is None else np.asarray(volume, dtype=float),
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "PriceBars":
        """Build bars from a DataFrame with (case-insensitive) OHLCV columns.

        Uses a Date column when present, otherwise the frame's index.
        """
        work = normalise_columns(df)
        missing = [c for c in ("Open", "High", "Low", "Close") if c not in work.columns]
        if missing:
            raise ValueError(f"Missing price columns: {missing}. Got: {list(df.columns)}")

        dates = work["Date"].to_numpy() if "Date" in work.columns else work.index.to_numpy()
        volume = work["Volume"] if "Volume" in work.columns else None
        return cls.from_arrays(
            work["Open"], work["High"], work["Low"], work["Close"], volume, dates,
        )

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "Date": self.dates,
            "Open": self.open,
            "High": self.high,
            "Low": self.low,
            "Close": self.close,
            "Volume": self.volume,
        })


def normalise_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of *df* with vendor column names mapped to OHLCV_COLS."""
    work = df.copy()
    work.columns = [str(c).strip() for c in work.columns]
    return work.rename(columns={c: _COL_MAP.get(c.lower(), c) for c in work.columns})


def load_bars_csv(path: Path) -> PriceBars:
    """Load an OHLCV CSV export into ``PriceBars``.

    Column names are normalised, Date is parsed, rows are sorted by Date
    and duplicate dates dropped (first kept).  A missing Volume column
    or a non-numeric volume becomes zero.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Bar file not found: {path}")

    df = normalise_columns(pd.read_csv(path))
    if "Date" not in df.columns:
        raise ValueError(f"No 'Date' column found in {path}. Got: {list(df.columns)}")
    missing = [c for c in ("Open", "High", "Low", "Close") if c not in df.columns]
    if missing:
        raise ValueError(f"{path.name}: missing price columns {missing}")

    df["Date"] = pd.to_datetime(df["Date"])
    for col in ("Open", "High", "Low", "Close", "Volume"):
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    if "Volume" not in df.columns:
        df["Volume"] = 0.0

    before = len(df)
    df = df[OHLCV_COLS].sort_values("Date", kind="stable").drop_duplicates(subset=["Date"])
    df = df.reset_index(drop=True)
    if len(df) != before:
        logger.warning("Dropped %d duplicate dates from %s", before - len(df), path.name)

    price_nans = int(df[["Open", "High", "Low", "Close"]].isna().any(axis=1).sum())
    if price_nans:
        raise ValueError(f"{path.name}: {price_nans} rows with non-numeric prices")

    bad_volume = int(df["Volume"].isna().sum())
    if bad_volume:
        logger.warning("%s: %d non-numeric volumes set to 0", path.name, bad_volume)
        df["Volume"] = df["Volume"].fillna(0.0)

    logger.info("Loaded %d bars from %s", len(df), path.name)
    return PriceBars.from_frame(df)
