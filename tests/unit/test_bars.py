"""Tests for the PriceBars container and CSV loader."""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from trendkit.bars import OHLCV_COLS, PriceBars, load_bars_csv, normalise_columns


def _write_csv(tmp_path: Path, df: pd.DataFrame, name: str = "bars.csv") -> Path:
    path = tmp_path / name
    df.to_csv(path, index=False)
    return path


def _raw_frame() -> pd.DataFrame:
    return pd.DataFrame({
        "date": ["2024-01-03", "2024-01-02", "2024-01-03", "2024-01-04"],
        "open": [10.0, 9.0, 10.5, 11.0],
        "high": [11.0, 10.0, 11.5, 12.0],
        "low": [9.5, 8.5, 9.8, 10.5],
        "close": [10.5, 9.5, 11.0, 11.5],
        "vol": [100, 200, 300, 400],
    })


# ---------------------------------------------------------------------------
# PriceBars
# ---------------------------------------------------------------------------

class TestPriceBars:
    def test_from_arrays_defaults(self):
        bars = PriceBars.from_arrays([1.0, 2.0], [2.0, 3.0], [0.5, 1.5], [1.5, 2.5])
        assert len(bars) == 2
        np.testing.assert_array_equal(bars.volume, [0.0, 0.0])
        np.testing.assert_array_equal(bars.dates, [0, 1])

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="differ"):
            PriceBars.from_arrays([1.0], [2.0, 3.0], [0.5], [1.5])

    def test_from_frame_case_insensitive(self):
        df = pd.DataFrame({
            "Date": pd.bdate_range("2024-01-02", periods=3),
            "OPEN": [1.0, 2.0, 3.0],
            "High": [2.0, 3.0, 4.0],
            "low": [0.5, 1.5, 2.5],
            "Close": [1.5, 2.5, 3.5],
            "Volume": [10, 20, 30],
        })
        bars = PriceBars.from_frame(df)
        np.testing.assert_array_equal(bars.open, [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(bars.volume, [10.0, 20.0, 30.0])
        assert bars.volume.dtype == float

    def test_from_frame_uses_index_without_date(self):
        df = pd.DataFrame(
            {"Open": [1.0], "High": [2.0], "Low": [0.5], "Close": [1.5]},
            index=pd.DatetimeIndex(["2024-01-02"]),
        )
        bars = PriceBars.from_frame(df)
        assert pd.Timestamp(bars.dates[0]) == pd.Timestamp("2024-01-02")

    def test_from_frame_missing_price(self):
        with pytest.raises(ValueError, match="Missing price columns"):
            PriceBars.from_frame(pd.DataFrame({"Open": [1.0], "High": [1.0]}))

    def test_to_frame_round_columns(self):
        bars = PriceBars.from_arrays([1.0], [2.0], [0.5], [1.5], [7.0])
        assert list(bars.to_frame().columns) == OHLCV_COLS


def test_normalise_columns_aliases():
    df = normalise_columns(pd.DataFrame(columns=[" Timestamp ", "VOL", "Close"]))
    assert list(df.columns) == ["Date", "Volume", "Close"]


# ---------------------------------------------------------------------------
# load_bars_csv
# ---------------------------------------------------------------------------

class TestLoadBarsCsv:
    def test_sorted_and_deduplicated(self, tmp_path):
        bars = load_bars_csv(_write_csv(tmp_path, _raw_frame()))
        assert len(bars) == 3
        assert list(pd.to_datetime(bars.dates)) == list(
            pd.to_datetime(["2024-01-02", "2024-01-03", "2024-01-04"])
        )
        # First occurrence of the duplicated date is kept.
        np.testing.assert_array_equal(bars.close, [9.5, 10.5, 11.5])
        np.testing.assert_array_equal(bars.volume, [200.0, 100.0, 400.0])

    def test_missing_volume_is_zero(self, tmp_path):
        df = _raw_frame().drop(columns=["vol"])
        bars = load_bars_csv(_write_csv(tmp_path, df))
        assert (bars.volume == 0.0).all()

    def test_non_numeric_volume_is_zero(self, tmp_path):
        df = _raw_frame()
        df["vol"] = df["vol"].astype(object)
        df.loc[3, "vol"] = "n/a"
        bars = load_bars_csv(_write_csv(tmp_path, df))
        np.testing.assert_array_equal(bars.volume, [200.0, 100.0, 0.0])

    def test_missing_date_column(self, tmp_path):
        df = _raw_frame().drop(columns=["date"])
        with pytest.raises(ValueError, match="Date"):
            load_bars_csv(_write_csv(tmp_path, df))

    def test_non_numeric_price(self, tmp_path):
        df = _raw_frame()
        df["close"] = df["close"].astype(object)
        df.loc[3, "close"] = "bad"
        with pytest.raises(ValueError, match="non-numeric"):
            load_bars_csv(_write_csv(tmp_path, df))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_bars_csv(tmp_path / "missing.csv")
