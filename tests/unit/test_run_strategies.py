"""Unit tests for the run_strategies CLI script."""

import json
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
import yaml

SCRIPTS_DIR = Path(__file__).resolve().parents[2] / "scripts"
sys.path.insert(0, str(SCRIPTS_DIR))

import run_strategies  # noqa: E402


def _write_bars(tmp_path: Path, n: int = 60) -> Path:
    rng = np.random.default_rng(3)
    close = 100.0 + rng.standard_normal(n).cumsum()
    df = pd.DataFrame({
        "Date": pd.bdate_range("2024-01-02", periods=n),
        "Open": close + rng.uniform(-0.5, 0.5, n),
        "High": close + rng.uniform(0.2, 2, n),
        "Low": close - rng.uniform(0.2, 2, n),
        "Close": close,
        "Volume": rng.uniform(100, 1000, n),
    })
    path = tmp_path / "bars.csv"
    df.to_csv(path, index=False)
    return path


def _write_profile(tmp_path: Path) -> Path:
    path = tmp_path / "profile.yaml"
    with open(path, "w") as f:
        yaml.dump({
            "profile_id": "cli_test",
            "strategies": [{"name": "macd"}, {"name": "trend", "params": {"count": 2}}],
        }, f)
    return path


def _run_main(monkeypatch, argv):
    monkeypatch.setattr(sys, "argv", ["run_strategies.py", *argv])
    with pytest.raises(SystemExit) as exc:
        run_strategies.main()
    return exc.value.code


class TestMain:
    def test_json_output(self, tmp_path, monkeypatch, capsys):
        code = _run_main(monkeypatch, [
            str(_write_bars(tmp_path)), "--profile", str(_write_profile(tmp_path)), "--json",
        ])
        assert code == 0
        summary = json.loads(capsys.readouterr().out)
        assert set(summary) == {"macd", "trend", "all"}
        for row in summary.values():
            assert sum(row["counts"].values()) == 60
            assert row["last"] in {"BUY", "SELL", "HOLD"}

    def test_text_output_and_actions_csv(self, tmp_path, monkeypatch, capsys):
        out_csv = tmp_path / "out" / "actions.csv"
        code = _run_main(monkeypatch, [
            str(_write_bars(tmp_path)),
            "--profile", str(_write_profile(tmp_path)),
            "--actions-out", str(out_csv),
        ])
        assert code == 0
        text = capsys.readouterr().out
        assert "Bars: 60" in text
        assert "macd" in text
        actions = pd.read_csv(out_csv)
        assert list(actions.columns) == ["Date", "macd", "trend", "all"]
        assert len(actions) == 60

    def test_missing_bars_exit_2(self, tmp_path, monkeypatch):
        code = _run_main(monkeypatch, [
            str(tmp_path / "missing.csv"), "--profile", str(_write_profile(tmp_path)),
        ])
        assert code == 2

    def test_bad_profile_exit_2(self, tmp_path, monkeypatch):
        bad = tmp_path / "bad.yaml"
        bad.write_text("profile_id: x\nstrategies: []\n")
        code = _run_main(monkeypatch, [str(_write_bars(tmp_path)), "--profile", str(bad)])
        assert code == 2


def test_format_text_table():
    summary = {"macd": {"counts": {"BUY": 1, "SELL": 2, "HOLD": 3}, "last": "SELL"}}
    text = run_strategies._format_text(summary, 6)
    assert "Bars: 6" in text
    assert "SELL" in text.splitlines()[-1]
