#!/usr/bin/env python3
"""Run a strategy profile over an OHLCV CSV.

Loads the bars, builds every strategy named in the profile (plus the
unanimous consensus when enabled) and reports BUY/SELL/HOLD counts and the
latest action per strategy.

Usage
-----
    python scripts/run_strategies.py data/ES_daily.csv
    python scripts/run_strategies.py data/ES_daily.csv --json
    python scripts/run_strategies.py data/ES_daily.csv --profile configs/strategies.yaml
    python scripts/run_strategies.py data/ES_daily.csv --actions-out out/actions.csv

Exit codes: 0 = ok, 2 = bad input or profile.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List

# Ensure src/ is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from trendkit.bars import PriceBars, load_bars_csv  # noqa: E402
from trendkit.config import (  # noqa: E402
    DEFAULT_PROFILE,
    build_strategies,
    load_strategy_profile,
)
from trendkit.strategies import Action, action_counts, actions_to_frame  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("run_strategies")


def _run_profile(bars: PriceBars, profile_path: Path) -> Dict[str, List[Action]]:
    """Run every strategy in the profile and return actions keyed by label."""
    profile = load_strategy_profile(profile_path)
    strategies = build_strategies(profile)

    results: Dict[str, List[Action]] = {}
    for key, strategy in strategies.items():
        results[key] = strategy.run(bars)
        logger.info("%s: %s", key, action_counts(results[key]))
    return results


def _summary(results: Dict[str, List[Action]]) -> dict:
    return {
        key: {
            "counts": action_counts(actions),
            "last": actions[-1].value if actions else None,
        }
        for key, actions in results.items()
    }


def _format_text(summary: dict, n_bars: int) -> str:
    """Format the per-strategy summary as a table."""
    lines = [
        f"Bars: {n_bars}",
        "",
        f"{'Strategy':<12} {'BUY':>6} {'SELL':>6} {'HOLD':>6}  Last",
        f"{'--------':<12} {'---':>6} {'----':>6} {'----':>6}  ----",
    ]
    for key, row in summary.items():
        c = row["counts"]
        lines.append(
            f"{key:<12} {c['BUY']:>6} {c['SELL']:>6} {c['HOLD']:>6}  {row['last']}"
        )
    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run trend strategies over OHLCV bars.",
    )
    parser.add_argument("bars", type=Path, help="OHLCV CSV file.")
    parser.add_argument(
        "--profile",
        type=Path,
        default=DEFAULT_PROFILE,
        help="Path to strategy profile YAML.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output results as JSON.",
    )
    parser.add_argument(
        "--actions-out",
        type=Path,
        default=None,
        help="Optional CSV path for the per-bar action table.",
    )
    args = parser.parse_args()

    try:
        bars = load_bars_csv(args.bars)
        results = _run_profile(bars, args.profile)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        sys.exit(2)

    if args.actions_out is not None:
        args.actions_out.parent.mkdir(parents=True, exist_ok=True)
        actions_to_frame(results, bars.dates).to_csv(args.actions_out)
        logger.info("Wrote actions to %s", args.actions_out)

    summary = _summary(results)
    if args.json_output:
        print(json.dumps(summary, indent=2))
    else:
        print(_format_text(summary, len(bars)))

    sys.exit(0)


if __name__ == "__main__":
    main()
