"""Strategy profile loader.

A profile YAML names the strategies to run, their parameters, and
whether to add the unanimous consensus of all of them.

Usage
-----
>>> from trendkit.config import load_strategy_profile, build_strategies
>>> profile = load_strategy_profile("configs/strategies.yaml")
>>> strategies = build_strategies(profile)
>>> sorted(strategies)[:2]
['all', 'kdj']

Example YAML::

    profile_id: trend_default_v1
    consensus: true
    strategies:
      - name: macd
      - name: kdj
        params: {r_period: 9, k_period: 3, d_period: 3}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from trendkit.strategies import AllStrategy, Strategy, make_strategy

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_PROFILE = REPO_ROOT / "configs" / "strategies.yaml"


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StrategySetting:
    """One configured strategy.  *label* defaults to the registry name."""

    name: str
    params: Dict[str, Any] = field(default_factory=dict)
    label: str = ""

    @property
    def key(self) -> str:
        return self.label or self.name


@dataclass(frozen=True)
class StrategyProfile:
    """Complete strategy profile."""

    profile_id: str
    strategies: List[StrategySetting]
    consensus: bool = True


# ---------------------------------------------------------------------------
# YAML loader
# ---------------------------------------------------------------------------

_REQUIRED_TOP_KEYS = {"profile_id", "strategies"}


def parse_strategy_profile(data: Dict[str, Any]) -> StrategyProfile:
    """Validate a profile mapping and construct typed objects.

    Raises
    ------
    ValueError
        If required keys are missing, the strategy list is empty or
        malformed, or two entries share a label.
    """
    if not isinstance(data, dict):
        raise ValueError("Strategy profile must be a mapping")

    missing = _REQUIRED_TOP_KEYS - set(data.keys())
    if missing:
        raise ValueError(f"Missing required keys in profile: {sorted(missing)}")

    raw_strategies = data["strategies"]
    if not isinstance(raw_strategies, list) or not raw_strategies:
        raise ValueError("strategies must be a non-empty list")

    settings: List[StrategySetting] = []
    seen = set()
    for idx, entry in enumerate(raw_strategies):
        if isinstance(entry, str):
            entry = {"name": entry}
        if not isinstance(entry, dict) or "name" not in entry:
            raise ValueError(f"strategies[{idx}] must be a mapping with a 'name'")
        params = entry.get("params") or {}
        if not isinstance(params, dict):
            raise ValueError(f"strategies[{idx}].params must be a mapping")

        setting = StrategySetting(
            name=str(entry["name"]),
            params=dict(params),
            label=str(entry.get("label", "")),
        )
        if setting.key in seen:
            raise ValueError(f"Duplicate strategy label: {setting.key}")
        seen.add(setting.key)
        settings.append(setting)

    return StrategyProfile(
        profile_id=str(data["profile_id"]),
        strategies=settings,
        consensus=bool(data.get("consensus", True)),
    )


def load_strategy_profile(path: Path = DEFAULT_PROFILE) -> StrategyProfile:
    """Parse a strategy profile YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Strategy profile not found: {path}")
    with open(path) as f:
        data = yaml.safe_load(f)

    profile = parse_strategy_profile(data)
    logger.info(
        "Loaded profile %s: %d strategies (consensus=%s)",
        profile.profile_id,
        len(profile.strategies),
        profile.consensus,
    )
    return profile


# ---------------------------------------------------------------------------
# Strategy construction
# ---------------------------------------------------------------------------

def build_strategies(profile: StrategyProfile) -> Dict[str, Strategy]:
    """Instantiate every configured strategy, keyed by label.

    When the profile asks for consensus, an ``AllStrategy`` over all of
    them is added under the key ``"all"``.
    """
    strategies: Dict[str, Strategy] = {}
    for setting in profile.strategies:
        try:
            strategies[setting.key] = make_strategy(setting.name, **setting.params)
        except KeyError as exc:
            raise ValueError(str(exc.args[0])) from exc
        except TypeError as exc:
            raise ValueError(
                f"Bad params for strategy '{setting.key}': {setting.params} ({exc})"
            ) from exc

    if profile.consensus:
        if "all" in strategies:
            raise ValueError("Label 'all' is reserved for the consensus strategy")
        strategies["all"] = AllStrategy(*strategies.values())
    return strategies
