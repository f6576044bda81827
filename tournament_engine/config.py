"""
Engine tunables. Callers pass an EngineConfig explicitly; nothing here is global state.

Values can come from the environment (TOURNAMENT_* variables) or from the
`simulation` block of a tournament's defaults.json.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Any

logger = logging.getLogger(__name__)

_ENV_PREFIX = "TOURNAMENT_"


@dataclass(frozen=True)
class EngineConfig:
    # Scenario engine
    points_gap_limit: int = 3
    combination_ceiling: int = 10  # max other teams enumerated exhaustively (3**10 = 59,049)
    combination_sample_size: int = 2000  # 0 = refuse instead of sampling above the ceiling
    combination_sample_seed: int = 1337
    # Predictor and profiles
    home_advantage: float = 0.3
    form_window: int = 3
    # Forecast
    qualification_rank_horizon: int = 6
    leader_probability_floor: float = 25.0
    probability_min: int = 1
    probability_max: int = 95

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> EngineConfig:
        """Build a config from TOURNAMENT_* variables; unset or unparsable values keep defaults."""
        env = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        for name, cast in (
            ("points_gap_limit", int),
            ("home_advantage", float),
            ("combination_ceiling", int),
            ("combination_sample_size", int),
        ):
            raw = env.get(_ENV_PREFIX + name.upper())
            if raw is None or not raw.strip():
                continue
            try:
                overrides[name] = cast(raw)
            except ValueError:
                logger.warning("Ignoring %s%s=%r: not a valid %s", _ENV_PREFIX, name.upper(), raw, cast.__name__)
        return replace(cls(), **overrides)

    def with_defaults_file(self, defaults: dict[str, Any] | None) -> EngineConfig:
        """Apply `simulation.pointsGapLimit` / `simulation.homeAdvantage` from defaults.json."""
        if not defaults:
            return self
        sim = defaults.get("simulation") or {}
        overrides: dict[str, Any] = {}
        if isinstance(sim.get("pointsGapLimit"), (int, float)):
            overrides["points_gap_limit"] = int(sim["pointsGapLimit"])
        if isinstance(sim.get("homeAdvantage"), (int, float)):
            overrides["home_advantage"] = float(sim["homeAdvantage"])
        return replace(self, **overrides) if overrides else self

    def to_dict(self) -> dict[str, Any]:
        return {
            "points_gap_limit": self.points_gap_limit,
            "combination_ceiling": self.combination_ceiling,
            "combination_sample_size": self.combination_sample_size,
            "combination_sample_seed": self.combination_sample_seed,
            "home_advantage": self.home_advantage,
            "form_window": self.form_window,
            "qualification_rank_horizon": self.qualification_rank_horizon,
            "leader_probability_floor": self.leader_probability_floor,
            "probability_min": self.probability_min,
            "probability_max": self.probability_max,
        }
