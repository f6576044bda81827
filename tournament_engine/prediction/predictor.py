"""
Match outcome predictor: heuristic home/draw/away percentages from team profiles.

Strength = rating + 2 * recent form, plus a home advantage for the home side.
The strength difference picks one of six fixed probability bands.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from tournament_engine.models import MatchResult, TeamPerformanceProfile

DEFAULT_HOME_ADVANTAGE = 0.3

# (lower bound exclusive, (home, draw, away)); the last band catches everything else
_BANDS: tuple[tuple[float, tuple[int, int, int]], ...] = (
    (2.0, (65, 25, 10)),
    (1.0, (55, 30, 15)),
    (0.0, (45, 35, 20)),
    (-1.0, (35, 35, 30)),
    (-2.0, (25, 30, 45)),
)
_LAST_BAND = (15, 25, 60)


class ResultLabel:
    HOME = "home"
    DRAW = "draw"
    AWAY = "away"


@dataclass
class MatchPrediction:
    home_team_id: str
    away_team_id: str
    result_label: str  # ResultLabel value
    confidence: int
    home_win_pct: int
    draw_pct: int
    away_win_pct: int
    predicted_home_goals: int
    predicted_away_goals: int
    strength_diff: float
    rationale: str
    reasons: list[str] = field(default_factory=list)

    @property
    def predicted_score(self) -> tuple[int, int]:
        return (self.predicted_home_goals, self.predicted_away_goals)

    def to_dict(self) -> dict[str, Any]:
        return {
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "result_label": self.result_label,
            "confidence": self.confidence,
            "home_win_pct": self.home_win_pct,
            "draw_pct": self.draw_pct,
            "away_win_pct": self.away_win_pct,
            "predicted_score": {"home": self.predicted_home_goals, "away": self.predicted_away_goals},
            "strength_diff": round(self.strength_diff, 2),
            "rationale": self.rationale,
            "reasons": list(self.reasons),
        }


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def probability_band(diff: float) -> tuple[int, int, int]:
    for lower, triple in _BANDS:
        if diff > lower:
            return triple
    return _LAST_BAND


def pick_label(home: int, draw: int, away: int) -> str:
    if home > draw and home > away:
        return ResultLabel.HOME
    if away > draw:
        return ResultLabel.AWAY
    return ResultLabel.DRAW


class MatchPredictor:
    """
    Stateless predictor. home_advantage is added to the home side's strength only.
    """

    def __init__(self, home_advantage: float = DEFAULT_HOME_ADVANTAGE) -> None:
        self.home_advantage = home_advantage

    def strengths(
        self,
        home: TeamPerformanceProfile,
        away: TeamPerformanceProfile,
    ) -> tuple[float, float]:
        home_strength = home.performance_rating + self.home_advantage + 2 * home.recent_form
        away_strength = away.performance_rating + 2 * away.recent_form
        return home_strength, away_strength

    def predict(
        self,
        home: TeamPerformanceProfile,
        away: TeamPerformanceProfile,
    ) -> MatchPrediction:
        home_strength, away_strength = self.strengths(home, away)
        diff = home_strength - away_strength
        home_pct, draw_pct, away_pct = probability_band(diff)
        label = pick_label(home_pct, draw_pct, away_pct)
        confidence = {ResultLabel.HOME: home_pct, ResultLabel.DRAW: draw_pct, ResultLabel.AWAY: away_pct}[label]

        home_goals = max(0, round_half_up(home.attacking_strength + (0.5 if diff > 0 else 0.0)))
        away_goals = max(0, round_half_up(away.attacking_strength + (0.5 if diff < 0 else 0.0)))

        reasons = self._reasons(home, away, diff)
        return MatchPrediction(
            home_team_id=home.team_id,
            away_team_id=away.team_id,
            result_label=label,
            confidence=confidence,
            home_win_pct=home_pct,
            draw_pct=draw_pct,
            away_win_pct=away_pct,
            predicted_home_goals=home_goals,
            predicted_away_goals=away_goals,
            strength_diff=diff,
            rationale=". ".join(reasons) + ".",
            reasons=reasons,
        )

    def _reasons(
        self,
        home: TeamPerformanceProfile,
        away: TeamPerformanceProfile,
        diff: float,
    ) -> list[str]:
        """Up to three short reasons; always at least one."""
        reasons: list[str] = []
        if abs(diff) > 1.5:
            stronger = home if diff > 0 else away
            reasons.append(f"{stronger.name} is clearly stronger on current form and rating")
        form_gap = home.recent_form - away.recent_form
        if abs(form_gap) > 0.3:
            better = home if form_gap > 0 else away
            reasons.append(f"{better.name} arrives in better recent form ({better.form_label})")
        if home.attacking_strength > away.defensive_strength + 1:
            reasons.append(f"{home.name}'s attack outscores what {away.name} usually concede")
        elif away.attacking_strength > home.defensive_strength + 1:
            reasons.append(f"{away.name}'s attack outscores what {home.name} usually concede")
        if len(reasons) < 3 and self.home_advantage > 0:
            reasons.append(f"{home.name} plays at home")
        if not reasons:
            reasons.append("The teams are evenly matched")
        return reasons[:3]


def predict_match(
    home: TeamPerformanceProfile,
    away: TeamPerformanceProfile,
    home_advantage: float = DEFAULT_HOME_ADVANTAGE,
) -> MatchPrediction:
    return MatchPredictor(home_advantage).predict(home, away)


def actual_label(result: MatchResult) -> str:
    return {"home": ResultLabel.HOME, "away": ResultLabel.AWAY, "draw": ResultLabel.DRAW}[result.outcome]


def has_clear_pick(prediction: MatchPrediction) -> bool:
    """True when the predicted label holds a strict maximum percentage."""
    pcts = sorted((prediction.home_win_pct, prediction.draw_pct, prediction.away_win_pct), reverse=True)
    return pcts[0] > pcts[1]


def is_prediction_correct(prediction: MatchPrediction, result: MatchResult) -> bool | None:
    """
    None when the match has not been played. A prediction without a clear
    pick (level top percentages) names no outcome and grades as wrong.
    """
    if not result.played:
        return None
    if not has_clear_pick(prediction):
        return False
    return prediction.result_label == actual_label(result)


def prediction_accuracy(pairs: list[tuple[MatchPrediction, MatchResult]]) -> dict[str, Any]:
    """Correct / total over played matches, with a whole-number percentage."""
    graded = [is_prediction_correct(p, r) for p, r in pairs]
    graded = [g for g in graded if g is not None]
    correct = sum(1 for g in graded if g)
    total = len(graded)
    return {
        "correct": correct,
        "total": total,
        "percentage": round(correct / total * 100) if total else 0,
    }
